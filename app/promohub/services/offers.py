from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from app.promohub.db.models import DiscountType, ProductRef, Promotion
from app.promohub.repos.promotions import collation_key
from app.promohub.services.catalog import ProductCatalog

OfferSort = Literal["best_savings", "highest_discount", "ending_soon", "price_low_high", "price_high_low"]

DEFAULT_OFFER_LIMIT = 24
MAX_OFFER_LIMIT = 100


@dataclass(frozen=True)
class OfferQuery:
    limit: int = DEFAULT_OFFER_LIMIT
    offset: int = 0
    category: str = ""
    search: str = ""
    sort: OfferSort = "best_savings"

    @classmethod
    def from_request(
        cls,
        *,
        limit: int,
        offset: int,
        category: str | None = None,
        search: str | None = None,
        sort: OfferSort = "best_savings",
    ) -> "OfferQuery":
        return cls(
            limit=max(1, min(MAX_OFFER_LIMIT, limit)),
            offset=max(0, offset),
            category=(category or "").strip(),
            search=(search or "").strip(),
            sort=sort,
        )


@dataclass(frozen=True)
class OfferProduct:
    product: ProductRef
    promotion: Promotion
    sale_price: float
    effective_offer_price: float
    discount_percent: int

    @property
    def savings(self) -> float:
        return max(0.0, self.sale_price - self.effective_offer_price)


@dataclass(frozen=True)
class OfferPage:
    items: list[OfferProduct]
    total: int
    limit: int
    offset: int
    pages: int


def is_running(promotion: Promotion, now: datetime) -> bool:
    return promotion.is_active and promotion.start_date <= now <= promotion.end_date


def discounted_price(price: float, promotion: Promotion) -> float:
    value = max(0.0, promotion.discount_value)
    if promotion.discount_type == DiscountType.PERCENTAGE:
        return max(0.0, price * (1 - min(100.0, value) / 100))
    return max(0.0, price - value)


def _offer(product: ProductRef, promotion: Promotion) -> OfferProduct:
    price = float(product.price or 0)
    effective = discounted_price(price, promotion)
    percent = round((1 - effective / price) * 100) if price > 0 else 0
    return OfferProduct(
        product=product,
        promotion=promotion,
        sale_price=price,
        effective_offer_price=effective,
        discount_percent=percent,
    )


_SORT_KEYS = {
    "best_savings": (lambda offer: offer.savings, True),
    "highest_discount": (lambda offer: offer.discount_percent, True),
    "ending_soon": (lambda offer: offer.promotion.end_date, False),
    "price_low_high": (lambda offer: offer.effective_offer_price, False),
    "price_high_low": (lambda offer: offer.effective_offer_price, True),
}


def list_offer_products(
    promotions: Iterable[Promotion],
    catalog: ProductCatalog,
    params: OfferQuery,
    now: datetime,
) -> OfferPage:
    """Catalog products linked to promotions running at ``now``, one row per product.

    A product linked to several running promotions is priced with the first
    one in name order. Products missing from the catalog are left out.
    """
    running = sorted(
        (promotion for promotion in promotions if is_running(promotion, now)),
        key=lambda promotion: collation_key(promotion.name),
    )
    offers: dict[str, OfferProduct] = {}
    for promotion in running:
        for ref in promotion.applicable_products:
            if ref.id in offers:
                continue
            product = catalog.get(ref.id)
            if product is not None:
                offers[ref.id] = _offer(product, promotion)

    rows = list(offers.values())
    category = params.category.lower()
    if category:
        rows = [offer for offer in rows if (offer.product.category or "").lower() == category]
    search = params.search.lower()
    if search:
        rows = [offer for offer in rows if search in (offer.product.name or "").lower()]

    key, descending = _SORT_KEYS[params.sort]
    rows.sort(key=key, reverse=descending)

    limit = max(1, params.limit)
    offset = max(0, params.offset)
    total = len(rows)
    return OfferPage(
        items=rows[offset : offset + limit],
        total=total,
        limit=limit,
        offset=offset,
        pages=math.ceil(total / limit),
    )
