from __future__ import annotations

import json
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from app.promohub.core.timestamps import parse_timestamp
from app.promohub.db.models import Promotion
from app.promohub.repos.promotions import collation_key

StatusFilter = Literal["active", "inactive", "all"]


@dataclass(frozen=True)
class PromotionQuery:
    page: int = 1
    limit: int = 20
    search: str = ""
    status: StatusFilter = "all"
    category: str = ""
    date_from: datetime | None = None
    date_to: datetime | None = None

    @classmethod
    def from_request(
        cls,
        *,
        page: int,
        limit: int,
        max_limit: int,
        search: str | None = None,
        status: StatusFilter = "all",
        category: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> "PromotionQuery":
        return cls(
            page=max(1, page),
            limit=max(1, min(max_limit, limit)),
            search=(search or "").strip(),
            status=status,
            category=(category or "").strip(),
            date_from=date_from,
            date_to=date_to,
        )

    def cache_key(self) -> str:
        return json.dumps(
            [
                self.page,
                self.limit,
                self.search,
                self.status,
                self.category,
                self.date_from.isoformat() if self.date_from else "",
                self.date_to.isoformat() if self.date_to else "",
            ],
            ensure_ascii=False,
        )


@dataclass(frozen=True)
class PromotionPage:
    items: list[Promotion]
    total: int
    page: int
    limit: int
    pages: int


def intersects(
    start_date: datetime,
    end_date: datetime,
    date_from: datetime | None,
    date_to: datetime | None,
) -> bool:
    if date_from is not None and end_date < date_from:
        return False
    if date_to is not None and start_date > date_to:
        return False
    return True


def _matches_search(promotion: Promotion, term: str) -> bool:
    return term in promotion.name.lower() or term in promotion.id.lower()


def _matches_category(promotion: Promotion, term: str) -> bool:
    return any((product.category or "").lower() == term for product in promotion.applicable_products)


def query_promotions(snapshot: Iterable[Promotion], params: PromotionQuery) -> PromotionPage:
    rows = sorted(snapshot, key=lambda promotion: collation_key(promotion.name))

    search = params.search.strip().lower()
    if search:
        rows = [promotion for promotion in rows if _matches_search(promotion, search)]

    if params.status != "all":
        wanted = params.status == "active"
        rows = [promotion for promotion in rows if promotion.is_active == wanted]

    category = params.category.strip().lower()
    if category:
        rows = [promotion for promotion in rows if _matches_category(promotion, category)]

    date_from = parse_timestamp(params.date_from)
    date_to = parse_timestamp(params.date_to)
    if date_from is not None or date_to is not None:
        rows = [
            promotion
            for promotion in rows
            if intersects(promotion.start_date, promotion.end_date, date_from, date_to)
        ]

    limit = max(1, params.limit)
    total = len(rows)
    pages = max(1, math.ceil(total / limit))
    page = min(max(1, params.page), pages)
    start = (page - 1) * limit
    return PromotionPage(
        items=rows[start : start + limit],
        total=total,
        page=page,
        limit=limit,
        pages=pages,
    )
