from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from dataclasses import replace

from app.promohub.core.error_catalog import PromotionNotFoundError
from app.promohub.core.timestamps import utcnow
from app.promohub.db.models import Actor, ApprovalStatus, ProductRef, Promotion
from app.promohub.services.promotion_validation import PromotionInput, validate_promotion_input

DEFAULT_FALLBACK_ACTOR = "unknown"


def collation_key(text: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering key, original text breaking ties."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), text


class PromotionStore:
    """In-process promotion records for one tenant.

    The store owns its records; callers get the stored objects back but are
    expected to mutate them only through the store's operations.
    """

    def __init__(self, *, fallback_actor: str = DEFAULT_FALLBACK_ACTOR):
        self.fallback_actor = fallback_actor
        self._promotions: list[Promotion] = []
        self.carousel_ids: list[str] = []

    def _find(self, promotion_id: str) -> Promotion | None:
        for promotion in self._promotions:
            if promotion.id == promotion_id:
                return promotion
        return None

    def _require(self, promotion_id: str) -> Promotion:
        promotion = self._find(promotion_id)
        if promotion is None:
            raise PromotionNotFoundError(promotion_id)
        return promotion

    def get(self, promotion_id: str) -> Promotion | None:
        return self._find(promotion_id)

    def exists(self, promotion_id: str) -> bool:
        return self._find(promotion_id) is not None

    def snapshot(self) -> list[Promotion]:
        return list(self._promotions)

    def list(self) -> list[Promotion]:
        return sorted(self._promotions, key=lambda promotion: collation_key(promotion.name))

    def create(self, data: PromotionInput) -> Promotion:
        normalized = validate_promotion_input(data)
        promotion = Promotion(
            name=normalized.name,
            description=normalized.description,
            discount_type=normalized.discount_type,
            discount_value=normalized.discount_value,
            start_date=normalized.start_date,
            end_date=normalized.end_date,
            min_purchase_amount=normalized.min_purchase_amount,
            max_discount_amount=normalized.max_discount_amount,
            usage_limit=normalized.usage_limit,
            applicable_products=[ProductRef(id=product_id) for product_id in normalized.applicable_product_ids],
        )
        self._promotions.append(promotion)
        return promotion

    def update(self, promotion_id: str, data: PromotionInput) -> Promotion:
        promotion = self._require(promotion_id)
        normalized = validate_promotion_input(data)
        promotion.name = normalized.name
        promotion.description = normalized.description
        promotion.discount_type = normalized.discount_type
        promotion.discount_value = normalized.discount_value
        promotion.start_date = normalized.start_date
        promotion.end_date = normalized.end_date
        promotion.min_purchase_amount = normalized.min_purchase_amount
        promotion.max_discount_amount = normalized.max_discount_amount
        promotion.usage_limit = normalized.usage_limit
        promotion.applicable_products = [
            ProductRef(id=product_id) for product_id in normalized.applicable_product_ids
        ]
        return promotion

    def delete(self, promotion_id: str) -> bool:
        promotion = self._find(promotion_id)
        if promotion is None:
            return False
        self._promotions.remove(promotion)
        return True

    def toggle_active(self, promotion_id: str, is_active: bool) -> Promotion:
        promotion = self._require(promotion_id)
        promotion.is_active = bool(is_active)
        return promotion

    def set_approval(
        self,
        promotion_id: str,
        status: ApprovalStatus,
        comment: str | None = None,
        actor: Actor | None = None,
    ) -> Promotion:
        promotion = self._require(promotion_id)
        status = ApprovalStatus(status)
        promotion.approval_status = status
        promotion.approval_comment = comment or ""
        if status == ApprovalStatus.APPROVED:
            promotion.approved_by = self._actor_label(actor)
            promotion.approved_at = utcnow()
        else:
            promotion.approved_by = None
            promotion.approved_at = None
        return promotion

    def _actor_label(self, actor: Actor | None) -> str:
        if actor is not None:
            if actor.email:
                return actor.email
            if actor.id:
                return actor.id
        return self.fallback_actor

    def set_applicable_products(self, promotion_id: str, products: Iterable[ProductRef]) -> Promotion:
        promotion = self._require(promotion_id)
        promotion.applicable_products = [replace(product) for product in products]
        return promotion

    def clear(self) -> None:
        self._promotions.clear()
        self.carousel_ids.clear()
