from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from app.promohub.core.error_catalog import AppError, ErrorCatalog, PromotionNotFoundError
from app.promohub.core.logging import log_audit
from app.promohub.core.metrics import metrics
from app.promohub.core.timestamps import utcnow
from app.promohub.db.models import Actor, ApprovalStatus, CarouselAuditEntry, ProductRef, Promotion
from app.promohub.repos.promotions import DEFAULT_FALLBACK_ACTOR, PromotionStore
from app.promohub.services.audit import AuditContext, CarouselAuditLog
from app.promohub.services.carousel import CarouselCheck, CarouselSelection, CarouselSelector
from app.promohub.services.catalog import ProductCatalog
from app.promohub.services.offers import OfferPage, OfferQuery, list_offer_products
from app.promohub.services.promotion_query import PromotionPage, PromotionQuery, query_promotions
from app.promohub.services.promotion_validation import PromotionInput

logger = logging.getLogger(__name__)

SYSTEM_USER = "system"


class PromotionService:
    def __init__(
        self,
        tenant_id: str,
        *,
        store: PromotionStore | None = None,
        catalog: ProductCatalog | None = None,
        audit_log: CarouselAuditLog | None = None,
        fallback_actor: str = DEFAULT_FALLBACK_ACTOR,
    ):
        self.tenant_id = tenant_id
        self.store = store or PromotionStore(fallback_actor=fallback_actor)
        self.catalog = catalog or ProductCatalog()
        self.audit_log = audit_log or CarouselAuditLog()
        self.carousel = CarouselSelector(self.store)

    def _audit(self, action: str, promotion_id: str | None, **fields) -> None:
        metrics.increment_promotion_mutation(action)
        log_audit(
            logger,
            f"promotions.{action}",
            tenant_id=self.tenant_id,
            entity_type="PROMOTION",
            entity_id=promotion_id,
            **fields,
        )

    def _enrich(self, promotion: Promotion) -> Promotion:
        enriched = self.catalog.enrich(promotion.applicable_products)
        if enriched != promotion.applicable_products:
            self.store.set_applicable_products(promotion.id, enriched)
        return promotion

    def list_promotions(self) -> list[Promotion]:
        return self.store.list()

    def get_promotion(self, promotion_id: str) -> Promotion:
        promotion = self.store.get(promotion_id)
        if promotion is None:
            raise PromotionNotFoundError(promotion_id)
        return promotion

    def query_promotions(self, params: PromotionQuery) -> PromotionPage:
        return query_promotions(self.store.list(), params)

    def create_promotion(self, data: PromotionInput) -> Promotion:
        promotion = self._enrich(self.store.create(data))
        self._audit("create", promotion.id, name=promotion.name)
        return promotion

    def update_promotion(self, promotion_id: str, data: PromotionInput) -> Promotion:
        promotion = self._enrich(self.store.update(promotion_id, data))
        self._audit("update", promotion.id, name=promotion.name)
        return promotion

    def delete_promotion(self, promotion_id: str) -> bool:
        deleted = self.store.delete(promotion_id)
        if deleted:
            self._audit("delete", promotion_id)
        return deleted

    def toggle_promotion_status(self, promotion_id: str, is_active: bool) -> Promotion:
        promotion = self.store.toggle_active(promotion_id, is_active)
        self._audit("toggle_status", promotion_id, is_active=promotion.is_active)
        return promotion

    def set_promotion_approval(
        self,
        promotion_id: str,
        status: ApprovalStatus,
        comment: str | None = None,
        actor: Actor | None = None,
    ) -> Promotion:
        promotion = self.store.set_approval(promotion_id, status, comment, actor)
        self._audit(
            "approval",
            promotion_id,
            approval_status=promotion.approval_status.value,
            approved_by=promotion.approved_by,
        )
        return promotion

    def get_promotion_products(self, promotion_id: str) -> list[ProductRef]:
        return list(self.get_promotion(promotion_id).applicable_products)

    def add_promotion_products(self, promotion_id: str, product_ids: Iterable[str]) -> Promotion:
        promotion = self.get_promotion(promotion_id)
        products = list(promotion.applicable_products)
        known = {product.id for product in products}
        for product_id in product_ids:
            if product_id not in known:
                known.add(product_id)
                products.append(ProductRef(id=product_id))
        promotion = self.store.set_applicable_products(promotion_id, self.catalog.enrich(products))
        self._audit("products_add", promotion_id, product_count=len(promotion.applicable_products))
        return promotion

    def remove_promotion_products(self, promotion_id: str, product_ids: Iterable[str]) -> Promotion:
        promotion = self.get_promotion(promotion_id)
        removed = set(product_ids)
        promotion = self.store.set_applicable_products(
            promotion_id,
            [product for product in promotion.applicable_products if product.id not in removed],
        )
        self._audit("products_remove", promotion_id, product_count=len(promotion.applicable_products))
        return promotion

    def count_promotion_products(self, promotion_ids: Iterable[str]) -> dict[str, int]:
        counts = {}
        for promotion_id in promotion_ids:
            promotion = self.store.get(promotion_id)
            counts[promotion_id] = len(promotion.applicable_products) if promotion else 0
        return counts

    def upsert_catalog_products(self, products: Iterable[ProductRef]) -> list[ProductRef]:
        stored = self.catalog.upsert(products)
        for promotion in self.store.snapshot():
            self._enrich(promotion)
        return stored

    def list_offer_products(self, params: OfferQuery, now: datetime | None = None) -> OfferPage:
        return list_offer_products(self.store.list(), self.catalog, params, now or utcnow())

    def get_carousel_ids(self) -> list[str]:
        return self.carousel.get_carousel_ids()

    def get_carousel_promotions(self) -> list[Promotion]:
        return self.carousel.get_carousel_promotions()

    def get_public_carousel(self) -> list[Promotion]:
        return [promotion for promotion in self.carousel.get_carousel_promotions() if promotion.is_active]

    def validate_carousel(self, ids: Iterable[str]) -> CarouselCheck:
        return self.carousel.normalize(ids)

    def set_carousel(
        self,
        ids: Iterable[str],
        context: AuditContext | None = None,
        *,
        action: str | None = None,
        metadata: dict | None = None,
    ) -> CarouselSelection:
        previous = self.carousel.get_carousel_ids()
        selection = self.carousel.set_carousel(ids)
        action = action or ("CREATE" if not previous else "UPDATE")
        self.audit_log.record(
            action=action,
            context=context or AuditContext(user_id=SYSTEM_USER),
            previous_state=previous,
            new_state=selection.ids,
            metadata=metadata,
        )
        metrics.increment_carousel_update(action)
        log_audit(
            logger,
            "carousel.save",
            tenant_id=self.tenant_id,
            carousel_action=action,
            previous_state=previous,
            new_state=selection.ids,
        )
        return selection

    def add_to_carousel(self, promotion_id: str, context: AuditContext | None = None) -> CarouselSelection:
        return self.set_carousel([*self.carousel.get_carousel_ids(), promotion_id], context)

    def remove_from_carousel(self, promotion_id: str, context: AuditContext | None = None) -> CarouselSelection:
        ids = [current for current in self.carousel.get_carousel_ids() if current != promotion_id]
        return self.set_carousel(ids, context)

    def reorder_carousel(self, from_index: int, to_index: int, context: AuditContext | None = None) -> CarouselSelection:
        ids = self.carousel.get_carousel_ids()
        if not (0 <= from_index < len(ids)) or not (0 <= to_index < len(ids)):
            raise AppError(
                ErrorCatalog.CAROUSEL_INVALID_INDEX,
                details={"from_index": from_index, "to_index": to_index, "size": len(ids)},
            )
        moved = ids.pop(from_index)
        ids.insert(to_index, moved)
        return self.set_carousel(ids, context)

    def get_carousel_audit(self, *, limit: int = 50, offset: int = 0) -> list[CarouselAuditEntry]:
        return self.audit_log.list(limit=limit, offset=offset)

    def revert_carousel(self, version_id: str, context: AuditContext | None = None) -> CarouselSelection:
        entry = self.audit_log.get(version_id)
        if entry is None:
            raise AppError(ErrorCatalog.CAROUSEL_VERSION_NOT_FOUND, details={"version_id": version_id})
        return self.set_carousel(
            entry.previous_state,
            context,
            action="REVERT",
            metadata={"reverted_from_version": entry.id, "reverted_from_action": entry.action},
        )

    def clear(self) -> None:
        self.store.clear()
        self.catalog.clear()
        self.audit_log.clear()
