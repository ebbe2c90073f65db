from __future__ import annotations

from fastapi import Request

from app.promohub.core.config import settings
from app.promohub.core.context import get_request_context
from app.promohub.services.audit import CarouselAuditLog
from app.promohub.services.listing_cache import ListingCache
from app.promohub.services.promotions import PromotionService


class StoreRegistry:
    """One in-memory promotion service per tenant, alive for the app's lifetime.

    Separate processes each hold their own registry; nothing is synchronized
    between them.
    """

    def __init__(self) -> None:
        self._services: dict[str, PromotionService] = {}
        self.listing_cache = ListingCache()

    def for_tenant(self, tenant_id: str) -> PromotionService:
        service = self._services.get(tenant_id)
        if service is None:
            service = PromotionService(
                tenant_id,
                audit_log=CarouselAuditLog(settings.CAROUSEL_AUDIT_MAX_ENTRIES),
                fallback_actor=settings.APPROVAL_FALLBACK_ACTOR,
            )
            self._services[tenant_id] = service
        return service

    def tenants(self) -> list[str]:
        return sorted(self._services)

    def clear(self) -> None:
        for service in self._services.values():
            service.clear()
        self._services.clear()
        self.listing_cache.clear()


def get_registry(request: Request) -> StoreRegistry:
    return request.app.state.registry


def get_listing_cache(request: Request) -> ListingCache:
    return get_registry(request).listing_cache


def get_promotion_service(request: Request) -> PromotionService:
    context = get_request_context(request)
    return get_registry(request).for_tenant(context.tenant_id)
