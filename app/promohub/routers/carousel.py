from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, Response

from app.promohub.core.context import get_request_context
from app.promohub.core.logging import log_json
from app.promohub.db.models import Promotion
from app.promohub.db.registry import get_promotion_service
from app.promohub.schemas.carousel import (
    CarouselAuditItem,
    CarouselAuditPagination,
    CarouselAuditResponse,
    CarouselItemRequest,
    CarouselReorderRequest,
    CarouselResponse,
    CarouselUpdateRequest,
    CarouselValidationResponse,
)
from app.promohub.schemas.errors import ERROR_RESPONSES
from app.promohub.schemas.promotions import PromotionItem
from app.promohub.services.audit import AuditContext
from app.promohub.services.carousel import CarouselSelection
from app.promohub.services.promotions import SYSTEM_USER, PromotionService

router = APIRouter()
logger = logging.getLogger(__name__)

PUBLIC_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def _audit_context(request: Request) -> AuditContext:
    context = get_request_context(request)
    return AuditContext(
        user_id=context.user_id or context.email or SYSTEM_USER,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
    )


def _carousel_response(request: Request, ids: list[str], items: list[Promotion]) -> CarouselResponse:
    return CarouselResponse(
        ids=ids,
        items=[PromotionItem.model_validate(promotion) for promotion in items],
        trace_id=_trace_id(request),
    )


def _selection_response(request: Request, selection: CarouselSelection) -> CarouselResponse:
    return _carousel_response(request, selection.ids, selection.items)


@router.get("", response_model=CarouselResponse)
def get_carousel(request: Request, service: PromotionService = Depends(get_promotion_service)):
    return _carousel_response(request, service.get_carousel_ids(), service.get_carousel_promotions())


@router.put("", response_model=CarouselResponse, responses=ERROR_RESPONSES)
def save_carousel(
    request: Request,
    payload: CarouselUpdateRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    selection = service.set_carousel(payload.ids, _audit_context(request))
    return _selection_response(request, selection)


@router.get("/public", response_model=CarouselResponse)
def get_public_carousel(
    request: Request,
    response: Response,
    service: PromotionService = Depends(get_promotion_service),
):
    items = service.get_public_carousel()
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return _carousel_response(request, [promotion.id for promotion in items], items)


@router.post("/validate", response_model=CarouselValidationResponse, responses=ERROR_RESPONSES)
def validate_carousel(
    request: Request,
    payload: CarouselUpdateRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    check = service.validate_carousel(payload.ids)
    return CarouselValidationResponse(
        valid=check.valid,
        ids=check.ids,
        duplicates=check.duplicates,
        missing=check.missing,
        trace_id=_trace_id(request),
    )


@router.get("/audit", response_model=CarouselAuditResponse)
def get_carousel_audit(
    request: Request,
    limit: int = Query(50),
    offset: int = Query(0),
    service: PromotionService = Depends(get_promotion_service),
):
    limit = max(1, min(100, limit))
    offset = max(0, offset)
    logs = service.get_carousel_audit(limit=limit, offset=offset)
    return CarouselAuditResponse(
        logs=[CarouselAuditItem.model_validate(entry) for entry in logs],
        pagination=CarouselAuditPagination(limit=limit, offset=offset, count=len(logs)),
        trace_id=_trace_id(request),
    )


@router.post("/revert/{version_id}", response_model=CarouselResponse, responses=ERROR_RESPONSES)
def revert_carousel(
    request: Request,
    version_id: str,
    service: PromotionService = Depends(get_promotion_service),
):
    selection = service.revert_carousel(version_id, _audit_context(request))
    log_json(
        logger,
        {
            "event": "carousel_reverted",
            "version_id": version_id,
            "trace_id": _trace_id(request),
            "tenant_id": service.tenant_id,
        },
    )
    return _selection_response(request, selection)


@router.post("/items", response_model=CarouselResponse, responses=ERROR_RESPONSES)
def add_carousel_item(
    request: Request,
    payload: CarouselItemRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    return _selection_response(request, service.add_to_carousel(payload.promotion_id, _audit_context(request)))


@router.delete("/items/{promotion_id}", response_model=CarouselResponse, responses=ERROR_RESPONSES)
def remove_carousel_item(
    request: Request,
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
):
    return _selection_response(request, service.remove_from_carousel(promotion_id, _audit_context(request)))


@router.post("/reorder", response_model=CarouselResponse, responses=ERROR_RESPONSES)
def reorder_carousel(
    request: Request,
    payload: CarouselReorderRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    selection = service.reorder_carousel(payload.from_index, payload.to_index, _audit_context(request))
    return _selection_response(request, selection)
