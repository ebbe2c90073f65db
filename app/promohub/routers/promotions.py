from __future__ import annotations

import time
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from app.promohub.core.config import settings
from app.promohub.core.context import get_request_context
from app.promohub.core.error_catalog import AppError, ErrorCatalog
from app.promohub.core.metrics import metrics
from app.promohub.core.timestamps import parse_timestamp
from app.promohub.db.models import Actor, ApprovalStatus, ProductRef, Promotion
from app.promohub.db.registry import get_listing_cache, get_promotion_service
from app.promohub.routers.carousel import PUBLIC_CACHE_CONTROL
from app.promohub.schemas.errors import ERROR_RESPONSES
from app.promohub.schemas.promotions import (
    CatalogResponse,
    CatalogUpsertRequest,
    OfferPagination,
    OfferProductItem,
    OfferProductsResponse,
    OfferPromotionItem,
    ProductCountsRequest,
    ProductCountsResponse,
    ProductItem,
    PromotionApprovalRequest,
    PromotionDeleteResponse,
    PromotionItem,
    PromotionListResponse,
    PromotionProductsRequest,
    PromotionProductsResponse,
    PromotionResponse,
    PromotionStatusRequest,
    PromotionWriteRequest,
)
from app.promohub.services.listing_cache import ListingCache, listing_key, listing_ttl
from app.promohub.services.offers import OfferProduct, OfferQuery, OfferSort
from app.promohub.services.promotion_query import PromotionQuery
from app.promohub.services.promotions import PromotionService

router = APIRouter()
catalog_router = APIRouter()


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def _promotion_item(promotion: Promotion) -> PromotionItem:
    return PromotionItem.model_validate(promotion)


def _promotion_response(request: Request, promotion: Promotion) -> PromotionResponse:
    return PromotionResponse(data=_promotion_item(promotion), trace_id=_trace_id(request))


def _parse_query_date(value: str | None, field: str):
    if value is None or not value.strip():
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"errors": [{"field": field, "message": "Invalid date", "type": "date_parsing", "input": value}]},
            message=f"Invalid date for {field}",
        )
    return parsed


def _request_actor(request: Request) -> Actor | None:
    context = get_request_context(request)
    if not context.user_id and not context.email:
        return None
    return Actor(id=context.user_id, email=context.email)


def _invalidate(request: Request, cache: ListingCache) -> None:
    cache.invalidate_tenant(get_request_context(request).tenant_id)


@router.get("", response_model=PromotionListResponse, responses=ERROR_RESPONSES)
def list_promotions(
    request: Request,
    response: Response,
    page: int = Query(1),
    limit: int = Query(settings.PROMOTIONS_DEFAULT_PAGE_SIZE),
    search: str | None = None,
    status: Literal["active", "inactive", "all"] = "all",
    category: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    refresh: bool = False,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    query = PromotionQuery.from_request(
        page=page,
        limit=limit,
        max_limit=settings.PROMOTIONS_MAX_PAGE_SIZE,
        search=search,
        status=status,
        category=category,
        date_from=_parse_query_date(date_from, "date_from"),
        date_to=_parse_query_date(date_to, "date_to"),
    )
    key = listing_key(service.tenant_id, query)

    if settings.PROMOTIONS_CACHE_ENABLED and not refresh:
        cached = cache.get(key)
        if cached is not None:
            metrics.record_listing_cache(hit=True)
            response.headers.update(cached.headers)
            response.headers["X-Cache"] = "HIT"
            return {**cached.value, "trace_id": _trace_id(request)}

    started = time.perf_counter()
    result = service.query_promotions(query)
    payload = PromotionListResponse(
        data=[_promotion_item(promotion) for promotion in result.items],
        count=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
        trace_id=_trace_id(request),
    )
    headers = {
        "X-Source": "memory",
        "X-Duration-Ms": str(round((time.perf_counter() - started) * 1000, 2)),
    }
    if settings.PROMOTIONS_CACHE_ENABLED:
        metrics.record_listing_cache(hit=False)
        cache.set(key, payload.model_dump(mode="json"), ttl_seconds=listing_ttl(query), headers=headers)
    response.headers.update(headers)
    response.headers["X-Cache"] = "MISS"
    return payload


@router.post("", response_model=PromotionResponse, status_code=201, responses=ERROR_RESPONSES)
def create_promotion(
    request: Request,
    payload: PromotionWriteRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.create_promotion(payload.to_input())
    _invalidate(request, cache)
    return _promotion_response(request, promotion)


@router.post("/batch/product-counts", response_model=ProductCountsResponse)
def batch_product_counts(
    request: Request,
    payload: ProductCountsRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    return ProductCountsResponse(
        data=service.count_promotion_products(payload.promotion_ids),
        trace_id=_trace_id(request),
    )


def _offer_item(offer: OfferProduct) -> OfferProductItem:
    promotion = offer.promotion
    return OfferProductItem(
        product_id=offer.product.id,
        name=offer.product.name,
        category=offer.product.category,
        sale_price=offer.sale_price,
        effective_offer_price=offer.effective_offer_price,
        discount_percent=offer.discount_percent,
        promotion=OfferPromotionItem(
            id=promotion.id,
            name=promotion.name,
            discount_type=promotion.discount_type,
            discount_value=promotion.discount_value,
            end_date=promotion.end_date,
        ),
    )


@router.get("/offers-products", response_model=OfferProductsResponse)
def list_offer_products(
    request: Request,
    response: Response,
    limit: int = Query(24),
    offset: int = Query(0),
    category: str | None = None,
    q: str | None = None,
    sort: OfferSort = "best_savings",
    service: PromotionService = Depends(get_promotion_service),
):
    query = OfferQuery.from_request(limit=limit, offset=offset, category=category, search=q, sort=sort)
    result = service.list_offer_products(query)
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return OfferProductsResponse(
        data=[_offer_item(offer) for offer in result.items],
        count=result.total,
        pagination=OfferPagination(
            limit=result.limit,
            offset=result.offset,
            total=result.total,
            pages=result.pages,
        ),
        trace_id=_trace_id(request),
    )


@router.get("/{promotion_id}", response_model=PromotionResponse, responses=ERROR_RESPONSES)
def get_promotion(
    request: Request,
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
):
    return _promotion_response(request, service.get_promotion(promotion_id))


@router.put("/{promotion_id}", response_model=PromotionResponse, responses=ERROR_RESPONSES)
def update_promotion(
    request: Request,
    promotion_id: str,
    payload: PromotionWriteRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.update_promotion(promotion_id, payload.to_input())
    _invalidate(request, cache)
    return _promotion_response(request, promotion)


@router.delete("/{promotion_id}", response_model=PromotionDeleteResponse, responses=ERROR_RESPONSES)
def delete_promotion(
    request: Request,
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    if not service.delete_promotion(promotion_id):
        raise AppError(ErrorCatalog.PROMOTION_NOT_FOUND, details={"promotion_id": promotion_id})
    _invalidate(request, cache)
    return PromotionDeleteResponse(message="Promotion deleted", trace_id=_trace_id(request))


@router.patch("/{promotion_id}/status", response_model=PromotionResponse, responses=ERROR_RESPONSES)
def toggle_promotion_status(
    request: Request,
    promotion_id: str,
    payload: PromotionStatusRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.toggle_promotion_status(promotion_id, payload.is_active)
    _invalidate(request, cache)
    return _promotion_response(request, promotion)


@router.patch("/{promotion_id}/approval", response_model=PromotionResponse, responses=ERROR_RESPONSES)
def set_promotion_approval(
    request: Request,
    promotion_id: str,
    payload: PromotionApprovalRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.set_promotion_approval(
        promotion_id,
        ApprovalStatus(payload.status),
        payload.comment,
        _request_actor(request),
    )
    _invalidate(request, cache)
    return _promotion_response(request, promotion)


def _products_response(request: Request, promotion_id: str, products: list[ProductRef]) -> PromotionProductsResponse:
    return PromotionProductsResponse(
        promotion_id=promotion_id,
        data=[ProductItem.model_validate(product) for product in products],
        count=len(products),
        trace_id=_trace_id(request),
    )


@router.get("/{promotion_id}/products", response_model=PromotionProductsResponse, responses=ERROR_RESPONSES)
def get_promotion_products(
    request: Request,
    promotion_id: str,
    service: PromotionService = Depends(get_promotion_service),
):
    return _products_response(request, promotion_id, service.get_promotion_products(promotion_id))


@router.post("/{promotion_id}/products", response_model=PromotionProductsResponse, responses=ERROR_RESPONSES)
def add_promotion_products(
    request: Request,
    promotion_id: str,
    payload: PromotionProductsRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.add_promotion_products(promotion_id, payload.product_ids)
    _invalidate(request, cache)
    return _products_response(request, promotion_id, promotion.applicable_products)


@router.delete("/{promotion_id}/products", response_model=PromotionProductsResponse, responses=ERROR_RESPONSES)
def remove_promotion_products(
    request: Request,
    promotion_id: str,
    payload: PromotionProductsRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    promotion = service.remove_promotion_products(promotion_id, payload.product_ids)
    _invalidate(request, cache)
    return _products_response(request, promotion_id, promotion.applicable_products)


@catalog_router.get("/products", response_model=CatalogResponse)
def list_catalog_products(
    request: Request,
    service: PromotionService = Depends(get_promotion_service),
):
    products = service.catalog.list()
    return CatalogResponse(
        data=[ProductItem.model_validate(product) for product in products],
        count=len(products),
        trace_id=_trace_id(request),
    )


@catalog_router.put("/products", response_model=CatalogResponse)
def upsert_catalog_products(
    request: Request,
    payload: CatalogUpsertRequest,
    service: PromotionService = Depends(get_promotion_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    stored = service.upsert_catalog_products(
        ProductRef(id=item.id, name=item.name, price=item.price, category=item.category)
        for item in payload.products
    )
    _invalidate(request, cache)
    return CatalogResponse(
        data=[ProductItem.model_validate(product) for product in stored],
        count=len(stored),
        trace_id=_trace_id(request),
    )
