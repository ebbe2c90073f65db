from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.promohub.db.models import ApprovalStatus, DiscountType
from app.promohub.services.promotion_validation import PromotionInput


class ProductItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1)
    name: str | None = None
    price: float | None = None
    category: str | None = None


class PromotionWriteRequest(BaseModel):
    """Loosely typed on purpose: field rules are enforced by the promotion validation gate."""

    name: Any = None
    description: Any = None
    discount_type: Any = None
    discount_value: Any = None
    start_date: Any = None
    end_date: Any = None
    min_purchase_amount: Any = None
    max_discount_amount: Any = None
    usage_limit: Any = None
    applicable_product_ids: list[Any] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Promo Activa Verano",
                    "description": "Descuento de temporada",
                    "discount_type": "PERCENTAGE",
                    "discount_value": 15,
                    "start_date": "2025-06-01",
                    "end_date": "2025-08-31",
                    "applicable_product_ids": ["sku-1", "sku-2"],
                }
            ]
        }
    }

    def to_input(self) -> PromotionInput:
        return PromotionInput(
            name=self.name,
            description=self.description,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            start_date=self.start_date,
            end_date=self.end_date,
            min_purchase_amount=self.min_purchase_amount,
            max_discount_amount=self.max_discount_amount,
            usage_limit=self.usage_limit,
            applicable_product_ids=self.applicable_product_ids,
        )


class PromotionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    is_active: bool
    approval_status: ApprovalStatus
    approval_comment: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    min_purchase_amount: float
    max_discount_amount: float
    usage_limit: int
    usage_count: int
    applicable_products: list[ProductItem]
    created_at: datetime


class PromotionResponse(BaseModel):
    success: bool = True
    data: PromotionItem
    trace_id: str


class PromotionListResponse(BaseModel):
    success: bool = True
    data: list[PromotionItem]
    count: int
    page: int
    limit: int
    pages: int
    trace_id: str


class PromotionDeleteResponse(BaseModel):
    success: bool = True
    message: str
    trace_id: str


class PromotionStatusRequest(BaseModel):
    is_active: bool


class PromotionApprovalRequest(BaseModel):
    status: Literal["pending", "approved", "rejected"]
    comment: str | None = None


class PromotionProductsRequest(BaseModel):
    product_ids: list[str] = Field(default_factory=list)


class PromotionProductsResponse(BaseModel):
    success: bool = True
    promotion_id: str
    data: list[ProductItem]
    count: int
    trace_id: str


class ProductCountsRequest(BaseModel):
    promotion_ids: list[str] = Field(default_factory=list)


class ProductCountsResponse(BaseModel):
    success: bool = True
    data: dict[str, int]
    trace_id: str


class CatalogUpsertRequest(BaseModel):
    products: list[ProductItem]


class CatalogResponse(BaseModel):
    success: bool = True
    data: list[ProductItem]
    count: int
    trace_id: str


class OfferPromotionItem(BaseModel):
    id: str
    name: str
    discount_type: DiscountType
    discount_value: float
    end_date: datetime


class OfferProductItem(BaseModel):
    product_id: str
    name: str | None = None
    category: str | None = None
    sale_price: float
    effective_offer_price: float
    discount_percent: int
    promotion: OfferPromotionItem


class OfferPagination(BaseModel):
    limit: int
    offset: int
    total: int
    pages: int


class OfferProductsResponse(BaseModel):
    success: bool = True
    data: list[OfferProductItem]
    count: int
    pagination: OfferPagination
    trace_id: str
