from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.promohub.schemas.promotions import PromotionItem

CarouselAction = Literal["CREATE", "UPDATE", "REVERT"]


class CarouselUpdateRequest(BaseModel):
    ids: list[str]


class CarouselItemRequest(BaseModel):
    promotion_id: str = Field(..., min_length=1)


class CarouselReorderRequest(BaseModel):
    from_index: int
    to_index: int


class CarouselResponse(BaseModel):
    success: bool = True
    ids: list[str]
    items: list[PromotionItem]
    trace_id: str


class CarouselValidationResponse(BaseModel):
    success: bool = True
    valid: bool
    ids: list[str]
    duplicates: list[str]
    missing: list[str]
    trace_id: str


class CarouselAuditItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: CarouselAction
    user_id: str
    previous_state: list[str]
    new_state: list[str]
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict
    created_at: datetime


class CarouselAuditPagination(BaseModel):
    limit: int
    offset: int
    count: int


class CarouselAuditResponse(BaseModel):
    success: bool = True
    logs: list[CarouselAuditItem]
    pagination: CarouselAuditPagination
    trace_id: str
