from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from app.promohub.core.timestamps import utcnow


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ProductRef:
    id: str
    name: str | None = None
    price: float | None = None
    category: str | None = None


@dataclass(frozen=True)
class Actor:
    id: str | None = None
    email: str | None = None


@dataclass
class Promotion:
    name: str
    description: str
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_active: bool = True
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approval_comment: str = ""
    approved_by: str | None = None
    approved_at: datetime | None = None
    min_purchase_amount: float = 0
    max_discount_amount: float = 0
    usage_limit: int = 0
    usage_count: int = 0
    applicable_products: list[ProductRef] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CarouselAuditEntry:
    action: str
    user_id: str
    previous_state: list[str]
    new_state: list[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
