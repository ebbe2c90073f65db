from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.promohub.core.error_catalog import PromotionValidationError
from app.promohub.core.timestamps import parse_timestamp
from app.promohub.db.models import DiscountType

MIN_TEXT_LENGTH = 2


@dataclass
class PromotionInput:
    """Caller-supplied promotion fields, loosely typed as they arrive from a request body."""

    name: Any = None
    description: Any = None
    discount_type: Any = None
    discount_value: Any = None
    start_date: Any = None
    end_date: Any = None
    min_purchase_amount: Any = None
    max_discount_amount: Any = None
    usage_limit: Any = None
    applicable_product_ids: Any = field(default_factory=list)


@dataclass(frozen=True)
class NormalizedPromotionInput:
    name: str
    description: str
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    min_purchase_amount: float
    max_discount_amount: float
    usage_limit: int
    applicable_product_ids: tuple[str, ...]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _coerce_number(value: Any) -> float:
    if _is_number(value):
        return value
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return 0
        return 0 if math.isnan(parsed) else parsed
    return 0


def _coerce_count(value: Any) -> int:
    number = _coerce_number(value)
    return int(number) if math.isfinite(number) else 0


def _product_ids(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item is not None)


def _discount_type(value: Any) -> DiscountType | None:
    if isinstance(value, DiscountType):
        return value
    try:
        return DiscountType(value)
    except ValueError:
        return None


def validate_promotion_input(data: PromotionInput) -> NormalizedPromotionInput:
    name = _text(data.name)
    if len(name) < MIN_TEXT_LENGTH:
        raise PromotionValidationError("Name must be at least 2 characters")

    description = _text(data.description)
    if len(description) < MIN_TEXT_LENGTH:
        raise PromotionValidationError("Description must be at least 2 characters")

    discount_type = _discount_type(data.discount_type)
    if discount_type is None:
        raise PromotionValidationError("Discount type must be PERCENTAGE or FIXED_AMOUNT")

    if not _is_number(data.discount_value) or data.discount_value < 0:
        raise PromotionValidationError("Discount value must be a non-negative number")

    start_date = parse_timestamp(data.start_date)
    end_date = parse_timestamp(data.end_date)
    if start_date is None or end_date is None:
        raise PromotionValidationError("Start and end dates must be valid dates")

    if end_date < start_date:
        raise PromotionValidationError("End date must be on or after the start date")

    return NormalizedPromotionInput(
        name=name,
        description=description,
        discount_type=discount_type,
        discount_value=data.discount_value,
        start_date=start_date,
        end_date=end_date,
        min_purchase_amount=_coerce_number(data.min_purchase_amount),
        max_discount_amount=_coerce_number(data.max_discount_amount),
        usage_limit=_coerce_count(data.usage_limit),
        applicable_product_ids=_product_ids(data.applicable_product_ids),
    )
