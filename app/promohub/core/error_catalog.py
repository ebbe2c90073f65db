from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    PROMOTION_VALIDATION_ERROR = ErrorDefinition(
        "PROMOTION_VALIDATION_ERROR",
        "Invalid promotion",
        status.HTTP_400_BAD_REQUEST,
    )
    PROMOTION_NOT_FOUND = ErrorDefinition(
        "PROMOTION_NOT_FOUND",
        "Promotion not found",
        status.HTTP_404_NOT_FOUND,
    )
    CAROUSEL_VERSION_NOT_FOUND = ErrorDefinition(
        "CAROUSEL_VERSION_NOT_FOUND",
        "Carousel version not found",
        status.HTTP_404_NOT_FOUND,
    )
    CAROUSEL_INVALID_INDEX = ErrorDefinition(
        "CAROUSEL_INVALID_INDEX",
        "Invalid index for reordering",
        status.HTTP_400_BAD_REQUEST,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None, message: str | None = None):
        self.error = error
        self.details = details
        self.message = message or error.message
        super().__init__(self.message)


class PromotionValidationError(AppError):
    """Raised by the validation gate before any store mutation."""

    def __init__(self, reason: str):
        super().__init__(ErrorCatalog.PROMOTION_VALIDATION_ERROR, details={"reason": reason}, message=reason)
        self.reason = reason


class PromotionNotFoundError(AppError):
    def __init__(self, promotion_id: str):
        super().__init__(ErrorCatalog.PROMOTION_NOT_FOUND, details={"promotion_id": promotion_id})
        self.promotion_id = promotion_id
