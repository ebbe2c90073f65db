from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str
    details: dict | None = None
    trace_id: str | None = None


class ApiValidationErrorItem(BaseModel):
    field: str | None = None
    message: str
    type: str
    loc: list[str | int] | None = None
    input: object | None = None


class ApiValidationErrorDetails(BaseModel):
    errors: list[ApiValidationErrorItem]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiValidationErrorDetails | dict | None = None


ERROR_RESPONSES = {
    400: {"model": ApiErrorResponse, "description": "Rejected promotion input"},
    404: {"model": ApiErrorResponse, "description": "Promotion not found"},
    422: {"model": ApiValidationErrorResponse, "description": "Malformed request"},
}
