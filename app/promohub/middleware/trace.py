import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

TRACE_HEADERS = ("X-Trace-ID", "X-Request-ID")


def resolve_trace_id(request: Request) -> str:
    for header in TRACE_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value:
            return value
    return str(uuid.uuid4())


class TraceIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        trace_id = resolve_trace_id(request)
        request.state.trace_id = trace_id
        response: Response = await call_next(request)
        response.headers["X-Trace-ID"] = trace_id
        return response
