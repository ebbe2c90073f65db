import logging

from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.promohub.core.context import build_request_context
from app.promohub.core.security import decode_token

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Attributes each request to a tenant and, when a bearer token is present, an actor.

    Tokens are decoded for attribution only; nothing here rejects a request.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.tenant_id = None
        request.state.user_id = None
        request.state.email = None
        request.state.role = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            token = auth_header.split(" ", 1)[1]
            try:
                payload = decode_token(token)
                request.state.tenant_id = payload.get("tenant_id")
                request.state.user_id = payload.get("sub")
                request.state.email = payload.get("email")
                request.state.role = payload.get("role")
            except JWTError:
                logger.info("Ignoring undecodable bearer token")

        if not request.state.tenant_id:
            request.state.tenant_id = (request.headers.get(TENANT_HEADER) or "").strip() or None

        context = build_request_context(
            tenant_id=request.state.tenant_id,
            user_id=request.state.user_id,
            email=request.state.email,
            role=request.state.role,
            trace_id=getattr(request.state, "trace_id", ""),
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        request.state.tenant_id = context.tenant_id
        request.state.context = context

        return await call_next(request)
