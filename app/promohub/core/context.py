from dataclasses import dataclass

from fastapi import Request

from app.promohub.core.config import settings


@dataclass(frozen=True)
class RequestContext:
    tenant_id: str
    user_id: str | None
    email: str | None
    role: str | None
    trace_id: str
    ip_address: str | None = None
    user_agent: str | None = None


def build_request_context(
    *,
    tenant_id: str | None,
    user_id: str | None,
    email: str | None,
    role: str | None,
    trace_id: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> RequestContext:
    return RequestContext(
        tenant_id=tenant_id or settings.DEFAULT_TENANT_ID,
        user_id=user_id,
        email=email,
        role=role,
        trace_id=trace_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def get_request_context(request: Request) -> RequestContext:
    context = getattr(request.state, "context", None)
    if isinstance(context, RequestContext):
        return context
    return build_request_context(
        tenant_id=getattr(request.state, "tenant_id", None),
        user_id=getattr(request.state, "user_id", None),
        email=getattr(request.state, "email", None),
        role=getattr(request.state, "role", None),
        trace_id=getattr(request.state, "trace_id", ""),
    )
