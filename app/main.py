from fastapi import FastAPI

from app.promohub.api import api_router
from app.promohub.core.config import settings
from app.promohub.core.errors import setup_exception_handlers
from app.promohub.core.logging import configure_logging
from app.promohub.db.registry import StoreRegistry
from app.promohub.middleware.observability import ObservabilityMiddleware
from app.promohub.middleware.tenant import TenantContextMiddleware
from app.promohub.middleware.trace import TraceIdMiddleware


def create_app(registry: StoreRegistry | None = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.state.registry = registry or StoreRegistry()
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
