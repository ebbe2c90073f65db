from fastapi import APIRouter

from app.promohub.core.config import settings
from app.promohub.routers.carousel import router as carousel_router
from app.promohub.routers.health import router as health_router
from app.promohub.routers.metrics import router as metrics_router
from app.promohub.routers.promotions import catalog_router
from app.promohub.routers.promotions import router as promotions_router

api_router = APIRouter()
api_router.include_router(health_router)
# carousel paths must register before /promotions/{promotion_id}
api_router.include_router(carousel_router, prefix="/promohub/promotions/carousel", tags=["carousel"])
api_router.include_router(promotions_router, prefix="/promohub/promotions", tags=["promotions"])
api_router.include_router(catalog_router, prefix="/promohub/catalog", tags=["catalog"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
