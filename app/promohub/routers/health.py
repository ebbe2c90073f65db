from fastapi import APIRouter, Depends, Request

from app.promohub.db.registry import StoreRegistry, get_registry

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    trace_id = getattr(request.state, "trace_id", "")
    return {"status": "ok", "trace_id": trace_id}


@router.get("/ready")
async def ready(request: Request, registry: StoreRegistry = Depends(get_registry)):
    trace_id = getattr(request.state, "trace_id", "")
    return {"status": "ready", "tenants": len(registry.tenants()), "trace_id": trace_id}
