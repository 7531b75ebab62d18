# app/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import get_metrics
from app.config.settings import get_settings
from app.observability.metrics import MetricsCollector

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Liveness with correlation ID from request state. Does not touch Redis or the DB."""
    settings = get_settings()
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
        "lock_backend": settings.lock_backend,
    }


@router.get("/metrics")
async def metrics(collector: Annotated[MetricsCollector, Depends(get_metrics)]):
    """In-process counters, e.g. lock_contention by lock domain."""
    return collector.export_metrics()
