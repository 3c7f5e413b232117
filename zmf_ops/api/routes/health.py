"""Liveness, client polling hints and Prometheus exposition."""

from fastapi import APIRouter, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ...core.config import settings
from ..schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check; also tells clients how often to poll."""
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        persistence_backend=settings.PERSISTENCE_BACKEND,
        task_poll_interval_seconds=settings.TASK_POLL_INTERVAL_SECONDS,
        worker_poll_interval_seconds=settings.WORKER_POLL_INTERVAL_SECONDS,
    )


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    if not settings.ENABLE_METRICS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Metrics are disabled"
        )
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
