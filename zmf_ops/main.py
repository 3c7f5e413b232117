"""ASGI entry point: ``uvicorn zmf_ops.main:app``."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRoute
from starlette.middleware.cors import CORSMiddleware

from .api.deps import close_workflow_service, get_workflow_service
from .api.errors import domain_error_handler
from .api.main import api_router
from .api.middleware import ObservabilityMiddleware
from .core.config import settings
from .core.observability import get_logger, setup_structured_logging
from .domain.shared.exceptions import DomainError

logger = get_logger(__name__)


def operation_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_structured_logging()
    get_workflow_service()
    logger.info(
        "Production ops API ready",
        environment=settings.ENVIRONMENT,
        persistence_backend=settings.PERSISTENCE_BACKEND,
        task_poll_interval_seconds=settings.TASK_POLL_INTERVAL_SECONDS,
    )
    try:
        yield
    finally:
        await close_workflow_service()
        logger.info("Production ops API stopped")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=(
            "Worker task boards, task status transitions, quality checkpoints "
            "and batch stage tracking for headphone production."
        ),
        version="0.1.0",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        generate_unique_id_function=operation_id,
        lifespan=lifespan,
    )
    application.add_exception_handler(DomainError, domain_error_handler)
    application.add_middleware(ObservabilityMiddleware)

    if settings.all_cors_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
            expose_headers=["X-Correlation-ID"],
        )

    application.include_router(api_router, prefix=settings.API_V1_STR)
    return application


app = create_app()
