"""
API Dependencies

Wires the task workflow service to the configured persistence backend. A
single service instance is shared by all requests so its in-flight guard
sees every pending action.
"""

from typing import Annotated

from fastapi import Depends

from ..core.config import settings
from ..core.observability import get_logger
from ..domain.production.services import TaskWorkflowService
from ..infrastructure import (
    HttpBatchRepository,
    HttpQualityRepository,
    HttpTaskRepository,
    InMemoryBatchRepository,
    InMemoryQualityRepository,
    InMemoryTaskRepository,
    PersistenceClient,
)

logger = get_logger(__name__)

_service: TaskWorkflowService | None = None
_client: PersistenceClient | None = None


def build_workflow_service() -> TaskWorkflowService:
    """Create a service for the backend selected by PERSISTENCE_BACKEND."""
    global _client

    if settings.PERSISTENCE_BACKEND == "http":
        _client = PersistenceClient(
            base_url=settings.PERSISTENCE_BASE_URL,
            api_key=settings.PERSISTENCE_API_KEY,
            timeout=settings.PERSISTENCE_TIMEOUT_SECONDS,
        )
        repositories = (
            HttpTaskRepository(_client),
            HttpBatchRepository(_client),
            HttpQualityRepository(_client),
        )
    else:
        repositories = (
            InMemoryTaskRepository(),
            InMemoryBatchRepository(),
            InMemoryQualityRepository(),
        )

    logger.info(
        "Workflow service created",
        persistence_backend=settings.PERSISTENCE_BACKEND,
        base_url=settings.PERSISTENCE_BASE_URL,
    )
    return TaskWorkflowService(
        *repositories, next_stage_count=settings.DEFAULT_NEXT_STAGE_COUNT
    )


def get_workflow_service() -> TaskWorkflowService:
    global _service
    if _service is None:
        _service = build_workflow_service()
    return _service


async def close_workflow_service() -> None:
    global _service, _client
    if _client is not None:
        await _client.aclose()
    _client = None
    _service = None


WorkflowServiceDep = Annotated[TaskWorkflowService, Depends(get_workflow_service)]
