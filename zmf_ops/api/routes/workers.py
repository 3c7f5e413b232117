"""
Worker Task Board API Routes.

Read-only views of a worker's tasks: grouped by batch with workflow progress,
or grouped by headphone model for unbatched work. Clients refresh these by
polling.
"""

from uuid import UUID

from fastapi import APIRouter, Query

from ...core.config import settings
from ...domain.production.services import filter_by_model
from ..deps import WorkflowServiceDep
from ..schemas import ModelGroupResponse, TaskGroupResponse, WorkerBoardResponse

router = APIRouter(prefix="/workers", tags=["workers"])


@router.get(
    "/{worker_id}/tasks",
    summary="Get worker task board",
    description="Tasks assigned to a worker, grouped by batch and annotated with workflow progress.",
    response_model=WorkerBoardResponse,
)
async def get_worker_tasks(
    worker_id: UUID, service: WorkflowServiceDep
) -> WorkerBoardResponse:
    groups = await service.get_worker_board(worker_id)
    return WorkerBoardResponse(
        worker_id=worker_id,
        task_count=sum(len(group.entries) for group in groups),
        groups=[TaskGroupResponse.from_group(group) for group in groups],
        poll_interval_seconds=settings.TASK_POLL_INTERVAL_SECONDS,
    )


@router.get(
    "/{worker_id}/tasks/by-model",
    summary="Group worker tasks by model",
    description="Group a worker's tasks by the headphone model parsed from the product name.",
    response_model=list[ModelGroupResponse],
)
async def get_worker_tasks_by_model(
    worker_id: UUID,
    service: WorkflowServiceDep,
    model: str | None = Query(None, description='Only this model ("all" for every model)'),
    include_batched: bool = Query(False, description="Also include tasks that belong to a batch"),
) -> list[ModelGroupResponse]:
    groups = await service.get_model_groups(worker_id, unbatched_only=not include_batched)

    responses = []
    for group in groups.values():
        if model and not filter_by_model(group.tasks, model):
            continue
        responses.append(ModelGroupResponse.from_group(group))
    return responses
