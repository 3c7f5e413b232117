"""
Task API Routes.

Status transitions (start, pause, complete, return to queue), sequential bulk
assignment, workflow progress and the final QC sign-off. Domain errors are
rendered by the application's error handler.
"""

from uuid import UUID

from fastapi import APIRouter, Response, status

from ...domain.production.services import QC_FIELDS, QCChecklist, TaskAssignment
from ..deps import WorkflowServiceDep
from ..schemas import (
    BulkAssignRequest,
    BulkAssignResponse,
    QCRequest,
    QCResponse,
    ReturnToQueueRequest,
    TaskProgressResponse,
    TaskTransitionResponse,
    WorkerActionRequest,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

_TRANSITION_RESPONSES = {
    404: {"description": "Task not found"},
    409: {"description": "Transition not allowed or already in progress"},
}


@router.post(
    "/assign-bulk",
    summary="Assign tasks in bulk",
    description=(
        "Assign tasks one at a time. The first failure stops the operation; "
        "assignments already applied are kept and reported with status 207."
    ),
    response_model=BulkAssignResponse,
    responses={207: {"description": "Partially applied"}},
)
async def assign_bulk(
    request: BulkAssignRequest,
    response: Response,
    service: WorkflowServiceDep,
) -> BulkAssignResponse:
    result = await service.assign_tasks(
        [TaskAssignment(task_id=a.task_id, worker_id=a.worker_id) for a in request.assignments]
    )
    if not result.succeeded:
        response.status_code = status.HTTP_207_MULTI_STATUS
    return BulkAssignResponse.from_result(result)


@router.get(
    "/{task_id}/progress",
    summary="Get task workflow progress",
    response_model=TaskProgressResponse,
    responses={404: {"description": "Task not found"}},
)
async def get_task_progress(
    task_id: UUID, service: WorkflowServiceDep
) -> TaskProgressResponse:
    entry = await service.get_task_progress(task_id)
    return TaskProgressResponse.from_entry(entry)


@router.post(
    "/{task_id}/start",
    summary="Start task",
    response_model=TaskTransitionResponse,
    responses=_TRANSITION_RESPONSES,
)
async def start_task(
    task_id: UUID, request: WorkerActionRequest, service: WorkflowServiceDep
) -> TaskTransitionResponse:
    transition = await service.start_task(task_id, request.worker_id)
    return TaskTransitionResponse.from_transition(transition)


@router.post(
    "/{task_id}/pause",
    summary="Pause task",
    response_model=TaskTransitionResponse,
    responses=_TRANSITION_RESPONSES,
)
async def pause_task(
    task_id: UUID, request: WorkerActionRequest, service: WorkflowServiceDep
) -> TaskTransitionResponse:
    transition = await service.pause_task(task_id, request.worker_id)
    return TaskTransitionResponse.from_transition(transition)


@router.post(
    "/{task_id}/complete",
    summary="Complete task",
    response_model=TaskTransitionResponse,
    responses=_TRANSITION_RESPONSES,
)
async def complete_task(
    task_id: UUID, request: WorkerActionRequest, service: WorkflowServiceDep
) -> TaskTransitionResponse:
    transition = await service.complete_task(task_id, request.worker_id)
    return TaskTransitionResponse.from_transition(transition)


@router.post(
    "/{task_id}/return-to-queue",
    summary="Return task to queue",
    description="Put the task back to assigned, optionally at an earlier stage of its workflow.",
    response_model=TaskTransitionResponse,
    responses=_TRANSITION_RESPONSES,
)
async def return_to_queue(
    task_id: UUID, request: ReturnToQueueRequest, service: WorkflowServiceDep
) -> TaskTransitionResponse:
    transition = await service.return_to_queue(
        task_id, stage=request.stage, worker_id=request.worker_id
    )
    return TaskTransitionResponse.from_transition(transition)


@router.post(
    "/{task_id}/qc",
    summary="Submit final QC",
    description=(
        "Record the looks/hardware/sound sign-off. A passing sign-off completes "
        "the task; a failing one is stored and the task stays in progress."
    ),
    response_model=QCResponse,
    responses={
        404: {"description": "Task not found"},
        409: {"description": "Task is not a QC task or not in progress"},
        422: {"description": "A QC field was not answered"},
    },
)
async def submit_qc(
    task_id: UUID, request: QCRequest, service: WorkflowServiceDep
) -> QCResponse:
    checklist = QCChecklist(task_id)
    for field_name in QC_FIELDS:
        choice = getattr(request, field_name)
        if choice is not None:
            checklist.set_result(field_name, choice)
    if request.notes:
        checklist.set_notes(request.notes)

    outcome = await service.submit_final_qc(task_id, checklist, request.worker_id)
    return QCResponse.from_outcome(outcome)
