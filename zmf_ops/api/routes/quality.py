"""
Quality API Routes.

Checkpoint configuration lookup, recurring-issue hints and checkpoint
submission through the gate.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from ...core.config import settings
from ...domain.production.value_objects.enums import CheckpointType
from ...domain.production.value_objects.quality import QualityCheckpoint, QualityPattern
from ..deps import WorkflowServiceDep
from ..schemas import InspectionRequest, InspectionResponse

router = APIRouter(prefix="/quality", tags=["quality"])


@router.get(
    "/checkpoints",
    summary="Get checkpoint configuration",
    description=(
        "Checklist configured for a stage and checkpoint type. Falls back to "
        "the stage's default template when no workflow-specific checkpoint exists."
    ),
    response_model=QualityCheckpoint,
    responses={404: {"description": "No checkpoint configured"}},
)
async def get_checkpoint(
    service: WorkflowServiceDep,
    stage: str = Query(..., min_length=1, description="Stage name"),
    checkpoint_type: CheckpointType = Query(..., alias="type", description="pre_work or post_work"),
    workflow_template_id: UUID | None = Query(None, description="Prefer this workflow's checkpoint"),
) -> QualityCheckpoint:
    checkpoint = await service.find_checkpoint(stage, checkpoint_type, workflow_template_id)
    if checkpoint is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {checkpoint_type.value} checkpoint configured for stage '{stage}'",
        )
    return checkpoint


@router.get(
    "/patterns",
    summary="List quality patterns",
    description="Most frequent recent issues, shown as hints alongside a checkpoint.",
    response_model=list[QualityPattern],
)
async def list_patterns(
    service: WorkflowServiceDep,
    stage: str | None = Query(None, description="Only issues seen at this stage"),
    limit: int = Query(
        settings.QUALITY_PATTERN_LIMIT, ge=1, le=100, description="Maximum patterns to return"
    ),
) -> list[QualityPattern]:
    return await service.list_patterns(stage, limit)


@router.post(
    "/inspections",
    summary="Submit checkpoint",
    description=(
        "Run the quality gate on the submitted answers. The inspection is "
        "stored, the task's quality fields are updated, and a cleared pre-work "
        "check starts the task."
    ),
    response_model=InspectionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Unknown check or invalid measurement"},
        404: {"description": "Task not found"},
        409: {"description": "Submission already in progress"},
        422: {"description": "Required photo or measurement missing"},
    },
)
async def submit_inspection(
    request: InspectionRequest, service: WorkflowServiceDep
) -> InspectionResponse:
    attempt = await service.open_checkpoint(request.task_id, request.checkpoint_type)
    if not attempt.is_trivial:
        attempt.fill(
            check_results=request.check_results,
            photos=request.photos,
            measurements=request.measurements,
            notes=request.notes,
        )

    outcome = await service.submit_checkpoint(attempt, request.worker_id)
    return InspectionResponse.from_outcome(outcome)
