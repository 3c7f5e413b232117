"""Batch API Routes."""

from uuid import UUID

from fastapi import APIRouter

from ..deps import WorkflowServiceDep
from ..schemas import BatchResponse, BatchTransitionRequest, BatchTransitionResponse

router = APIRouter(prefix="/batches", tags=["batches"])


@router.get(
    "/{batch_id}",
    summary="Get batch",
    description="Batch with its workflow stages and current position.",
    response_model=BatchResponse,
    responses={404: {"description": "Batch not found"}},
)
async def get_batch(batch_id: UUID, service: WorkflowServiceDep) -> BatchResponse:
    batch = await service.get_batch(batch_id)
    return BatchResponse.from_batch(batch)


@router.post(
    "/{batch_id}/transition",
    summary="Transition batch stage",
    description="Move the batch to another stage of its workflow, forward or back.",
    response_model=BatchTransitionResponse,
    responses={
        404: {"description": "Batch not found"},
        409: {"description": "Stage not in workflow or batch already there"},
    },
)
async def transition_batch(
    batch_id: UUID,
    request: BatchTransitionRequest,
    service: WorkflowServiceDep,
) -> BatchTransitionResponse:
    batch, transition = await service.transition_batch(
        batch_id,
        request.to_stage,
        transition_type=request.transition_type,
        transitioned_by_id=request.transitioned_by_id,
        notes=request.notes,
    )
    return BatchTransitionResponse(
        batch=BatchResponse.from_batch(batch), transition=transition
    )
