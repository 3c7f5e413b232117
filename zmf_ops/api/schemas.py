"""
Production API Data Transfer Objects.

Request and response models for task boards, task transitions, quality
checkpoints, final QC and batches. These DTOs keep the HTTP interface stable
independent of domain model changes.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..domain.production.entities.batch import Batch, StageTransition
from ..domain.production.entities.task import Task
from ..domain.production.services import (
    BulkOperationResult,
    CheckpointOutcome,
    ModelGroup,
    QCOutcome,
    TaskBoardEntry,
    TaskGroup,
    TaskTransition,
    stage_progress,
)
from ..domain.production.value_objects.enums import (
    CheckpointType,
    FailurePolicy,
    PriorityLevel,
    QCChoice,
    TaskStatus,
    TransitionType,
)
from ..domain.production.value_objects.quality import QCSubmission
from ..domain.production.value_objects.workflow import (
    StageDescriptor,
    WorkflowProgress,
)


# Requests
class WorkerActionRequest(BaseModel):
    """DTO for a worker acting on one of their tasks."""

    worker_id: UUID | None = Field(
        None, description="Acting worker; must own the task when given"
    )


class ReturnToQueueRequest(WorkerActionRequest):
    """DTO for sending a task back to the assigned queue."""

    stage: str | None = Field(
        None,
        min_length=1,
        description="Earlier stage to move the task to (defaults to its current stage)",
    )


class AssignmentItem(BaseModel):
    task_id: UUID
    worker_id: UUID


class BulkAssignRequest(BaseModel):
    """DTO for assigning several tasks in one sequential operation."""

    assignments: list[AssignmentItem] = Field(
        ..., min_length=1, description="Assignments applied in order"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "assignments": [
                    {
                        "task_id": "5f1c1b9e-7f0a-4a8e-9d5e-1a2b3c4d5e6f",
                        "worker_id": "0b7e3c1a-2d4f-4e6a-8b9c-0d1e2f3a4b5c",
                    }
                ]
            }
        }
    )


class InspectionRequest(BaseModel):
    """DTO for submitting the answers of one checkpoint attempt."""

    task_id: UUID
    checkpoint_type: CheckpointType = Field(..., description="pre_work or post_work")
    worker_id: UUID | None = None
    check_results: dict[str, bool] = Field(
        default_factory=dict, description="Pass/fail per check id; unanswered checks fail"
    )
    photos: dict[str, str] = Field(
        default_factory=dict, description="Opaque photo reference per check id"
    )
    measurements: dict[str, float] = Field(
        default_factory=dict, description="Numeric measurement per check id"
    )
    notes: str | None = Field(None, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_id": "5f1c1b9e-7f0a-4a8e-9d5e-1a2b3c4d5e6f",
                "checkpoint_type": "pre_work",
                "worker_id": "0b7e3c1a-2d4f-4e6a-8b9c-0d1e2f3a4b5c",
                "check_results": {"wood_grain": True, "cup_alignment": True},
                "photos": {"wood_grain": "photos/cup-left.jpg"},
                "measurements": {"cup_alignment": 0.2},
                "notes": "Minor grain variation, within tolerance",
            }
        }
    )


class QCRequest(BaseModel):
    """DTO for the final three-field QC sign-off."""

    worker_id: UUID | None = None
    looks: QCChoice | None = None
    hardware: QCChoice | None = None
    sound: QCChoice | None = None
    notes: str | None = Field(None, max_length=2000)


class BatchTransitionRequest(BaseModel):
    """DTO for moving a batch to another workflow stage."""

    to_stage: str = Field(..., min_length=1, description="Target stage name")
    transition_type: TransitionType = TransitionType.MANUAL
    transitioned_by_id: UUID | None = None
    notes: str | None = Field(None, max_length=1000)


# Responses
class StageResponse(BaseModel):
    stage: str
    name: str
    estimated_hours: float | None = None

    @classmethod
    def from_descriptor(cls, descriptor: StageDescriptor) -> "StageResponse":
        return cls(
            stage=descriptor.stage,
            name=descriptor.display_name,
            estimated_hours=descriptor.estimated_hours,
        )


class ProgressResponse(BaseModel):
    """Ordinal workflow position; all zero when no workflow context exists."""

    current_index: int
    total_stages: int
    percentage: float

    @classmethod
    def from_progress(cls, progress: WorkflowProgress) -> "ProgressResponse":
        return cls(
            current_index=progress.current_index,
            total_stages=progress.total_stages,
            percentage=round(progress.percentage, 2),
        )


class TaskResponse(BaseModel):
    """DTO for task responses."""

    id: UUID
    task_type: str
    stage: str | None
    status: TaskStatus
    priority: PriorityLevel
    assigned_to_id: UUID | None
    batch_id: UUID | None
    product_name: str
    order_number: str | None
    estimated_hours: float | None
    actual_hours: float | None
    notes: str | None
    started_at: datetime | None
    completed_at: datetime | None
    quality_score: int | None
    rework_count: int
    updated_at: datetime | None

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            task_type=task.task_type,
            stage=task.stage,
            status=task.status,
            priority=task.priority,
            assigned_to_id=task.assigned_to_id,
            batch_id=task.batch_id,
            product_name=task.product_name,
            order_number=task.order_item.order_number if task.order_item else None,
            estimated_hours=task.estimated_hours,
            actual_hours=task.actual_hours,
            notes=task.notes,
            started_at=task.started_at,
            completed_at=task.completed_at,
            quality_score=task.quality_score,
            rework_count=task.rework_count,
            updated_at=task.updated_at,
        )


class TaskProgressResponse(BaseModel):
    """A task with its workflow position and upcoming stages."""

    task: TaskResponse
    progress: ProgressResponse
    next_stages: list[StageResponse]

    @classmethod
    def from_entry(cls, entry: TaskBoardEntry) -> "TaskProgressResponse":
        return cls(
            task=TaskResponse.from_task(entry.task),
            progress=ProgressResponse.from_progress(entry.progress),
            next_stages=[StageResponse.from_descriptor(s) for s in entry.next_stages],
        )


class TaskGroupResponse(BaseModel):
    key: str = Field(..., description='Batch id, or "individual" for unbatched tasks')
    batch_id: UUID | None
    batch_name: str | None
    current_stage: str | None
    progress: ProgressResponse
    tasks: list[TaskProgressResponse]

    @classmethod
    def from_group(cls, group: TaskGroup) -> "TaskGroupResponse":
        return cls(
            key=group.key,
            batch_id=group.batch.id if group.batch else None,
            batch_name=group.batch.name if group.batch else None,
            current_stage=group.batch.current_stage if group.batch else None,
            progress=ProgressResponse.from_progress(group.progress),
            tasks=[TaskProgressResponse.from_entry(e) for e in group.entries],
        )


class WorkerBoardResponse(BaseModel):
    """DTO for a worker's grouped task board."""

    worker_id: UUID
    task_count: int
    groups: list[TaskGroupResponse]
    poll_interval_seconds: int = Field(
        ..., description="Suggested client refresh interval for this board"
    )


class ModelGroupResponse(BaseModel):
    model_name: str
    count: int
    in_progress_count: int
    has_urgent: bool
    tasks: list[TaskResponse]

    @classmethod
    def from_group(cls, group: ModelGroup) -> "ModelGroupResponse":
        return cls(
            model_name=group.model_name,
            count=group.count,
            in_progress_count=group.in_progress_count,
            has_urgent=group.has_urgent,
            tasks=[TaskResponse.from_task(t) for t in group.tasks],
        )


class TaskTransitionResponse(BaseModel):
    """DTO for the result of a task status transition."""

    task: TaskResponse
    from_status: TaskStatus
    to_status: TaskStatus
    timestamp: datetime
    notes: str

    @classmethod
    def from_transition(cls, transition: TaskTransition) -> "TaskTransitionResponse":
        return cls(
            task=TaskResponse.from_task(transition.task),
            from_status=transition.from_status,
            to_status=transition.to_status,
            timestamp=transition.timestamp,
            notes=transition.notes,
        )


class BulkAssignResponse(BaseModel):
    """DTO for a sequential bulk assignment; applied items are not rolled back."""

    total: int
    applied: int
    succeeded: bool
    failed_task_id: UUID | None = None
    error: dict | None = None
    tasks: list[TaskResponse]

    @classmethod
    def from_result(cls, result: BulkOperationResult) -> "BulkAssignResponse":
        return cls(
            total=result.total,
            applied=result.applied,
            succeeded=result.succeeded,
            failed_task_id=result.failed_task_id,
            error=result.error.to_dict() if result.error else None,
            tasks=[TaskResponse.from_task(t) for t in result.tasks],
        )


class InspectionResponse(BaseModel):
    """DTO for a checkpoint gate decision."""

    inspection_id: UUID | None = Field(
        None, description="Absent when no checkpoint was configured for the stage"
    )
    checkpoint_type: CheckpointType
    passed: bool
    can_proceed: bool
    on_failure: FailurePolicy | None
    failed_checks: list[str]
    started: bool = Field(..., description="True when the task was started automatically")
    message: str
    task: TaskResponse

    @classmethod
    def from_outcome(cls, outcome: CheckpointOutcome) -> "InspectionResponse":
        inspection = outcome.inspection
        return cls(
            inspection_id=inspection.id if inspection else None,
            checkpoint_type=outcome.decision.checkpoint_type,
            passed=outcome.decision.passed,
            can_proceed=outcome.decision.can_proceed,
            on_failure=outcome.decision.on_failure,
            failed_checks=inspection.failed_checks if inspection else [],
            started=outcome.started,
            message=outcome.decision.message,
            task=TaskResponse.from_task(outcome.task),
        )


class QCResponse(BaseModel):
    submission: QCSubmission
    completed: bool
    task: TaskResponse

    @classmethod
    def from_outcome(cls, outcome: QCOutcome) -> "QCResponse":
        return cls(
            submission=outcome.submission,
            completed=outcome.completed,
            task=TaskResponse.from_task(outcome.task),
        )


class BatchResponse(BaseModel):
    """DTO for a batch with its position in the workflow."""

    id: UUID
    name: str
    current_stage: str | None
    workflow_template_id: UUID | None
    workflow_name: str | None
    stages: list[StageResponse]
    progress: ProgressResponse

    @classmethod
    def from_batch(cls, batch: Batch) -> "BatchResponse":
        workflow = batch.workflow_template
        stages = workflow.stages if workflow else ()
        return cls(
            id=batch.id,
            name=batch.name,
            current_stage=batch.current_stage,
            workflow_template_id=batch.workflow_template_id,
            workflow_name=workflow.name if workflow else None,
            stages=[StageResponse.from_descriptor(s) for s in stages],
            progress=ProgressResponse.from_progress(
                stage_progress(batch.current_stage, stages)
            ),
        )


class BatchTransitionResponse(BaseModel):
    batch: BatchResponse
    transition: StageTransition


class HealthResponse(BaseModel):
    status: str
    environment: str
    persistence_backend: str
    task_poll_interval_seconds: int
    worker_poll_interval_seconds: int
