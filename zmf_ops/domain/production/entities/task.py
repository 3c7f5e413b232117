"""Task entity for production and repair work assigned to workers."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from ...shared.base import DomainEvent, Entity, as_utc, utc_now
from ...shared.exceptions import StageTransitionError, TaskStatusError
from ..value_objects.enums import PriorityLevel, TaskStatus
from ..value_objects.order import OrderItemRef
from ..value_objects.workflow import WorkflowTemplate


class TaskStatusChanged(DomainEvent):
    """Event raised when task status changes."""

    task_id: UUID
    batch_id: UUID | None
    old_status: TaskStatus
    new_status: TaskStatus
    reason: str


class TaskAssigned(DomainEvent):
    """Event raised when a task is assigned to a worker."""

    task_id: UUID
    previous_worker_id: UUID | None
    worker_id: UUID


class Task(Entity):
    """
    Task entity representing one unit of assignable work.

    Status only advances assigned -> in_progress -> completed. Pause and
    return-to-queue are the two explicit ways back to assigned, and neither
    can move the task's stage behind its batch's current stage.
    """

    task_type: str = Field(min_length=1, max_length=50)
    stage: str | None = None
    status: TaskStatus = Field(default=TaskStatus.ASSIGNED)
    priority: PriorityLevel = Field(default=PriorityLevel.NORMAL)

    assigned_to_id: UUID | None = None
    batch_id: UUID | None = None
    order_item: OrderItemRef | None = None

    estimated_hours: float | None = Field(None, ge=0)
    actual_hours: float | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)

    started_at: datetime | None = None
    completed_at: datetime | None = None

    # Quality tracking
    quality_score: int | None = Field(None, ge=0, le=100)
    rework_count: int = Field(default=0, ge=0)

    @field_validator("task_type")
    @classmethod
    def normalize_task_type(cls, v: str) -> str:
        return v.strip().lower()

    def is_valid(self) -> bool:
        """Validate business rules."""
        if self.status == TaskStatus.COMPLETED and self.completed_at is None:
            return False
        return bool(self.task_type)

    @property
    def product_name(self) -> str:
        return self.order_item.product_name if self.order_item else ""

    @property
    def is_complete(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def is_urgent(self) -> bool:
        return self.priority == PriorityLevel.URGENT

    @property
    def is_qc_task(self) -> bool:
        return self.task_type == "qc" or self.stage in {"qc", "quality_check"}

    def assign_to(self, worker_id: UUID) -> None:
        """Assign (or reassign) the task to a worker."""
        if self.is_complete:
            raise TaskStatusError(self.id, self.status.value, TaskStatus.ASSIGNED.value)

        previous = self.assigned_to_id
        self.assigned_to_id = worker_id
        self.mark_updated()
        self.add_domain_event(
            TaskAssigned(
                aggregate_id=self.id,
                task_id=self.id,
                previous_worker_id=previous,
                worker_id=worker_id,
            )
        )

    def start(self, start_time: datetime | None = None) -> None:
        """
        Start work on the task.

        Raises:
            TaskStatusError: If the task is not in the assigned state
        """
        if not self.status.can_transition_to(TaskStatus.IN_PROGRESS):
            raise TaskStatusError(
                self.id, self.status.value, TaskStatus.IN_PROGRESS.value
            )

        self.started_at = start_time or utc_now()
        self._change_status(TaskStatus.IN_PROGRESS, "task_started")

    def pause(self) -> None:
        """Put an in-progress task back to assigned without changing its stage."""
        if self.status != TaskStatus.IN_PROGRESS:
            raise TaskStatusError(self.id, self.status.value, TaskStatus.ASSIGNED.value)

        self._change_status(TaskStatus.ASSIGNED, "task_paused")

    def complete(self, end_time: datetime | None = None) -> None:
        """
        Complete the task and record the hours spent since it was started.

        Raises:
            TaskStatusError: If the task is not in progress
        """
        if not self.status.can_transition_to(TaskStatus.COMPLETED):
            raise TaskStatusError(
                self.id, self.status.value, TaskStatus.COMPLETED.value
            )

        completion_time = end_time or utc_now()
        if self.started_at:
            elapsed = (
                as_utc(completion_time) - as_utc(self.started_at)
            ).total_seconds()
            self.actual_hours = round(max(elapsed, 0) / 3600, 2)

        self.completed_at = completion_time
        self._change_status(TaskStatus.COMPLETED, "task_completed")

    def return_to_queue(
        self,
        stage: str | None = None,
        workflow: WorkflowTemplate | None = None,
        batch_current_stage: str | None = None,
    ) -> None:
        """
        Return the task to the assigned queue, optionally at an earlier stage.

        Args:
            stage: Stage to move the task to (defaults to its current stage)
            workflow: Workflow the stage order is taken from
            batch_current_stage: Stage the task's batch has reached

        Raises:
            TaskStatusError: If the task is already completed
            StageTransitionError: If the stage is unknown, ahead of the task,
                or behind the batch's current stage
        """
        if self.is_complete:
            raise TaskStatusError(self.id, self.status.value, TaskStatus.ASSIGNED.value)

        if stage is not None and stage != self.stage:
            self._validate_return_stage(stage, workflow, batch_current_stage)
            self.stage = stage

        if self.status == TaskStatus.ASSIGNED:
            self.mark_updated()
        else:
            self._change_status(TaskStatus.ASSIGNED, "returned_to_queue")

    def record_inspection(self, passed: bool) -> None:
        """Apply the outcome of a quality inspection to the task's quality fields."""
        if passed:
            self.quality_score = 100
        else:
            self.rework_count += 1
        self.mark_updated()

    def _validate_return_stage(
        self,
        stage: str,
        workflow: WorkflowTemplate | None,
        batch_current_stage: str | None,
    ) -> None:
        if workflow is None:
            raise StageTransitionError(
                "Cannot move a task between stages without a workflow", stage
            )

        target_index = workflow.index_of(stage)
        if target_index < 0:
            raise StageTransitionError(
                f"Stage '{stage}' is not defined in the workflow", stage
            )

        current_index = workflow.index_of(self.stage)
        if current_index >= 0 and target_index > current_index:
            raise StageTransitionError(
                f"Return to queue cannot advance task from '{self.stage}' to '{stage}'",
                stage,
            )

        batch_index = workflow.index_of(batch_current_stage)
        if batch_index >= 0 and target_index < batch_index:
            raise StageTransitionError(
                f"Stage '{stage}' is behind the batch's current stage "
                f"'{batch_current_stage}'",
                stage,
            )

    def _change_status(self, new_status: TaskStatus, reason: str) -> None:
        """Internal method to change task status and raise events."""
        old_status = self.status
        self.status = new_status
        self.mark_updated()

        self.add_domain_event(
            TaskStatusChanged(
                aggregate_id=self.id,
                task_id=self.id,
                batch_id=self.batch_id,
                old_status=old_status,
                new_status=new_status,
                reason=reason,
            )
        )
