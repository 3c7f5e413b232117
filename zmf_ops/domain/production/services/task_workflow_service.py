"""
Task Workflow Service

Coordinates worker task boards, task status transitions, quality checkpoint
submissions, bulk assignment and batch stage transitions. The pure pieces
(progress, grouping, gate) are combined here with the repositories.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from ....core.observability import (
    BULK_OPERATIONS,
    CHECKPOINT_DECISIONS,
    TASK_TRANSITIONS,
    get_logger,
)
from ...shared.base import DomainEvent, utc_now
from ...shared.exceptions import (
    ActionInProgressError,
    BatchNotFoundError,
    BusinessRuleError,
    DomainError,
    TaskNotAssignedError,
    TaskNotFoundError,
    TaskStatusError,
)
from ..entities.batch import Batch, StageTransition
from ..entities.task import Task
from ..repositories.batch_repository import BatchRepository
from ..repositories.quality_repository import QualityRepository
from ..repositories.task_repository import TaskRepository
from ..value_objects.enums import CheckpointType, TaskStatus, TransitionType
from ..value_objects.quality import (
    InspectionResult,
    QCSubmission,
    QualityCheckpoint,
    QualityPattern,
)
from ..value_objects.workflow import StageDescriptor, WorkflowProgress
from .qc_checklist import QC_STAGES, QCChecklist
from .quality_gate import CheckpointAttempt, GateDecision
from .task_grouping import INDIVIDUAL_GROUP, ModelGroup, group_by_model, group_tasks
from .workflow_progress import compute_progress, next_stages

logger = get_logger(__name__)


@dataclass
class TaskTransition:
    """Represents a task state transition."""

    task: Task
    from_status: TaskStatus
    to_status: TaskStatus
    timestamp: datetime
    worker_id: UUID | None = None
    notes: str = ""


@dataclass
class TaskBoardEntry:
    """A task annotated with its workflow position."""

    task: Task
    progress: WorkflowProgress
    next_stages: list[StageDescriptor]


@dataclass
class TaskGroup:
    """Tasks of one batch (or the individual bucket) on a worker's board."""

    key: str
    batch: Batch | None
    entries: list[TaskBoardEntry] = field(default_factory=list)

    @property
    def progress(self) -> WorkflowProgress:
        """Group progress is taken from the first task, as the board shows it."""
        if not self.entries:
            return WorkflowProgress()
        return self.entries[0].progress


@dataclass
class TaskAssignment:
    task_id: UUID
    worker_id: UUID


@dataclass
class BulkOperationResult:
    """Outcome of a sequential multi-item operation. Applied items are never rolled back."""

    total: int
    applied: int = 0
    failed_task_id: UUID | None = None
    error: DomainError | None = None
    tasks: list[Task] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.applied == self.total


@dataclass
class CheckpointOutcome:
    decision: GateDecision
    task: Task
    inspection: InspectionResult | None = None
    started: bool = False


@dataclass
class QCOutcome:
    submission: QCSubmission
    task: Task

    @property
    def completed(self) -> bool:
        return self.task.status == TaskStatus.COMPLETED


class TaskWorkflowService:
    """
    Service for worker task boards and task/batch state transitions.

    One instance is shared per process so that duplicate concurrent actions
    on the same task can be rejected.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        batch_repository: BatchRepository,
        quality_repository: QualityRepository,
        next_stage_count: int = 2,
    ) -> None:
        """
        Initialize the workflow service.

        Args:
            task_repository: Task data access interface
            batch_repository: Batch data access interface
            quality_repository: Checkpoint and inspection data access interface
            next_stage_count: How many upcoming stages to show per task
        """
        self._task_repository = task_repository
        self._batch_repository = batch_repository
        self._quality_repository = quality_repository
        self._next_stage_count = next_stage_count

        # Task id -> action currently changing that task
        self._pending_actions: dict[UUID, str] = {}

    @asynccontextmanager
    async def _in_flight(self, task_id: UUID, action: str) -> AsyncIterator[None]:
        pending = self._pending_actions.get(task_id)
        if pending is not None:
            raise ActionInProgressError(task_id, pending)
        self._pending_actions[task_id] = action
        try:
            yield
        finally:
            del self._pending_actions[task_id]

    async def _save_task(self, task: Task) -> Task:
        events = task.get_domain_events()
        task.clear_domain_events()
        saved = await self._task_repository.update(task)
        self._publish(events)
        return saved

    async def _save_batch(self, batch: Batch) -> Batch:
        events = batch.get_domain_events()
        batch.clear_domain_events()
        saved = await self._batch_repository.update(batch)
        self._publish(events)
        return saved

    @staticmethod
    def _publish(events: list[DomainEvent]) -> None:
        for event in events:
            logger.info(
                "Domain event",
                event_type=type(event).__name__,
                aggregate_id=str(event.aggregate_id),
                **event.model_dump(
                    mode="json",
                    exclude={"event_id", "aggregate_id", "event_version"},
                ),
            )

    async def get_task(self, task_id: UUID) -> Task:
        task = await self._task_repository.get_by_id(task_id)
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    async def get_batch(self, batch_id: UUID) -> Batch:
        batch = await self._batch_repository.get_by_id(batch_id)
        if not batch:
            raise BatchNotFoundError(batch_id)
        return batch

    async def _batches_for(self, tasks: list[Task]) -> dict[UUID, Batch]:
        batches: dict[UUID, Batch] = {}
        for task in tasks:
            if task.batch_id and task.batch_id not in batches:
                batch = await self._batch_repository.get_by_id(task.batch_id)
                if batch:
                    batches[task.batch_id] = batch
        return batches

    def _annotate(self, task: Task, batch: Batch | None) -> TaskBoardEntry:
        stages = (
            batch.workflow_template.stages
            if batch and batch.workflow_template
            else None
        )
        return TaskBoardEntry(
            task=task,
            progress=compute_progress(task, stages),
            next_stages=next_stages(task, stages, self._next_stage_count),
        )

    async def get_worker_board(self, worker_id: UUID) -> list[TaskGroup]:
        """
        Load a worker's tasks grouped by batch and annotated with progress.

        Args:
            worker_id: Worker whose tasks are shown

        Returns:
            Task groups in first-seen order; unbatched tasks share the
            "individual" group
        """
        tasks = await self._task_repository.get_by_worker(worker_id)
        batches = await self._batches_for(tasks)

        groups = []
        for key, group in group_tasks(tasks).items():
            batch = None if key == INDIVIDUAL_GROUP else batches.get(UUID(key))
            groups.append(
                TaskGroup(
                    key=key,
                    batch=batch,
                    entries=[self._annotate(task, batch) for task in group],
                )
            )

        logger.debug(
            "Loaded worker board",
            worker_id=str(worker_id),
            task_count=len(tasks),
            group_count=len(groups),
        )
        return groups

    async def get_task_progress(self, task_id: UUID) -> TaskBoardEntry:
        task = await self.get_task(task_id)
        batch = None
        if task.batch_id:
            batch = await self._batch_repository.get_by_id(task.batch_id)
        return self._annotate(task, batch)

    async def get_model_groups(
        self, worker_id: UUID, unbatched_only: bool = True
    ) -> dict[str, ModelGroup]:
        """Group a worker's tasks by inferred headphone model."""
        tasks = await self._task_repository.get_by_worker(worker_id)
        if unbatched_only:
            tasks = group_tasks(tasks).get(INDIVIDUAL_GROUP, [])
        return group_by_model(tasks)

    async def start_task(
        self, task_id: UUID, worker_id: UUID | None = None
    ) -> TaskTransition:
        """
        Start work on a task.

        Raises:
            TaskNotFoundError: If the task doesn't exist
            TaskNotAssignedError: If the task belongs to another worker
            TaskStatusError: If the task is not assigned
        """
        async with self._in_flight(task_id, "start"):
            task = await self.get_task(task_id)
            self._require_owner(task, worker_id)
            return await self._start(task, worker_id)

    async def _start(self, task: Task, worker_id: UUID | None) -> TaskTransition:
        from_status = task.status
        task.start()
        task = await self._save_task(task)
        return self._record(task, from_status, worker_id, "start")

    async def pause_task(
        self, task_id: UUID, worker_id: UUID | None = None
    ) -> TaskTransition:
        async with self._in_flight(task_id, "pause"):
            task = await self.get_task(task_id)
            self._require_owner(task, worker_id)

            from_status = task.status
            task.pause()
            task = await self._save_task(task)
            return self._record(task, from_status, worker_id, "pause")

    async def complete_task(
        self, task_id: UUID, worker_id: UUID | None = None
    ) -> TaskTransition:
        """
        Complete a task that is in progress.

        Raises:
            TaskNotFoundError: If the task doesn't exist
            TaskNotAssignedError: If the task belongs to another worker
            TaskStatusError: If the task is not in progress
        """
        async with self._in_flight(task_id, "complete"):
            task = await self.get_task(task_id)
            self._require_owner(task, worker_id)

            from_status = task.status
            task.complete()
            task = await self._save_task(task)
            return self._record(task, from_status, worker_id, "complete")

    async def return_to_queue(
        self,
        task_id: UUID,
        stage: str | None = None,
        worker_id: UUID | None = None,
    ) -> TaskTransition:
        """Send a task back to the assigned queue, optionally at an earlier stage."""
        async with self._in_flight(task_id, "return_to_queue"):
            task = await self.get_task(task_id)

            workflow = None
            batch_stage = None
            if task.batch_id:
                batch = await self._batch_repository.get_by_id(task.batch_id)
                if batch:
                    workflow = batch.workflow_template
                    batch_stage = batch.current_stage

            from_status = task.status
            task.return_to_queue(stage, workflow, batch_stage)
            task = await self._save_task(task)
            return self._record(task, from_status, worker_id, "return_to_queue")

    async def open_checkpoint(
        self, task_id: UUID, checkpoint_type: CheckpointType
    ) -> CheckpointAttempt:
        """
        Open a checkpoint attempt for a task's current stage.

        With no checklist configured for the stage the returned attempt is
        already satisfied.
        """
        task = await self.get_task(task_id)

        checkpoint = None
        if task.stage:
            workflow_template_id = None
            if task.batch_id:
                batch = await self._batch_repository.get_by_id(task.batch_id)
                workflow_template_id = batch.workflow_template_id if batch else None
            checkpoint = await self._quality_repository.find_checkpoint(
                task.stage, checkpoint_type, workflow_template_id
            )

        attempt = CheckpointAttempt(task.id, checkpoint_type)
        attempt.open(checkpoint)
        if attempt.is_trivial:
            logger.info(
                "No checkpoint configured, treating as passed",
                task_id=str(task.id),
                stage=task.stage,
                checkpoint_type=checkpoint_type.value,
            )
        return attempt

    async def find_checkpoint(
        self,
        stage: str,
        checkpoint_type: CheckpointType,
        workflow_template_id: UUID | None = None,
    ) -> QualityCheckpoint | None:
        return await self._quality_repository.find_checkpoint(
            stage, checkpoint_type, workflow_template_id
        )

    async def list_patterns(self, stage: str | None, limit: int) -> list[QualityPattern]:
        return await self._quality_repository.list_patterns(stage, limit)

    async def submit_checkpoint(
        self, attempt: CheckpointAttempt, worker_id: UUID | None = None
    ) -> CheckpointOutcome:
        """
        Submit a checkpoint attempt and apply the gate decision.

        Missing photos or measurements are rejected before anything is
        persisted. A cleared pre-work check also starts the task.

        Raises:
            MissingRequirementsError: If required items are missing
            TaskNotFoundError: If the task doesn't exist
            TaskNotAssignedError: If the task belongs to another worker
        """
        async with self._in_flight(attempt.task_id, "checkpoint"):
            task = await self.get_task(attempt.task_id)
            self._require_owner(task, worker_id)

            inspection = None
            if not attempt.is_trivial:
                inspection = attempt.submit()
                await self._quality_repository.save_inspection(inspection)
                task.record_inspection(inspection.passed)
                task = await self._save_task(task)

            decision = attempt.decision
            CHECKPOINT_DECISIONS.labels(
                checkpoint_type=decision.checkpoint_type.value,
                passed=str(decision.passed).lower(),
                can_proceed=str(decision.can_proceed).lower(),
            ).inc()
            logger.info(
                "Checkpoint decision",
                task_id=str(task.id),
                checkpoint_type=decision.checkpoint_type.value,
                passed=decision.passed,
                can_proceed=decision.can_proceed,
                failed_checks=inspection.failed_checks if inspection else [],
            )

            outcome = CheckpointOutcome(decision=decision, task=task, inspection=inspection)
            if decision.auto_start and task.status == TaskStatus.ASSIGNED:
                transition = await self._start(task, worker_id)
                outcome.task = transition.task
                outcome.started = True
            return outcome

    async def submit_final_qc(
        self,
        task_id: UUID,
        checklist: QCChecklist,
        worker_id: UUID | None = None,
    ) -> QCOutcome:
        """
        Record a final QC sign-off and complete the task when it passes.

        A failed sign-off is stored and the task stays in progress.

        Raises:
            MissingRequirementsError: If any QC field is unanswered
            BusinessRuleError: If the task is not at a QC stage
            TaskStatusError: If a passing sign-off targets a task not in progress
        """
        async with self._in_flight(task_id, "qc"):
            submission = checklist.submit(performed_by=worker_id)

            task = await self.get_task(task_id)
            self._require_owner(task, worker_id)
            if task.stage not in QC_STAGES:
                raise BusinessRuleError(
                    f"Task {task_id} is not a QC task",
                    {"task_id": str(task_id), "stage": task.stage},
                )
            if submission.passed and task.status != TaskStatus.IN_PROGRESS:
                raise TaskStatusError(
                    task_id, task.status.value, TaskStatus.COMPLETED.value
                )

            submission = await self._quality_repository.save_qc_submission(submission)

            if submission.passed:
                from_status = task.status
                task.complete()
                task = await self._save_task(task)
                self._record(task, from_status, worker_id, "qc")
            else:
                task.record_inspection(False)
                task = await self._save_task(task)
                logger.warning(
                    "QC failed, task completion blocked",
                    task_id=str(task_id),
                    looks=submission.looks.value,
                    hardware=submission.hardware.value,
                    sound=submission.sound.value,
                )

            return QCOutcome(submission=submission, task=task)

    async def assign_tasks(
        self, assignments: list[TaskAssignment]
    ) -> BulkOperationResult:
        """
        Assign tasks one at a time, awaiting each update before the next.

        The first failure stops the loop. Assignments already applied stay
        applied; the result reports how many succeeded.
        """
        result = BulkOperationResult(total=len(assignments))

        for assignment in assignments:
            try:
                task = await self.get_task(assignment.task_id)
                task.assign_to(assignment.worker_id)
                task = await self._save_task(task)
            except DomainError as e:
                result.failed_task_id = assignment.task_id
                result.error = e
                break
            result.applied += 1
            result.tasks.append(task)

        outcome = "success" if result.succeeded else "partial"
        BULK_OPERATIONS.labels(operation="assign", outcome=outcome).inc()
        if result.succeeded:
            logger.info("Bulk assignment applied", task_count=result.applied)
        else:
            logger.warning(
                "Bulk assignment stopped",
                applied=result.applied,
                total=result.total,
                failed_task_id=str(result.failed_task_id),
                error=result.error.message,
            )
        return result

    async def transition_batch(
        self,
        batch_id: UUID,
        to_stage: str,
        transition_type: TransitionType = TransitionType.MANUAL,
        transitioned_by_id: UUID | None = None,
        notes: str | None = None,
    ) -> tuple[Batch, StageTransition]:
        """
        Move a batch to another stage of its workflow and record the transition.

        Raises:
            BatchNotFoundError: If the batch doesn't exist
            StageTransitionError: If the stage is invalid for the batch
        """
        batch = await self.get_batch(batch_id)
        transition = batch.transition_to(
            to_stage,
            transition_type=transition_type,
            transitioned_by_id=transitioned_by_id,
            notes=notes,
        )
        batch = await self._save_batch(batch)

        try:
            await self._batch_repository.record_transition(transition)
        except DomainError as e:
            # The stage change itself has been applied.
            logger.error(
                "Failed to record batch transition",
                batch_id=str(batch_id),
                to_stage=to_stage,
                error=e.message,
            )

        logger.info(
            "Batch transitioned",
            batch_id=str(batch_id),
            from_stage=transition.from_stage,
            to_stage=to_stage,
        )
        return batch, transition

    def _require_owner(self, task: Task, worker_id: UUID | None) -> None:
        if worker_id is not None and task.assigned_to_id != worker_id:
            raise TaskNotAssignedError(task.id, worker_id)

    def _record(
        self,
        task: Task,
        from_status: TaskStatus,
        worker_id: UUID | None,
        action: str,
    ) -> TaskTransition:
        transition = TaskTransition(
            task=task,
            from_status=from_status,
            to_status=task.status,
            timestamp=task.updated_at or utc_now(),
            worker_id=worker_id,
            notes=f"Task {action} by worker {worker_id}"
            if worker_id
            else f"Task {action}",
        )
        TASK_TRANSITIONS.labels(
            action=action,
            to_status=task.status.value,
        ).inc()
        logger.info(
            "Task status changed",
            task_id=str(task.id),
            action=action,
            from_status=from_status.value,
            to_status=task.status.value,
            worker_id=str(worker_id) if worker_id else None,
        )
        return transition
