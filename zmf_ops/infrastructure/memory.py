"""
In-memory repositories.

Used for local development and tests. Entities are copied on the way in and
out so callers never share state with the store, as with a real service.
"""

from datetime import datetime, timezone
from uuid import UUID

from ..domain.production.entities.batch import Batch, StageTransition
from ..domain.production.entities.task import Task
from ..domain.production.repositories import (
    BatchRepository,
    QualityRepository,
    TaskRepository,
)
from ..domain.production.value_objects.enums import CheckpointType
from ..domain.production.value_objects.quality import (
    CheckpointTemplate,
    InspectionResult,
    QCSubmission,
    QualityCheckpoint,
    QualityPattern,
)
from ..domain.shared.base import as_utc
from ..domain.shared.exceptions import PersistenceError

_NEVER_SEEN = datetime.min.replace(tzinfo=timezone.utc)


def _pattern_rank(pattern: QualityPattern) -> tuple[int, datetime]:
    last_seen = as_utc(pattern.last_seen) if pattern.last_seen else _NEVER_SEEN
    return pattern.frequency, last_seen


class InMemoryTaskRepository(TaskRepository):
    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks: dict[UUID, Task] = {}
        for task in tasks or []:
            self.add(task)

    def add(self, task: Task) -> None:
        self._tasks[task.id] = task.model_copy(deep=True)

    async def get_by_id(self, task_id: UUID) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    async def get_by_worker(self, worker_id: UUID) -> list[Task]:
        return [
            task.model_copy(deep=True)
            for task in self._tasks.values()
            if task.assigned_to_id == worker_id
        ]

    async def update(self, task: Task) -> Task:
        if task.id not in self._tasks:
            raise PersistenceError(f"Task {task.id} does not exist", status_code=404)
        self._tasks[task.id] = task.model_copy(deep=True)
        return task


class InMemoryBatchRepository(BatchRepository):
    def __init__(self, batches: list[Batch] | None = None) -> None:
        self._batches: dict[UUID, Batch] = {}
        self.transitions: list[StageTransition] = []
        for batch in batches or []:
            self.add(batch)

    def add(self, batch: Batch) -> None:
        self._batches[batch.id] = batch.model_copy(deep=True)

    async def get_by_id(self, batch_id: UUID) -> Batch | None:
        batch = self._batches.get(batch_id)
        return batch.model_copy(deep=True) if batch else None

    async def update(self, batch: Batch) -> Batch:
        if batch.id not in self._batches:
            raise PersistenceError(f"Batch {batch.id} does not exist", status_code=404)
        self._batches[batch.id] = batch.model_copy(deep=True)
        return batch

    async def record_transition(self, transition: StageTransition) -> None:
        self.transitions.append(transition)


class InMemoryQualityRepository(QualityRepository):
    def __init__(
        self,
        checkpoints: list[QualityCheckpoint] | None = None,
        templates: list[CheckpointTemplate] | None = None,
        patterns: list[QualityPattern] | None = None,
    ) -> None:
        self.checkpoints = list(checkpoints or [])
        self.templates = list(templates or [])
        self.patterns = list(patterns or [])
        self.inspections: list[InspectionResult] = []
        self.qc_submissions: list[QCSubmission] = []

    async def find_checkpoint(
        self,
        stage: str,
        checkpoint_type: CheckpointType,
        workflow_template_id: UUID | None = None,
    ) -> QualityCheckpoint | None:
        candidates = [
            cp
            for cp in self.checkpoints
            if cp.stage == stage and cp.checkpoint_type == checkpoint_type
        ]
        # Workflow-specific first, then checkpoints shared by every workflow
        for wanted in (workflow_template_id, None):
            for cp in candidates:
                if cp.workflow_template_id == wanted:
                    return cp

        for template in self.templates:
            if (
                template.is_default
                and template.stage_name == stage
                and template.checkpoint_type == checkpoint_type
            ):
                return template.as_checkpoint()
        return None

    async def list_patterns(self, stage: str | None, limit: int) -> list[QualityPattern]:
        patterns = [p for p in self.patterns if stage is None or p.stage == stage]
        patterns.sort(key=_pattern_rank, reverse=True)
        return patterns[:limit]

    async def save_inspection(self, result: InspectionResult) -> InspectionResult:
        self.inspections.append(result)
        return result

    async def save_qc_submission(self, submission: QCSubmission) -> QCSubmission:
        self.qc_submissions.append(submission)
        return submission
