"""Domain entities for production tasks and batches."""

from .batch import PENDING_STAGE, Batch, BatchStageChanged, StageTransition
from .task import Task, TaskAssigned, TaskStatusChanged

__all__ = [
    "PENDING_STAGE",
    "Batch",
    "BatchStageChanged",
    "StageTransition",
    "Task",
    "TaskAssigned",
    "TaskStatusChanged",
]
