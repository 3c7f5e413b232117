"""Repository interfaces for the production domain."""

from .batch_repository import BatchRepository
from .quality_repository import QualityRepository
from .task_repository import TaskRepository

__all__ = ["BatchRepository", "QualityRepository", "TaskRepository"]
