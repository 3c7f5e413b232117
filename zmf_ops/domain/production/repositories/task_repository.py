"""
Task Repository Interface

Defines the contract for task data access operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from ..entities.task import Task


class TaskRepository(ABC):
    """
    Abstract repository interface for Task entities.

    Implementations talk to the task persistence service; every method may
    raise PersistenceError when the service fails.
    """

    @abstractmethod
    async def get_by_id(self, task_id: UUID) -> Task | None:
        """
        Retrieve a task by its ID.

        Args:
            task_id: Unique task identifier

        Returns:
            Task entity or None if not found
        """
        pass

    @abstractmethod
    async def get_by_worker(self, worker_id: UUID) -> list[Task]:
        """
        Retrieve the tasks assigned to a worker, in the service's order.

        Args:
            worker_id: Worker the tasks are assigned to

        Returns:
            List of task entities
        """
        pass

    @abstractmethod
    async def update(self, task: Task) -> Task:
        """
        Persist changes to an existing task.

        Args:
            task: Task entity with updated fields

        Returns:
            Task as stored by the service
        """
        pass
