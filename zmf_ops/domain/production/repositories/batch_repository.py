"""
Batch Repository Interface

Defines the contract for batch data access operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from ..entities.batch import Batch, StageTransition


class BatchRepository(ABC):
    """Abstract repository interface for Batch entities and their stage history."""

    @abstractmethod
    async def get_by_id(self, batch_id: UUID) -> Batch | None:
        """
        Retrieve a batch, with its workflow template, by ID.

        Args:
            batch_id: Unique batch identifier

        Returns:
            Batch entity or None if not found
        """
        pass

    @abstractmethod
    async def update(self, batch: Batch) -> Batch:
        """Persist changes to an existing batch."""
        pass

    @abstractmethod
    async def record_transition(self, transition: StageTransition) -> None:
        """Append a stage transition to the batch's history."""
        pass
