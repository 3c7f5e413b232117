"""
Quality Repository Interface

Defines the contract for checkpoint configuration, quality hints and
inspection records.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from ..value_objects.enums import CheckpointType
from ..value_objects.quality import (
    InspectionResult,
    QCSubmission,
    QualityCheckpoint,
    QualityPattern,
)


class QualityRepository(ABC):
    """Abstract repository interface for quality checkpoints and their results."""

    @abstractmethod
    async def find_checkpoint(
        self,
        stage: str,
        checkpoint_type: CheckpointType,
        workflow_template_id: UUID | None = None,
    ) -> QualityCheckpoint | None:
        """
        Find the checkpoint configured for a stage.

        A workflow-specific checkpoint wins over one shared by all
        workflows, which wins over the stage's default template. None means
        no checklist is configured.

        Args:
            stage: Stage name
            checkpoint_type: pre_work or post_work
            workflow_template_id: Workflow the task's batch follows, if any

        Returns:
            Checkpoint configuration or None
        """
        pass

    @abstractmethod
    async def list_patterns(self, stage: str | None, limit: int) -> list[QualityPattern]:
        """
        List recurring quality issues, most frequent first.

        Args:
            stage: Restrict to one stage, or None for all stages
            limit: Maximum number of patterns

        Returns:
            List of quality patterns
        """
        pass

    @abstractmethod
    async def save_inspection(self, result: InspectionResult) -> InspectionResult:
        """Store an inspection result. Results are never updated in place."""
        pass

    @abstractmethod
    async def save_qc_submission(self, submission: QCSubmission) -> QCSubmission:
        """Store a final QC sign-off."""
        pass
