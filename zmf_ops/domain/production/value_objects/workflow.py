"""Workflow template value objects."""

from uuid import UUID, uuid4

from pydantic import Field

from ...shared.base import ValueObject


class StageDescriptor(ValueObject):
    """One named stage of a workflow template."""

    stage: str = Field(min_length=1)
    name: str | None = None
    estimated_hours: float | None = Field(None, ge=0)

    @property
    def display_name(self) -> str:
        return self.name or self.stage


class WorkflowTemplate(ValueObject):
    """
    Ordered sequence of production stages.

    Templates are reference data owned by the persistence service and are
    never modified here.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    stages: tuple[StageDescriptor, ...] = ()

    @classmethod
    def from_stage_names(cls, name: str, stage_names: list[str]) -> "WorkflowTemplate":
        return cls(
            name=name,
            stages=tuple(StageDescriptor(stage=stage) for stage in stage_names),
        )

    def index_of(self, stage: str | None) -> int:
        """Zero-based index of the first matching stage, or -1."""
        if stage is None:
            return -1
        for index, descriptor in enumerate(self.stages):
            if descriptor.stage == stage:
                return index
        return -1

    def has_stage(self, stage: str) -> bool:
        return self.index_of(stage) >= 0


class WorkflowProgress(ValueObject):
    """Ordinal position of a task within its workflow."""

    current_index: int = 0
    total_stages: int = 0
    percentage: float = 0.0

    @property
    def has_context(self) -> bool:
        """False when no workflow context was available for the task."""
        return self.total_stages > 0
