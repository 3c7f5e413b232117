"""Batch entity grouping tasks that move through a workflow together."""

from uuid import UUID

from pydantic import Field

from ...shared.base import DomainEvent, Entity, ValueObject
from ...shared.exceptions import StageTransitionError
from ..value_objects.enums import TransitionType
from ..value_objects.workflow import WorkflowTemplate

PENDING_STAGE = "pending"


class StageTransition(ValueObject):
    """Record of one batch stage change."""

    batch_id: UUID
    workflow_template_id: UUID | None
    from_stage: str | None
    to_stage: str
    transition_type: TransitionType = TransitionType.MANUAL
    transitioned_by_id: UUID | None = None
    notes: str | None = None


class BatchStageChanged(DomainEvent):
    """Event raised when a batch moves to another stage."""

    batch_id: UUID
    from_stage: str | None
    to_stage: str


class Batch(Entity):
    """A named production run. Tasks reference their batch; the batch does not own them."""

    name: str = Field(min_length=1, max_length=200)
    current_stage: str | None = None
    workflow_template: WorkflowTemplate | None = None

    def is_valid(self) -> bool:
        if self.current_stage is None or self.workflow_template is None:
            return bool(self.name)
        return bool(self.name) and (
            self.current_stage == PENDING_STAGE
            or self.workflow_template.has_stage(self.current_stage)
        )

    @property
    def workflow_template_id(self) -> UUID | None:
        return self.workflow_template.id if self.workflow_template else None

    def transition_to(
        self,
        to_stage: str,
        transition_type: TransitionType = TransitionType.MANUAL,
        transitioned_by_id: UUID | None = None,
        notes: str | None = None,
    ) -> StageTransition:
        """
        Move the batch to another stage of its workflow.

        Forward and backward moves are both allowed so managers can correct
        mistakes and send a batch back for rework.

        Raises:
            StageTransitionError: If the stage is not in the workflow or the
                batch is already there
        """
        if (
            self.workflow_template is not None
            and to_stage != PENDING_STAGE
            and not self.workflow_template.has_stage(to_stage)
        ):
            raise StageTransitionError(
                f"Stage '{to_stage}' is not defined in the workflow", to_stage
            )

        if self.current_stage == to_stage:
            raise StageTransitionError(
                f"Batch is already in the '{to_stage}' stage", to_stage
            )

        transition = StageTransition(
            batch_id=self.id,
            workflow_template_id=self.workflow_template_id,
            from_stage=self.current_stage,
            to_stage=to_stage,
            transition_type=transition_type,
            transitioned_by_id=transitioned_by_id,
            notes=notes,
        )

        self.current_stage = to_stage
        self.mark_updated()
        self.add_domain_event(
            BatchStageChanged(
                aggregate_id=self.id,
                batch_id=self.id,
                from_stage=transition.from_stage,
                to_stage=to_stage,
            )
        )
        return transition
