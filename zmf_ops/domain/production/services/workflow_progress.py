"""
Workflow Progress Calculator

Locates a task's stage within its batch's workflow and derives the ordinal
position, completion percentage and upcoming stages. A task whose stage is
missing from the workflow, or that has no workflow at all, reports zero
progress and no upcoming stages instead of raising.
"""

from collections.abc import Sequence

from ..entities.task import Task
from ..value_objects.workflow import StageDescriptor, WorkflowProgress

NO_PROGRESS = WorkflowProgress(current_index=0, total_stages=0, percentage=0.0)


def _stage_index(
    stage: str | None, workflow_stages: Sequence[StageDescriptor] | None
) -> int:
    if not workflow_stages or stage is None:
        return -1
    for index, descriptor in enumerate(workflow_stages):
        if descriptor.stage == stage:
            return index
    return -1


def stage_progress(
    stage: str | None, workflow_stages: Sequence[StageDescriptor] | None
) -> WorkflowProgress:
    """Progress of a bare stage name; batches use this for their current stage."""
    index = _stage_index(stage, workflow_stages)
    if index < 0:
        return NO_PROGRESS

    position = index + 1
    total = len(workflow_stages)
    return WorkflowProgress(
        current_index=position,
        total_stages=total,
        percentage=(position / total) * 100,
    )


def compute_progress(
    task: Task, workflow_stages: Sequence[StageDescriptor] | None
) -> WorkflowProgress:
    """
    Compute a task's 1-based position in its workflow.

    Args:
        task: Task whose stage is located
        workflow_stages: Ordered stage descriptors of the batch's workflow

    Returns:
        Position, total stage count and percentage; all zero when the stage
        is not found
    """
    return stage_progress(task.stage, workflow_stages)


def next_stages(
    task: Task,
    workflow_stages: Sequence[StageDescriptor] | None,
    count: int = 2,
) -> list[StageDescriptor]:
    """Return up to ``count`` stages strictly after the task's current stage."""
    index = _stage_index(task.stage, workflow_stages)
    if index < 0 or count <= 0:
        return []
    return list(workflow_stages[index + 1 : index + 1 + count])
