"""Factories for building production test data."""

from uuid import UUID, uuid4

from zmf_ops.domain.production.entities.batch import Batch
from zmf_ops.domain.production.entities.task import Task
from zmf_ops.domain.production.value_objects.enums import (
    CheckpointType,
    FailurePolicy,
    PriorityLevel,
    TaskStatus,
)
from zmf_ops.domain.production.value_objects.order import OrderItemRef
from zmf_ops.domain.production.value_objects.quality import (
    QualityCheck,
    QualityCheckpoint,
)
from zmf_ops.domain.production.value_objects.workflow import WorkflowTemplate

STANDARD_STAGES = ["sanding", "assembly", "qc", "shipping"]


def make_workflow(stages: list[str] | None = None, name: str = "Standard Build") -> WorkflowTemplate:
    return WorkflowTemplate.from_stage_names(name, stages or STANDARD_STAGES)


def make_batch(
    workflow: WorkflowTemplate | None = None,
    current_stage: str | None = "sanding",
    name: str = "Caldera Batch 12",
) -> Batch:
    return Batch(
        name=name,
        current_stage=current_stage,
        workflow_template=workflow or make_workflow(),
    )


def make_task(
    stage: str | None = "sanding",
    status: TaskStatus = TaskStatus.ASSIGNED,
    worker_id: UUID | None = None,
    batch: Batch | None = None,
    product_name: str = "ZMF Caldera Closed",
    priority: PriorityLevel = PriorityLevel.NORMAL,
    task_type: str | None = None,
) -> Task:
    return Task(
        task_type=task_type or stage or "repair",
        stage=stage,
        status=status,
        priority=priority,
        assigned_to_id=worker_id,
        batch_id=batch.id if batch else None,
        order_item=OrderItemRef(id=uuid4(), product_name=product_name, order_number="1042"),
    )


def make_checkpoint(
    stage: str = "sanding",
    checkpoint_type: CheckpointType = CheckpointType.PRE_WORK,
    on_failure: FailurePolicy = FailurePolicy.BLOCK_PROGRESS,
    workflow_template_id: UUID | None = None,
) -> QualityCheckpoint:
    return QualityCheckpoint(
        stage=stage,
        checkpoint_type=checkpoint_type,
        on_failure=on_failure,
        workflow_template_id=workflow_template_id,
        checks=(
            QualityCheck(
                id="wood_grain",
                description="Inspect wood grain on both cups",
                acceptance_criteria="No cracks or visible voids",
                requires_photo=True,
                common_failures=("hairline crack", "filler visible"),
            ),
            QualityCheck(
                id="cup_alignment",
                description="Measure cup alignment",
                acceptance_criteria="Within 0.5 mm",
                requires_measurement=True,
            ),
            QualityCheck(
                id="surface",
                description="Surface smoothness",
                acceptance_criteria="Smooth to the touch",
            ),
        ),
    )
