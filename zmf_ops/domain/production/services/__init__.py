"""Domain services for production workflow, grouping and quality gating."""

from .qc_checklist import FINAL_QC_CHECKPOINT, QC_FIELDS, QCChecklist
from .quality_gate import CheckpointAttempt, GateDecision, can_proceed
from .task_grouping import (
    INDIVIDUAL_GROUP,
    ModelGroup,
    extract_model_name,
    filter_by_model,
    group_by_model,
    group_tasks,
    model_names,
)
from .task_workflow_service import (
    BulkOperationResult,
    CheckpointOutcome,
    QCOutcome,
    TaskAssignment,
    TaskBoardEntry,
    TaskGroup,
    TaskTransition,
    TaskWorkflowService,
)
from .workflow_progress import compute_progress, next_stages, stage_progress

__all__ = [
    "FINAL_QC_CHECKPOINT",
    "INDIVIDUAL_GROUP",
    "QC_FIELDS",
    "BulkOperationResult",
    "CheckpointAttempt",
    "CheckpointOutcome",
    "GateDecision",
    "ModelGroup",
    "QCChecklist",
    "QCOutcome",
    "TaskAssignment",
    "TaskBoardEntry",
    "TaskGroup",
    "TaskTransition",
    "TaskWorkflowService",
    "can_proceed",
    "compute_progress",
    "extract_model_name",
    "filter_by_model",
    "group_by_model",
    "group_tasks",
    "model_names",
    "next_stages",
    "stage_progress",
]
