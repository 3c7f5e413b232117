"""Value objects for production workflow and quality control."""

from .enums import (
    CheckpointSeverity,
    CheckpointType,
    FailurePolicy,
    GateState,
    PriorityLevel,
    QCChoice,
    TaskStatus,
    TransitionType,
)
from .order import OrderItemRef
from .quality import (
    CheckpointTemplate,
    InspectionResult,
    QCSubmission,
    QualityCheck,
    QualityCheckpoint,
    QualityPattern,
)
from .workflow import StageDescriptor, WorkflowProgress, WorkflowTemplate

__all__ = [
    "CheckpointSeverity",
    "CheckpointTemplate",
    "CheckpointType",
    "FailurePolicy",
    "GateState",
    "InspectionResult",
    "OrderItemRef",
    "PriorityLevel",
    "QCChoice",
    "QCSubmission",
    "QualityCheck",
    "QualityCheckpoint",
    "QualityPattern",
    "StageDescriptor",
    "TaskStatus",
    "TransitionType",
    "WorkflowProgress",
    "WorkflowTemplate",
]
