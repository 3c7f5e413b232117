"""Domain enums for production tasks and quality checkpoints."""

from enum import Enum


class TaskStatus(str, Enum):
    """Task status enumeration."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        """Check if task status is terminal."""
        return self == TaskStatus.COMPLETED

    def can_transition_to(self, target_status: "TaskStatus") -> bool:
        """Check if task can advance from current status to target status."""
        valid_transitions = {
            TaskStatus.ASSIGNED: {TaskStatus.IN_PROGRESS},
            TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED},
            TaskStatus.COMPLETED: set(),  # Terminal state
        }
        return target_status in valid_transitions.get(self, set())


class PriorityLevel(str, Enum):
    """Task priority enumeration."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class CheckpointType(str, Enum):
    """When a quality checkpoint runs relative to the work."""

    PRE_WORK = "pre_work"
    POST_WORK = "post_work"


class CheckpointSeverity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class FailurePolicy(str, Enum):
    """What a failed checkpoint means for task progress."""

    BLOCK_PROGRESS = "block_progress"
    WARN_CONTINUE = "warn_continue"
    LOG_ONLY = "log_only"


class GateState(str, Enum):
    """Lifecycle of a single checkpoint attempt."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED_PASSED = "submitted_passed"
    SUBMITTED_FAILED = "submitted_failed"

    @property
    def is_submitted(self) -> bool:
        return self in {GateState.SUBMITTED_PASSED, GateState.SUBMITTED_FAILED}


class QCChoice(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class TransitionType(str, Enum):
    """How a batch stage transition was triggered."""

    MANUAL = "manual"
    AUTOMATIC = "automatic"
