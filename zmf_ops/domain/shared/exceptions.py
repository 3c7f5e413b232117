"""
Domain Exceptions

Defines the error taxonomy for production tasks, batches and quality
checkpoints. Every error carries an ErrorType discriminator and renders to
a dictionary for API responses.
"""

from enum import Enum
from uuid import UUID


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"
    CONCURRENCY = "concurrency"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | list | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        details = {
            "field": field_name,
            "value": str(value) if value is not None else None,
            "error_code": self.error_code,
        }
        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            details,
        )


class MissingRequirementsError(DomainError):
    """Raised when a checkpoint is submitted without required photos or measurements."""

    def __init__(self, missing: list[tuple[str, str]]) -> None:
        self.missing = missing
        descriptions = [f"{check_id} ({requirement})" for check_id, requirement in missing]
        super().__init__(
            "Missing required items: " + ", ".join(descriptions),
            ErrorType.VALIDATION,
            {
                "missing": [
                    {"check_id": check_id, "requirement": requirement}
                    for check_id, requirement in missing
                ],
            },
        )


class BusinessRuleError(DomainError):
    """Raised when business rules are violated."""

    def __init__(
        self, message: str, details: dict[str, str | int | bool | None] | None = None
    ) -> None:
        super().__init__(message, ErrorType.BUSINESS_RULE, details)


# Task-related exceptions
class TaskNotFoundError(DomainError):
    """Raised when a task is not found."""

    def __init__(self, task_id: UUID) -> None:
        super().__init__(
            f"Task not found: {task_id}",
            ErrorType.NOT_FOUND,
            {"task_id": str(task_id), "entity_type": "task"},
        )
        self.task_id = task_id


class TaskStatusError(BusinessRuleError):
    """Raised when a task status transition is not allowed."""

    def __init__(self, task_id: UUID, current_status: str, target_status: str) -> None:
        super().__init__(
            f"Task {task_id} cannot transition from {current_status} to {target_status}",
            {
                "task_id": str(task_id),
                "current_status": current_status,
                "target_status": target_status,
            },
        )
        self.task_id = task_id
        self.current_status = current_status
        self.target_status = target_status


class TaskNotAssignedError(BusinessRuleError):
    """Raised when a worker acts on a task that is not assigned to them."""

    def __init__(self, task_id: UUID, worker_id: UUID) -> None:
        super().__init__(
            f"Task {task_id} is not assigned to worker {worker_id}",
            {"task_id": str(task_id), "worker_id": str(worker_id)},
        )
        self.task_id = task_id
        self.worker_id = worker_id


class CheckpointBlockedError(BusinessRuleError):
    """Raised when a failed checkpoint blocks the requested transition."""

    def __init__(self, task_id: UUID, reason: str) -> None:
        super().__init__(
            f"Task {task_id} blocked by quality check: {reason}",
            {"task_id": str(task_id)},
        )
        self.task_id = task_id


# Batch-related exceptions
class BatchNotFoundError(DomainError):
    """Raised when a batch is not found."""

    def __init__(self, batch_id: UUID) -> None:
        super().__init__(
            f"Batch not found: {batch_id}",
            ErrorType.NOT_FOUND,
            {"batch_id": str(batch_id), "entity_type": "batch"},
        )
        self.batch_id = batch_id


class StageTransitionError(BusinessRuleError):
    """Raised when a batch or task cannot move to the requested stage."""

    def __init__(self, message: str, to_stage: str) -> None:
        super().__init__(message, {"to_stage": to_stage})
        self.to_stage = to_stage


# Infrastructure-facing exceptions
class PersistenceError(DomainError):
    """Raised when the persistence service fails or returns a non-success response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(
            message, ErrorType.PERSISTENCE, {"status_code": status_code}
        )
        self.status_code = status_code


class ActionInProgressError(DomainError):
    """Raised when the same action is already pending for a task."""

    def __init__(self, task_id: UUID, action: str) -> None:
        super().__init__(
            f"Action '{action}' already in progress for task {task_id}",
            ErrorType.CONCURRENCY,
            {"task_id": str(task_id), "action": action},
        )
        self.task_id = task_id
        self.action = action
