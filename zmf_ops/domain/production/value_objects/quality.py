"""Quality checkpoint configuration and inspection records."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import Field

from ...shared.base import ValueObject, utc_now
from .enums import CheckpointSeverity, CheckpointType, FailurePolicy, QCChoice


class QualityCheck(ValueObject):
    """A single item on a checkpoint checklist."""

    id: str = Field(min_length=1)
    description: str
    acceptance_criteria: str = ""
    requires_photo: bool = False
    requires_measurement: bool = False
    common_failures: tuple[str, ...] = ()


class QualityCheckpoint(ValueObject):
    """Checklist configuration for a (stage, checkpoint_type) pair."""

    id: UUID = Field(default_factory=uuid4)
    stage: str
    checkpoint_type: CheckpointType
    severity: CheckpointSeverity = CheckpointSeverity.MAJOR
    on_failure: FailurePolicy = FailurePolicy.BLOCK_PROGRESS
    checks: tuple[QualityCheck, ...] = ()
    workflow_template_id: UUID | None = None

    def get_check(self, check_id: str) -> QualityCheck | None:
        for check in self.checks:
            if check.id == check_id:
                return check
        return None


class CheckpointTemplate(ValueObject):
    """Default checklist for a stage, used when no workflow-specific checkpoint exists."""

    id: UUID = Field(default_factory=uuid4)
    stage_name: str
    checkpoint_type: CheckpointType
    checks: tuple[QualityCheck, ...] = ()
    is_default: bool = True

    def as_checkpoint(self) -> QualityCheckpoint:
        return QualityCheckpoint(
            id=self.id,
            stage=self.stage_name,
            checkpoint_type=self.checkpoint_type,
            severity=CheckpointSeverity.MAJOR,
            on_failure=FailurePolicy.BLOCK_PROGRESS,
            checks=self.checks,
        )


class QualityPattern(ValueObject):
    """Recurring issue hint shown alongside a checkpoint."""

    stage: str
    issue_type: str
    frequency: int = 0
    typical_cause: str = "Unknown cause"
    prevention_tip: str = "Follow standard procedures"
    last_seen: datetime | None = None


class InspectionResult(ValueObject):
    """Outcome of one checkpoint attempt. A retry creates a new result."""

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID
    checkpoint_id: UUID | None = None
    checkpoint_type: CheckpointType
    check_results: dict[str, bool] = Field(default_factory=dict)
    notes: str = ""
    photo_urls: dict[str, str] = Field(default_factory=dict)
    measurement_data: dict[str, float] = Field(default_factory=dict)
    passed: bool
    inspected_at: datetime = Field(default_factory=utc_now)

    @property
    def failed_checks(self) -> list[str]:
        return [check_id for check_id, ok in self.check_results.items() if not ok]


class QCSubmission(ValueObject):
    """Final three-field QC sign-off for a task."""

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID
    performed_by: UUID | None = None
    looks: QCChoice
    hardware: QCChoice
    sound: QCChoice
    notes: str = ""
    overall_status: QCChoice
    submitted_at: datetime = Field(default_factory=utc_now)

    @property
    def passed(self) -> bool:
        return self.overall_status == QCChoice.PASS
