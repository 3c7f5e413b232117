"""Final QC sign-off: a fixed three-field checklist run through the checkpoint gate."""

from uuid import UUID

from ...shared.exceptions import MissingRequirementsError, ValidationError
from ..value_objects.enums import (
    CheckpointSeverity,
    CheckpointType,
    FailurePolicy,
    QCChoice,
)
from ..value_objects.quality import QCSubmission, QualityCheck, QualityCheckpoint
from .quality_gate import CheckpointAttempt

QC_FIELDS = ("looks", "hardware", "sound")
QC_STAGES = frozenset({"qc", "quality_check"})
CHOICE_REQUIREMENT = "choice"

FINAL_QC_CHECKPOINT = QualityCheckpoint(
    stage="qc",
    checkpoint_type=CheckpointType.POST_WORK,
    severity=CheckpointSeverity.MAJOR,
    # Blocking a failed sign-off is up to the caller.
    on_failure=FailurePolicy.LOG_ONLY,
    checks=(
        QualityCheck(
            id="looks",
            description="Visual inspection",
            acceptance_criteria="No visual defects",
        ),
        QualityCheck(
            id="hardware",
            description="Hardware check",
            acceptance_criteria="All components secure",
        ),
        QualityCheck(
            id="sound",
            description="Sound test",
            acceptance_criteria="Sound quality good",
        ),
    ),
)


class QCChecklist:
    """Three required pass/fail choices plus free-text notes."""

    def __init__(self, task_id: UUID) -> None:
        self.task_id = task_id
        self.choices: dict[str, QCChoice | None] = dict.fromkeys(QC_FIELDS)
        self.notes = ""
        self._attempt = CheckpointAttempt(task_id, CheckpointType.POST_WORK)
        self._attempt.open(FINAL_QC_CHECKPOINT)

    def set_result(self, field_name: str, choice: QCChoice | str) -> None:
        if field_name not in self.choices:
            raise ValidationError(field_name, str(choice), "Unknown QC field")
        choice = QCChoice(choice)
        self._attempt.record_check(field_name, choice == QCChoice.PASS)
        self.choices[field_name] = choice

    def set_notes(self, notes: str) -> None:
        self._attempt.set_notes(notes)
        self.notes = notes or ""

    def missing_fields(self) -> list[str]:
        return [name for name, choice in self.choices.items() if choice is None]

    @property
    def overall_status(self) -> QCChoice:
        if all(choice == QCChoice.PASS for choice in self.choices.values()):
            return QCChoice.PASS
        return QCChoice.FAIL

    def submit(self, performed_by: UUID | None = None) -> QCSubmission:
        """
        Validate that every field is answered and build the submission.

        Raises:
            MissingRequirementsError: If any of the three fields is unset
        """
        missing = self.missing_fields()
        if missing:
            raise MissingRequirementsError(
                [(name, CHOICE_REQUIREMENT) for name in missing]
            )

        result = self._attempt.submit()
        return QCSubmission(
            task_id=self.task_id,
            performed_by=performed_by,
            looks=self.choices["looks"],
            hardware=self.choices["hardware"],
            sound=self.choices["sound"],
            notes=self.notes,
            overall_status=QCChoice.PASS if result.passed else QCChoice.FAIL,
        )
