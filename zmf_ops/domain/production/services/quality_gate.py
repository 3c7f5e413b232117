"""
Quality Checkpoint Gate

Tracks one checkpoint attempt from opening to submission and decides whether
the task may proceed. The gate performs no I/O: callers load the checkpoint
configuration, persist the resulting InspectionResult and issue the task
transition themselves.
"""

import math
from dataclasses import dataclass
from uuid import UUID

from ...shared.exceptions import (
    BusinessRuleError,
    MissingRequirementsError,
    ValidationError,
)
from ..value_objects.enums import CheckpointType, FailurePolicy, GateState
from ..value_objects.quality import InspectionResult, QualityCheckpoint

PHOTO_REQUIREMENT = "photo"
MEASUREMENT_REQUIREMENT = "measurement"


def can_proceed(passed: bool, on_failure: FailurePolicy | None) -> bool:
    """A failed checkpoint only stops the task when its policy blocks progress."""
    return passed or on_failure != FailurePolicy.BLOCK_PROGRESS


@dataclass(frozen=True)
class GateDecision:
    """What the caller may do after a checkpoint attempt."""

    checkpoint_type: CheckpointType
    passed: bool
    can_proceed: bool
    on_failure: FailurePolicy | None = None

    @property
    def auto_start(self) -> bool:
        """A cleared pre-work check also starts the task."""
        return self.can_proceed and self.checkpoint_type == CheckpointType.PRE_WORK

    @property
    def message(self) -> str:
        if self.passed:
            return "Quality check passed. You can proceed with the task."
        if self.can_proceed:
            return "Issues have been recorded. You may continue working."
        return "Critical issues found. Please address them before continuing."


class CheckpointAttempt:
    """
    State of a single checkpoint attempt.

    NOT_STARTED -> IN_PROGRESS -> SUBMITTED_PASSED | SUBMITTED_FAILED. An
    attempt opened without a configured checkpoint is satisfied immediately.
    """

    def __init__(self, task_id: UUID, checkpoint_type: CheckpointType) -> None:
        self.task_id = task_id
        self.checkpoint_type = checkpoint_type
        self.state = GateState.NOT_STARTED
        self.checkpoint: QualityCheckpoint | None = None
        self.check_results: dict[str, bool] = {}
        self.photos: dict[str, str] = {}
        self.measurements: dict[str, float] = {}
        self.notes = ""
        self.result: InspectionResult | None = None

    @property
    def is_trivial(self) -> bool:
        """True when no checklist was configured for the task's stage."""
        return self.state.is_submitted and self.checkpoint is None

    def open(self, checkpoint: QualityCheckpoint | None) -> None:
        if self.state != GateState.NOT_STARTED:
            raise BusinessRuleError(
                "Checkpoint attempt has already been opened",
                {"state": self.state.value},
            )

        if checkpoint is None:
            self.state = GateState.SUBMITTED_PASSED
            return

        self.checkpoint = checkpoint
        self.check_results = {check.id: False for check in checkpoint.checks}
        self.state = GateState.IN_PROGRESS

    def record_check(self, check_id: str, passed: bool) -> None:
        self._require_open()
        self._require_known_check(check_id)
        self.check_results[check_id] = passed

    def attach_photo(self, check_id: str, photo_ref: str) -> None:
        self._require_open()
        self._require_known_check(check_id)
        if not photo_ref:
            raise ValidationError("photo", photo_ref, "Photo reference is empty")
        self.photos[check_id] = photo_ref

    def record_measurement(self, check_id: str, value: float) -> None:
        self._require_open()
        self._require_known_check(check_id)
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValidationError("measurement", str(value), "Measurement must be numeric")
        if math.isnan(value) or math.isinf(value):
            raise ValidationError("measurement", str(value), "Measurement must be finite")
        self.measurements[check_id] = float(value)

    def set_notes(self, notes: str) -> None:
        self._require_open()
        self.notes = notes or ""

    def fill(
        self,
        check_results: dict[str, bool] | None = None,
        photos: dict[str, str] | None = None,
        measurements: dict[str, float] | None = None,
        notes: str | None = None,
    ) -> None:
        """Record a whole set of answers at once."""
        for check_id, passed in (check_results or {}).items():
            self.record_check(check_id, passed)
        for check_id, photo_ref in (photos or {}).items():
            self.attach_photo(check_id, photo_ref)
        for check_id, value in (measurements or {}).items():
            self.record_measurement(check_id, value)
        if notes is not None:
            self.set_notes(notes)

    def missing_requirements(self) -> list[tuple[str, str]]:
        """(check id, requirement) pairs still missing a photo or measurement."""
        if self.checkpoint is None:
            return []

        missing = []
        for check in self.checkpoint.checks:
            if check.requires_photo and not self.photos.get(check.id):
                missing.append((check.id, PHOTO_REQUIREMENT))
            if check.requires_measurement and check.id not in self.measurements:
                missing.append((check.id, MEASUREMENT_REQUIREMENT))
        return missing

    def submit(self) -> InspectionResult:
        """
        Submit the attempt.

        Raises:
            MissingRequirementsError: If a required photo or measurement is
                missing; the attempt stays in progress
        """
        self._require_open()

        missing = self.missing_requirements()
        if missing:
            raise MissingRequirementsError(missing)

        passed = all(self.check_results.values())
        self.result = InspectionResult(
            task_id=self.task_id,
            checkpoint_id=self.checkpoint.id,
            checkpoint_type=self.checkpoint_type,
            check_results=dict(self.check_results),
            notes=self.notes,
            photo_urls=dict(self.photos),
            measurement_data=dict(self.measurements),
            passed=passed,
        )
        self.state = (
            GateState.SUBMITTED_PASSED if passed else GateState.SUBMITTED_FAILED
        )
        return self.result

    @property
    def decision(self) -> GateDecision:
        if not self.state.is_submitted:
            raise BusinessRuleError(
                "Checkpoint attempt has not been submitted",
                {"state": self.state.value},
            )

        passed = self.state == GateState.SUBMITTED_PASSED
        on_failure = self.checkpoint.on_failure if self.checkpoint else None
        return GateDecision(
            checkpoint_type=self.checkpoint_type,
            passed=passed,
            can_proceed=can_proceed(passed, on_failure),
            on_failure=on_failure,
        )

    def _require_open(self) -> None:
        if self.state != GateState.IN_PROGRESS:
            raise BusinessRuleError(
                "Checkpoint attempt is not open for answers",
                {"state": self.state.value},
            )

    def _require_known_check(self, check_id: str) -> None:
        if self.checkpoint.get_check(check_id) is None:
            raise ValidationError("check_id", check_id, "Unknown check for this checkpoint")
