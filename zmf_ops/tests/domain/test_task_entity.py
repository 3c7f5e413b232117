"""
Unit Tests for the Task Entity

Covers the status lifecycle, pause, return to queue with stage validation,
inspection bookkeeping and domain events.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from zmf_ops.domain.production.entities.task import (
    Task,
    TaskAssigned,
    TaskStatusChanged,
)
from zmf_ops.domain.production.value_objects.enums import TaskStatus
from zmf_ops.domain.shared.exceptions import StageTransitionError, TaskStatusError
from zmf_ops.tests.utils import make_task, make_workflow


class TestTaskCreation:
    """Test task construction and derived properties."""

    def test_task_type_normalized(self):
        """Test task types are stored trimmed and lowercase."""
        task = Task(task_type="  Sanding ")

        assert task.task_type == "sanding"
        assert task.status == TaskStatus.ASSIGNED
        assert task.rework_count == 0
        assert task.is_valid()

    def test_product_name_from_order_item(self):
        """Test the product name comes from the order line."""
        task = make_task(product_name="ZMF Verite Closed")

        assert task.product_name == "ZMF Verite Closed"

    def test_qc_task_detection(self):
        """Test qc stage or type marks a QC task."""
        assert make_task(stage="qc").is_qc_task
        assert make_task(stage="quality_check", task_type="inspection").is_qc_task
        assert not make_task(stage="sanding").is_qc_task

    def test_completed_without_timestamp_is_invalid(self):
        """Test a completed task must carry its completion time."""
        task = make_task(status=TaskStatus.COMPLETED)

        assert not task.is_valid()


class TestTaskLifecycle:
    """Test status transitions."""

    def test_start_assigned_task(self):
        """Test starting records the start time and raises an event."""
        task = make_task()

        task.start()

        assert task.status == TaskStatus.IN_PROGRESS
        assert task.started_at is not None
        events = task.get_domain_events()
        assert isinstance(events[-1], TaskStatusChanged)
        assert events[-1].old_status == TaskStatus.ASSIGNED
        assert events[-1].new_status == TaskStatus.IN_PROGRESS

    def test_cannot_start_twice(self):
        """Test an in-progress task cannot be started again."""
        task = make_task(status=TaskStatus.IN_PROGRESS)

        with pytest.raises(TaskStatusError):
            task.start()

    def test_complete_records_actual_hours(self):
        """Test completion derives hours from the start time."""
        task = make_task()
        started = datetime(2026, 3, 2, 8, 0, 0)
        task.start(started)

        task.complete(started + timedelta(hours=1, minutes=30))

        assert task.status == TaskStatus.COMPLETED
        assert task.actual_hours == 1.5
        assert task.completed_at == started + timedelta(hours=1, minutes=30)
        assert task.is_valid()

    def test_complete_task_loaded_with_aware_start_time(self):
        """Test completing a stored task whose start time carries a UTC offset."""
        task = Task.model_validate(
            {
                "task_type": "sanding",
                "status": "in_progress",
                "started_at": "2026-10-17T08:00:00+00:00",
            }
        )

        task.complete()

        assert task.status == TaskStatus.COMPLETED
        assert task.completed_at.tzinfo is not None
        assert task.actual_hours is not None and task.actual_hours >= 0

    def test_complete_mixes_naive_and_aware_times(self):
        """Test a naive start time is read as UTC against an aware end time."""
        task = make_task()
        task.start(datetime(2026, 3, 2, 8, 0, 0))

        task.complete(datetime(2026, 3, 2, 10, 0, 0, tzinfo=timezone.utc))

        assert task.actual_hours == 2.0

    def test_cannot_complete_assigned_task(self):
        """Test completion requires the task to be in progress."""
        task = make_task()

        with pytest.raises(TaskStatusError):
            task.complete()

    def test_completed_is_terminal(self):
        """Test nothing follows completion."""
        task = make_task()
        task.start()
        task.complete()

        with pytest.raises(TaskStatusError):
            task.start()
        with pytest.raises(TaskStatusError):
            task.assign_to(uuid4())

    def test_pause_returns_to_assigned(self):
        """Test pausing keeps the stage and goes back to assigned."""
        task = make_task(stage="assembly", status=TaskStatus.IN_PROGRESS)

        task.pause()

        assert task.status == TaskStatus.ASSIGNED
        assert task.stage == "assembly"

    def test_pause_requires_in_progress(self):
        """Test only running tasks can be paused."""
        with pytest.raises(TaskStatusError):
            make_task().pause()

    def test_assign_raises_event(self):
        """Test reassignment records the previous worker."""
        previous, new = uuid4(), uuid4()
        task = make_task(worker_id=previous)

        task.assign_to(new)

        assert task.assigned_to_id == new
        event = task.get_domain_events()[-1]
        assert isinstance(event, TaskAssigned)
        assert event.previous_worker_id == previous


class TestReturnToQueue:
    """Test sending a task back to the queue."""

    def test_return_in_progress_task_same_stage(self):
        """Test returning without a stage keeps the current stage."""
        task = make_task(stage="assembly", status=TaskStatus.IN_PROGRESS)

        task.return_to_queue()

        assert task.status == TaskStatus.ASSIGNED
        assert task.stage == "assembly"

    def test_return_to_earlier_stage(self):
        """Test a task can be sent back to an earlier stage."""
        workflow = make_workflow()
        task = make_task(stage="qc", status=TaskStatus.IN_PROGRESS)

        task.return_to_queue("assembly", workflow, batch_current_stage="sanding")

        assert task.stage == "assembly"
        assert task.status == TaskStatus.ASSIGNED

    def test_cannot_advance_stage(self):
        """Test return to queue never moves a task forward."""
        task = make_task(stage="sanding")

        with pytest.raises(StageTransitionError):
            task.return_to_queue("qc", make_workflow())

    def test_cannot_go_behind_batch_stage(self):
        """Test the target stage may not precede the batch's current stage."""
        task = make_task(stage="qc")

        with pytest.raises(StageTransitionError):
            task.return_to_queue("sanding", make_workflow(), batch_current_stage="assembly")

    def test_unknown_stage_rejected(self):
        """Test the target stage must be in the workflow."""
        task = make_task(stage="qc")

        with pytest.raises(StageTransitionError):
            task.return_to_queue("staining", make_workflow())

    def test_stage_change_needs_workflow(self):
        """Test a stage change is refused without a workflow."""
        task = make_task(stage="qc")

        with pytest.raises(StageTransitionError):
            task.return_to_queue("sanding")

    def test_completed_task_cannot_return(self):
        """Test completed work stays completed."""
        task = make_task(status=TaskStatus.IN_PROGRESS)
        task.complete()

        with pytest.raises(TaskStatusError):
            task.return_to_queue()


class TestInspectionBookkeeping:
    def test_pass_sets_quality_score(self):
        """Test a passing inspection scores 100."""
        task = make_task()

        task.record_inspection(True)

        assert task.quality_score == 100
        assert task.rework_count == 0

    def test_fail_increments_rework(self):
        """Test each failed inspection adds a rework."""
        task = make_task()

        task.record_inspection(False)
        task.record_inspection(False)

        assert task.rework_count == 2
        assert task.quality_score is None
