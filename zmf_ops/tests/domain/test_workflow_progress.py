"""
Unit Tests for the Workflow Progress Calculator

Covers ordinal position, percentage, upcoming stages and the zero-progress
fallback when no workflow context is available.
"""

from zmf_ops.domain.production.services.workflow_progress import (
    NO_PROGRESS,
    compute_progress,
    next_stages,
    stage_progress,
)
from zmf_ops.tests.utils import make_task, make_workflow


class TestComputeProgress:
    """Test stage position and percentage."""

    def test_qc_stage_in_four_stage_workflow(self):
        """Test a qc task sits at 3 of 4, 75 percent through."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])
        task = make_task(stage="qc")

        progress = compute_progress(task, workflow.stages)

        assert progress.current_index == 3
        assert progress.total_stages == 4
        assert progress.percentage == 75.0
        assert progress.has_context

    def test_first_stage(self):
        """Test the first stage reports position 1."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        progress = compute_progress(make_task(stage="sanding"), workflow.stages)

        assert progress.current_index == 1
        assert progress.percentage == 25.0

    def test_last_stage_is_complete(self):
        """Test the final stage reports 100 percent."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        progress = compute_progress(make_task(stage="shipping"), workflow.stages)

        assert progress.current_index == 4
        assert progress.percentage == 100.0

    def test_stage_not_in_workflow(self):
        """Test an unknown stage reports zero progress instead of raising."""
        workflow = make_workflow(["sanding", "assembly"])

        progress = compute_progress(make_task(stage="staining"), workflow.stages)

        assert progress == NO_PROGRESS
        assert not progress.has_context

    def test_no_workflow(self):
        """Test a task without a workflow reports zero progress."""
        assert compute_progress(make_task(stage="sanding"), None) == NO_PROGRESS
        assert compute_progress(make_task(stage="sanding"), ()) == NO_PROGRESS

    def test_task_without_stage(self):
        """Test a task with no stage reports zero progress."""
        workflow = make_workflow()

        assert compute_progress(make_task(stage=None), workflow.stages) == NO_PROGRESS

    def test_duplicate_stage_uses_first_occurrence(self):
        """Test a repeated stage name resolves to its first position."""
        workflow = make_workflow(["sanding", "qc", "rework", "qc"])

        progress = compute_progress(make_task(stage="qc"), workflow.stages)

        assert progress.current_index == 2


class TestStageProgress:
    """Test progress of a bare stage name."""

    def test_batch_stage_progress(self):
        """Test a batch stage is located like a task stage."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        progress = stage_progress("assembly", workflow.stages)

        assert progress.current_index == 2
        assert progress.percentage == 50.0

    def test_pending_stage_has_no_progress(self):
        """Test the reserved pending stage is outside the workflow."""
        workflow = make_workflow()

        assert stage_progress("pending", workflow.stages) == NO_PROGRESS


class TestNextStages:
    """Test upcoming stage lookup."""

    def test_next_two_stages(self):
        """Test the two stages after the current one are returned in order."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        stages = next_stages(make_task(stage="sanding"), workflow.stages, 2)

        assert [s.stage for s in stages] == ["assembly", "qc"]

    def test_fewer_stages_remaining(self):
        """Test only the remaining stage is returned near the end."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        stages = next_stages(make_task(stage="qc"), workflow.stages, 2)

        assert [s.stage for s in stages] == ["shipping"]

    def test_last_stage_has_no_next(self):
        """Test nothing follows the final stage."""
        workflow = make_workflow(["sanding", "assembly", "qc", "shipping"])

        assert next_stages(make_task(stage="shipping"), workflow.stages, 2) == []

    def test_unknown_stage_has_no_next(self):
        """Test a stage outside the workflow yields no upcoming stages."""
        workflow = make_workflow()

        assert next_stages(make_task(stage="staining"), workflow.stages, 2) == []

    def test_zero_count(self):
        """Test a zero count returns nothing."""
        workflow = make_workflow()

        assert next_stages(make_task(stage="sanding"), workflow.stages, 0) == []

    def test_display_name_falls_back_to_stage(self):
        """Test stages without a display name use the stage key."""
        workflow = make_workflow(["sanding", "assembly"])

        (stage,) = next_stages(make_task(stage="sanding"), workflow.stages, 2)

        assert stage.display_name == "assembly"
