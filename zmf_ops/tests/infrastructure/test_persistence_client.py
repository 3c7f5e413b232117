"""
Tests for the HTTP persistence client

Uses httpx.MockTransport to stand in for the persistence service.
"""

import json
from uuid import uuid4

import httpx
import pytest

from zmf_ops.domain.production.entities.batch import StageTransition
from zmf_ops.domain.production.value_objects.enums import CheckpointType, QCChoice, TaskStatus
from zmf_ops.domain.production.value_objects.quality import InspectionResult, QCSubmission
from zmf_ops.domain.shared.exceptions import PersistenceError
from zmf_ops.infrastructure.persistence_client import (
    HttpBatchRepository,
    HttpQualityRepository,
    HttpTaskRepository,
    PersistenceClient,
)
from zmf_ops.tests.utils import make_batch, make_checkpoint, make_task, make_workflow

BASE_URL = "https://persistence.test"


def _client(handler, api_key: str | None = "secret") -> PersistenceClient:
    return PersistenceClient(
        BASE_URL, api_key=api_key, timeout=2.0, transport=httpx.MockTransport(handler)
    )


class TestPersistenceClient:
    @pytest.mark.asyncio
    async def test_headers_sent(self):
        """Test the API key and JSON accept headers are sent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(200, json=[])

        client = _client(handler)
        await client.request("GET", "/patterns")
        await client.aclose()

        assert seen["authorization"] == "Bearer secret"
        assert seen["apikey"] == "secret"
        assert seen["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        """Test a non-success response becomes a PersistenceError."""
        client = _client(lambda request: httpx.Response(503, json={"error": "down"}))

        with pytest.raises(PersistenceError) as exc_info:
            await client.request("GET", "/patterns")

        assert exc_info.value.status_code == 503
        assert exc_info.value.to_dict()["type"] == "persistence"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test connection failures and timeouts become PersistenceError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = _client(handler)

        with pytest.raises(PersistenceError) as exc_info:
            await client.request("GET", "/patterns")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)

    @pytest.mark.asyncio
    async def test_not_found_allowed(self):
        """Test a 404 can be read as a missing record."""
        client = _client(lambda request: httpx.Response(404))

        assert await client.request("GET", "/tasks/x", allow_not_found=True) is None
        with pytest.raises(PersistenceError):
            await client.request("GET", "/tasks/x")

    @pytest.mark.asyncio
    async def test_empty_body(self):
        """Test no-content responses decode to None."""
        client = _client(lambda request: httpx.Response(204))

        assert await client.request("POST", "/batches/x/transitions", json={}) is None


class TestHttpTaskRepository:
    @pytest.mark.asyncio
    async def test_get_by_worker(self):
        """Test worker tasks are fetched and parsed."""
        worker_id = uuid4()
        task = make_task(stage="qc", worker_id=worker_id)

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == f"/workers/{worker_id}/tasks"
            return httpx.Response(200, json=[task.model_dump(mode="json")])

        repo = HttpTaskRepository(_client(handler))

        tasks = await repo.get_by_worker(worker_id)

        assert [t.id for t in tasks] == [task.id]
        assert tasks[0].product_name == "ZMF Caldera Closed"

    @pytest.mark.asyncio
    async def test_get_missing_task(self):
        """Test a missing task is returned as None."""
        repo = HttpTaskRepository(_client(lambda request: httpx.Response(404)))

        assert await repo.get_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_update_patches_mutable_fields(self):
        """Test updates send only the fields the core changes."""
        task = make_task()
        task.start()
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["method"] = request.method
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=task.model_dump(mode="json"))

        repo = HttpTaskRepository(_client(handler))

        updated = await repo.update(task)

        assert captured["method"] == "PATCH"
        assert captured["path"] == f"/tasks/{task.id}"
        assert captured["body"]["status"] == "in_progress"
        assert "task_type" not in captured["body"]
        assert "order_item" not in captured["body"]
        assert updated.status == TaskStatus.IN_PROGRESS


class TestHttpBatchRepository:
    @pytest.mark.asyncio
    async def test_workflow_resolved_by_id(self):
        """Test a batch that only references its workflow gets it loaded."""
        workflow = make_workflow()
        batch = make_batch(workflow=workflow)
        batch_data = batch.model_dump(mode="json", exclude={"workflow_template"})
        batch_data["workflow_template_id"] = str(workflow.id)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == f"/batches/{batch.id}":
                return httpx.Response(200, json=batch_data)
            if request.url.path == f"/workflows/{workflow.id}":
                return httpx.Response(200, json=workflow.model_dump(mode="json"))
            return httpx.Response(404)

        repo = HttpBatchRepository(_client(handler))

        loaded = await repo.get_by_id(batch.id)

        assert loaded.workflow_template_id == workflow.id
        assert [s.stage for s in loaded.workflow_template.stages] == [
            "sanding",
            "assembly",
            "qc",
            "shipping",
        ]

    @pytest.mark.asyncio
    async def test_record_transition(self):
        """Test transitions are posted to the batch history."""
        batch = make_batch()
        transition = StageTransition(
            batch_id=batch.id,
            workflow_template_id=batch.workflow_template_id,
            from_stage="sanding",
            to_stage="assembly",
        )
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(201)

        repo = HttpBatchRepository(_client(handler))

        await repo.record_transition(transition)

        assert captured["path"] == f"/batches/{batch.id}/transitions"
        assert captured["body"]["to_stage"] == "assembly"
        assert captured["body"]["transition_type"] == "manual"


class TestHttpQualityRepository:
    @pytest.mark.asyncio
    async def test_find_checkpoint_query(self):
        """Test checkpoint lookup passes stage, type and workflow."""
        checkpoint = make_checkpoint()
        workflow_id = uuid4()
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(request.url.params)
            return httpx.Response(200, json=checkpoint.model_dump(mode="json"))

        repo = HttpQualityRepository(_client(handler))

        found = await repo.find_checkpoint("sanding", CheckpointType.PRE_WORK, workflow_id)

        assert captured == {
            "stage": "sanding",
            "type": "pre_work",
            "workflow_template_id": str(workflow_id),
        }
        assert found == checkpoint

    @pytest.mark.asyncio
    async def test_find_checkpoint_none(self):
        """Test an unconfigured stage returns None."""
        repo = HttpQualityRepository(_client(lambda request: httpx.Response(404)))

        assert await repo.find_checkpoint("shipping", CheckpointType.POST_WORK) is None

    @pytest.mark.asyncio
    async def test_save_inspection_includes_failed_checks(self):
        """Test the stored inspection carries its failed check ids."""
        result = InspectionResult(
            task_id=uuid4(),
            checkpoint_type=CheckpointType.POST_WORK,
            check_results={"surface": False, "wood_grain": True},
            passed=False,
        )
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            return httpx.Response(201)

        repo = HttpQualityRepository(_client(handler))

        saved = await repo.save_inspection(result)

        assert captured["body"]["failed_checks"] == ["surface"]
        assert saved == result

    @pytest.mark.asyncio
    async def test_save_qc_submission(self):
        """Test QC results are posted to the qc-results collection."""
        submission = QCSubmission(
            task_id=uuid4(),
            looks=QCChoice.PASS,
            hardware=QCChoice.PASS,
            sound=QCChoice.FAIL,
            overall_status=QCChoice.FAIL,
        )
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(201, json=json.loads(request.content))

        repo = HttpQualityRepository(_client(handler))

        saved = await repo.save_qc_submission(submission)

        assert paths == ["/qc-results"]
        assert saved.overall_status == QCChoice.FAIL
