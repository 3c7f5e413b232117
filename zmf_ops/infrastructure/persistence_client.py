"""
HTTP persistence client.

Repositories backed by the hosted task/worker/batch service. Any transport
error, timeout or non-success response surfaces as PersistenceError; nothing
is retried here.
"""

from typing import Any
from uuid import UUID

import httpx

from ..core.observability import get_correlation_id, get_logger
from ..domain.production.entities.batch import Batch, StageTransition
from ..domain.production.entities.task import Task
from ..domain.production.repositories import (
    BatchRepository,
    QualityRepository,
    TaskRepository,
)
from ..domain.production.value_objects.enums import CheckpointType
from ..domain.production.value_objects.quality import (
    InspectionResult,
    QCSubmission,
    QualityCheckpoint,
    QualityPattern,
)
from ..domain.shared.exceptions import PersistenceError

logger = get_logger(__name__)

# Fields the core is allowed to change on an existing task
TASK_MUTABLE_FIELDS = {
    "stage",
    "status",
    "assigned_to_id",
    "actual_hours",
    "notes",
    "started_at",
    "completed_at",
    "quality_score",
    "rework_count",
    "updated_at",
}


class PersistenceClient:
    """Thin async JSON client for the persistence service."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path relative to the service base URL
            allow_not_found: Return None on 404 instead of raising

        Raises:
            PersistenceError: On transport failure or non-success status
        """
        correlation_id = get_correlation_id()
        if correlation_id:
            kwargs.setdefault("headers", {})["X-Correlation-ID"] = correlation_id

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Persistence request failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and allow_not_found:
            return None

        if response.is_error:
            logger.error(
                "Persistence service returned an error",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise PersistenceError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()


class HttpTaskRepository(TaskRepository):
    def __init__(self, client: PersistenceClient) -> None:
        self._client = client

    async def get_by_id(self, task_id: UUID) -> Task | None:
        data = await self._client.request("GET", f"/tasks/{task_id}", allow_not_found=True)
        return Task.model_validate(data) if data else None

    async def get_by_worker(self, worker_id: UUID) -> list[Task]:
        data = await self._client.request("GET", f"/workers/{worker_id}/tasks")
        return [Task.model_validate(item) for item in data or []]

    async def update(self, task: Task) -> Task:
        payload = task.model_dump(mode="json", include=TASK_MUTABLE_FIELDS)
        data = await self._client.request("PATCH", f"/tasks/{task.id}", json=payload)
        return Task.model_validate(data) if data else task


class HttpBatchRepository(BatchRepository):
    def __init__(self, client: PersistenceClient) -> None:
        self._client = client

    async def get_by_id(self, batch_id: UUID) -> Batch | None:
        data = await self._client.request(
            "GET", f"/batches/{batch_id}", allow_not_found=True
        )
        if not data:
            return None

        # Batches may reference their workflow by id only
        workflow_id = data.get("workflow_template_id")
        if not data.get("workflow_template") and workflow_id:
            data["workflow_template"] = await self._client.request(
                "GET", f"/workflows/{workflow_id}", allow_not_found=True
            )
        return Batch.model_validate(data)

    async def update(self, batch: Batch) -> Batch:
        payload = batch.model_dump(mode="json", include={"current_stage", "updated_at"})
        data = await self._client.request("PATCH", f"/batches/{batch.id}", json=payload)
        return Batch.model_validate(data) if data else batch

    async def record_transition(self, transition: StageTransition) -> None:
        await self._client.request(
            "POST",
            f"/batches/{transition.batch_id}/transitions",
            json=transition.model_dump(mode="json"),
        )


class HttpQualityRepository(QualityRepository):
    def __init__(self, client: PersistenceClient) -> None:
        self._client = client

    async def find_checkpoint(
        self,
        stage: str,
        checkpoint_type: CheckpointType,
        workflow_template_id: UUID | None = None,
    ) -> QualityCheckpoint | None:
        params = {"stage": stage, "type": checkpoint_type.value}
        if workflow_template_id:
            params["workflow_template_id"] = str(workflow_template_id)

        data = await self._client.request(
            "GET", "/checkpoints", params=params, allow_not_found=True
        )
        return QualityCheckpoint.model_validate(data) if data else None

    async def list_patterns(self, stage: str | None, limit: int) -> list[QualityPattern]:
        params: dict[str, str | int] = {"limit": limit}
        if stage:
            params["stage"] = stage
        data = await self._client.request("GET", "/patterns", params=params)
        return [QualityPattern.model_validate(item) for item in data or []]

    async def save_inspection(self, result: InspectionResult) -> InspectionResult:
        payload = result.model_dump(mode="json")
        payload["failed_checks"] = result.failed_checks
        data = await self._client.request("POST", "/inspections", json=payload)
        return InspectionResult.model_validate(data) if data else result

    async def save_qc_submission(self, submission: QCSubmission) -> QCSubmission:
        data = await self._client.request(
            "POST", "/qc-results", json=submission.model_dump(mode="json")
        )
        return QCSubmission.model_validate(data) if data else submission
