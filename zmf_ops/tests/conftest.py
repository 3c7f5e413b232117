from collections.abc import Generator
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from zmf_ops.api.deps import get_workflow_service
from zmf_ops.domain.production.entities.batch import Batch
from zmf_ops.domain.production.services import TaskWorkflowService
from zmf_ops.infrastructure import (
    InMemoryBatchRepository,
    InMemoryQualityRepository,
    InMemoryTaskRepository,
)
from zmf_ops.main import app
from zmf_ops.tests.utils import make_batch, make_checkpoint


@pytest.fixture
def worker_id() -> UUID:
    return uuid4()


@pytest.fixture
def batch() -> Batch:
    return make_batch()


@pytest.fixture
def task_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def batch_repository(batch: Batch) -> InMemoryBatchRepository:
    return InMemoryBatchRepository([batch])


@pytest.fixture
def quality_repository() -> InMemoryQualityRepository:
    return InMemoryQualityRepository(checkpoints=[make_checkpoint()])


@pytest.fixture
def service(
    task_repository: InMemoryTaskRepository,
    batch_repository: InMemoryBatchRepository,
    quality_repository: InMemoryQualityRepository,
) -> TaskWorkflowService:
    return TaskWorkflowService(task_repository, batch_repository, quality_repository)


@pytest.fixture
def client(service: TaskWorkflowService) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_workflow_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
