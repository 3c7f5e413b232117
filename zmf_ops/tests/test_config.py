import pytest
from pydantic import ValidationError

from zmf_ops.core.config import Settings


def test_cors_origins_from_comma_separated_string() -> None:
    s = Settings(
        BACKEND_CORS_ORIGINS="http://floor.zmf.test, http://dashboard.zmf.test/",
        FRONTEND_HOST="http://localhost:5173",
    )

    assert s.all_cors_origins == [
        "http://floor.zmf.test",
        "http://dashboard.zmf.test",
        "http://localhost:5173",
    ]


def test_http_backend_requires_base_url() -> None:
    with pytest.raises(ValidationError):
        Settings(PERSISTENCE_BACKEND="http", PERSISTENCE_BASE_URL=None)


def test_defaults() -> None:
    s = Settings(_env_file=None)

    assert s.PERSISTENCE_BACKEND == "memory"
    assert s.DEFAULT_NEXT_STAGE_COUNT == 2
    assert s.TASK_POLL_INTERVAL_SECONDS == 10
    assert s.WORKER_POLL_INTERVAL_SECONDS == 30
