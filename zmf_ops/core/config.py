from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def split_origins(value: Any) -> Any:
    """Accept a comma-separated string as well as a JSON list."""
    if isinstance(value, str) and not value.lstrip().startswith("["):
        return [origin.strip() for origin in value.split(",") if origin.strip()]
    return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "ZMF Production Ops"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Floor tablets and the manager dashboard call the API from the browser
    FRONTEND_HOST: str = "http://localhost:3000"
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(split_origins)] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        origins = [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]
        return [*origins, self.FRONTEND_HOST]

    # Persistence service (tasks, workers, batches, quality records)
    PERSISTENCE_BACKEND: Literal["memory", "http"] = "memory"
    PERSISTENCE_BASE_URL: str | None = None
    PERSISTENCE_API_KEY: str | None = None
    PERSISTENCE_TIMEOUT_SECONDS: float = 10.0

    @model_validator(mode="after")
    def _require_url_for_http_backend(self) -> Self:
        if self.PERSISTENCE_BACKEND == "http" and not self.PERSISTENCE_BASE_URL:
            raise ValueError(
                "PERSISTENCE_BASE_URL must be set when PERSISTENCE_BACKEND is 'http'"
            )
        return self

    # Client polling hints, served from /health
    TASK_POLL_INTERVAL_SECONDS: int = 10
    WORKER_POLL_INTERVAL_SECONDS: int = 30

    # Production workflow
    DEFAULT_NEXT_STAGE_COUNT: int = 2
    QUALITY_PATTERN_LIMIT: int = 5

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    ENABLE_METRICS: bool = True


settings = Settings()  # type: ignore
