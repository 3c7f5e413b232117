"""Repository implementations for the persistence service."""

from .memory import (
    InMemoryBatchRepository,
    InMemoryQualityRepository,
    InMemoryTaskRepository,
)
from .persistence_client import (
    HttpBatchRepository,
    HttpQualityRepository,
    HttpTaskRepository,
    PersistenceClient,
)

__all__ = [
    "HttpBatchRepository",
    "HttpQualityRepository",
    "HttpTaskRepository",
    "InMemoryBatchRepository",
    "InMemoryQualityRepository",
    "InMemoryTaskRepository",
    "PersistenceClient",
]
