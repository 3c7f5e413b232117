"""Base classes shared by production entities, value objects and events."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and fresh timestamps compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ValueObject(BaseModel):
    """Immutable, compared by value."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class DomainEvent(BaseModel):
    """Something that happened to an entity, logged once the entity is saved."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    event_id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(default_factory=utc_now)
    aggregate_id: UUID
    event_version: int = 1


class Entity(BaseModel, ABC):
    """
    Identity-bearing domain object.

    Two entities of the same class are equal when their ids match. State
    changes queue domain events which the workflow service drains when it
    saves the entity.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None

    _domain_events: list[DomainEvent] = PrivateAttr(default_factory=list)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def mark_updated(self) -> None:
        self.updated_at = utc_now()

    @abstractmethod
    def is_valid(self) -> bool:
        """Check the entity's own business rules."""

    def add_domain_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        self._domain_events.clear()

    def get_domain_events(self) -> list[DomainEvent]:
        """Pending events, oldest first; the returned list is a copy."""
        return list(self._domain_events)
