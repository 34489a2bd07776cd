"""
Base Entity classes for domain objects.

Entities have identity and lifecycle; two entities are equal when their
ids are equal.
"""

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4


def utcnow() -> datetime:
    """Timezone-aware current time used by entity timestamps."""
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Entity(ABC):
    """
    Base class for all domain entities.

    Defined by identity, not by attributes.
    """

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"


@dataclass(eq=False, repr=False)
class VersionedEntity(Entity):
    """
    Entity with optimistic locking support.

    Callers send back the version they read; a mismatch means somebody
    else changed the row in between.
    """

    version: int = 1

    def increment_version(self) -> None:
        """Increment version for optimistic locking."""
        self.version += 1
        self.updated_at = utcnow()

    def check_version(self, expected_version: Optional[int]) -> None:
        """Raise ConcurrencyException when `expected_version` is stale."""
        from .exceptions import ConcurrencyException, ValidationException

        if expected_version is None:
            return
        try:
            expected_version = int(expected_version)
        except (TypeError, ValueError):
            raise ValidationException(
                "Version must be a whole number", field="expected_version", value=expected_version
            )
        if expected_version != self.version:
            raise ConcurrencyException(
                self.__class__.__name__, self.id, expected_version, self.version
            )


@dataclass(eq=False, repr=False)
class AuditableEntity(VersionedEntity):
    """Entity that tracks who created, modified and deleted it."""

    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[UUID] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, user_id: UUID) -> None:
        """Mark entity as deleted without removing from database."""
        self.deleted_at = utcnow()
        self.deleted_by = user_id
        self.increment_version()

    def restore(self, user_id: UUID) -> None:
        self.deleted_at = None
        self.deleted_by = None
        self.updated_by = user_id
        self.increment_version()
