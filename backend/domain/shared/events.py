"""
Domain Events.

Immutable records of something that happened in the domain. Application
services drain them from aggregates after persistence and fan them out to
websocket groups and background tasks.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from .base_entity import utcnow


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=utcnow, kw_only=True)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_payload(self) -> Dict[str, Any]:
        """JSON-friendly dict used for channel layer messages."""
        payload = {}
        for key, value in asdict(self).items():
            if isinstance(value, (UUID, datetime)):
                value = str(value) if isinstance(value, UUID) else value.isoformat()
            payload[key] = value
        payload['event_type'] = self.event_type
        return payload


# =============================================================================
# PROJECT EVENTS
# =============================================================================

@dataclass(frozen=True)
class ProjectPublished(DomainEvent):
    """A project became visible in the public discovery feed."""

    project_id: UUID
    organization_id: Optional[UUID] = None


@dataclass(frozen=True)
class ProjectStatusChanged(DomainEvent):
    """Event raised when project status changes."""

    project_id: UUID
    old_status: str
    new_status: str
    changed_by: Optional[UUID] = None


# =============================================================================
# CONTRIBUTION EVENTS
# =============================================================================

@dataclass(frozen=True)
class ContributionMoved(DomainEvent):
    """A task changed kanban column."""

    contribution_id: UUID
    project_id: UUID
    old_status: str
    new_status: str
    version: int
    moved_by: Optional[UUID] = None


@dataclass(frozen=True)
class ContributionAssigned(DomainEvent):
    """A member was added to (or removed from) a task."""

    contribution_id: UUID
    project_id: UUID
    user_id: UUID
    is_primary: bool = False
    removed: bool = False


# =============================================================================
# APPLICATION EVENTS
# =============================================================================

@dataclass(frozen=True)
class ApplicationSubmitted(DomainEvent):
    """Event raised when a student applies to a project."""

    application_id: UUID
    project_id: UUID
    applicant_id: UUID
    match_score: int


@dataclass(frozen=True)
class ApplicationStatusChanged(DomainEvent):
    """Event raised when an application is reviewed or withdrawn."""

    application_id: UUID
    old_status: str
    new_status: str
    changed_by: Optional[UUID] = None


# =============================================================================
# ORGANIZATION EVENTS
# =============================================================================

@dataclass(frozen=True)
class OrganizationCreated(DomainEvent):
    organization_id: UUID
    slug: str
    created_by: Optional[UUID] = None


@dataclass(frozen=True)
class PositionFilled(DomainEvent):
    """A vacant organization position received a holder."""

    position_id: UUID
    organization_id: UUID
    holder_id: UUID
