"""
Shared Value Objects used across multiple domains.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID

from .exceptions import EntityNotFoundException


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ProjectStatus(str, Enum):
    """Lifecycle status of an internal project."""

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @property
    def is_open(self) -> bool:
        """Projects in these states still have work going on."""
        return self in (ProjectStatus.PLANNING, ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD)


class ProjectVisibility(str, Enum):
    INTERNAL = "internal"
    PUBLIC = "public"


class ProjectTimeline(str, Enum):
    """How soon a project wants people to start."""

    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_SEMESTER = "this_semester"


class ApplicationStatus(str, Enum):
    """Status of a project application."""

    PENDING = "pending"
    REVIEWING = "reviewing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_active(self) -> bool:
        """Application still counts against the project's applicant cap."""
        return self in (ApplicationStatus.PENDING, ApplicationStatus.REVIEWING, ApplicationStatus.ACCEPTED)


class ContributionStatus(str, Enum):
    """Kanban column of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VERIFIED = "verified"

    @property
    def is_done(self) -> bool:
        return self in (ContributionStatus.COMPLETED, ContributionStatus.VERIFIED)


class PriorityLevel(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def weight(self) -> int:
        """Sort weight; higher sorts first on the board."""
        return {
            PriorityLevel.URGENT: 4,
            PriorityLevel.HIGH: 3,
            PriorityLevel.MEDIUM: 2,
            PriorityLevel.LOW: 1,
        }[self]

    @classmethod
    def weight_of(cls, value: Optional[str]) -> int:
        """Weight of a raw priority string; unknown values sort last."""
        try:
            return cls(value).weight
        except ValueError:
            return 0


class DifficultyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class MemberRole(str, Enum):
    """Role of a member inside an organization."""

    MEMBER = "member"
    ADMIN = "admin"
    PRESIDENT = "president"
    VICE_PRESIDENT = "vice_president"
    TREASURER = "treasurer"
    SECRETARY = "secretary"
    TECH_LEAD = "tech_lead"
    PROJECT_LEAD = "project_lead"

    @property
    def can_manage(self) -> bool:
        """Roles allowed to manage projects, positions and applications."""
        return self in (MemberRole.ADMIN, MemberRole.PRESIDENT, MemberRole.VICE_PRESIDENT)

    @property
    def display_name(self) -> str:
        return self.value.replace('_', ' ').title()


class SkillImportance(str, Enum):
    REQUIRED = "required"
    PREFERRED = "preferred"


class SkillSource(str, Enum):
    """Where a member skill record came from."""

    SELF_REPORTED = "self_reported"
    TASK_VERIFIED = "task_verified"
    PEER_ENDORSED = "peer_endorsed"
    MIGRATED = "migrated"


class SkillCategory(str, Enum):
    TECHNICAL = "technical"
    DESIGN = "design"
    BUSINESS = "business"
    COMMUNICATION = "communication"
    LEADERSHIP = "leadership"
    OTHER = "other"


class OrganizationCategory(str, Enum):
    ACADEMIC = "academic"
    TECHNOLOGY = "technology"
    ARTS = "arts"
    SPORTS = "sports"
    SERVICE = "service"
    CULTURAL = "cultural"
    PROFESSIONAL = "professional"
    OTHER = "other"


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class PortfolioUrl:
    """A link submitted with an application. Only http(s) is accepted."""

    value: str

    def __post_init__(self):
        parsed = urlparse(self.value)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"Invalid portfolio URL: {self.value}")
        if len(self.value) > 500:
            raise ValueError("Portfolio URL too long")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WeeklyHours:
    """Hours per week a student can commit (1..60)."""

    value: int

    MIN = 1
    MAX = 60

    def __post_init__(self):
        if not (self.MIN <= self.value <= self.MAX):
            raise ValueError(f"Weekly hours must be between {self.MIN} and {self.MAX}")

    @property
    def is_low_commitment(self) -> bool:
        return self.value <= 5


@dataclass(frozen=True)
class Term:
    """
    Term of office for an organization position.

    `end` is the last day of the term; an open-ended term has no end.
    """

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError("Term start cannot be after term end")

    def days_remaining(self, today: date) -> Optional[int]:
        if self.end is None:
            return None
        return (self.end - today).days

    def has_ended(self, today: date) -> bool:
        return self.end is not None and self.end < today


def parse_entity_id(value, entity_type: str) -> UUID:
    """
    Coerce a path or body id into a UUID.

    A malformed id cannot name any row, so it reads as not found.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise EntityNotFoundException(entity_type, value)
