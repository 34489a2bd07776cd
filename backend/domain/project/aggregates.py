"""
Project Domain - Aggregates.

InternalProject is the aggregate root for an organization's project: its
lifecycle, its public listing and whether it currently takes applications.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Set
from uuid import UUID

from domain.shared.base_aggregate import AggregateRoot
from domain.shared.base_entity import utcnow
from domain.shared.value_objects import (
    ProjectStatus,
    ProjectVisibility,
    ProjectTimeline,
)
from domain.shared.events import (
    ProjectPublished,
    ProjectStatusChanged,
)
from domain.shared.exceptions import (
    ValidationException,
    BusinessRuleViolationException,
    StatusTransitionException,
)


# Valid status transitions
VALID_STATUS_TRANSITIONS: Dict[ProjectStatus, Set[ProjectStatus]] = {
    ProjectStatus.PLANNING: {ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD, ProjectStatus.ARCHIVED},
    ProjectStatus.ACTIVE: {ProjectStatus.ON_HOLD, ProjectStatus.COMPLETED, ProjectStatus.ARCHIVED},
    ProjectStatus.ON_HOLD: {ProjectStatus.ACTIVE, ProjectStatus.ARCHIVED},
    ProjectStatus.COMPLETED: {ProjectStatus.ARCHIVED},
    ProjectStatus.ARCHIVED: set(),
}


@dataclass(eq=False, repr=False)
class InternalProject(AggregateRoot):
    """
    A project run by a campus organization.

    Internal projects are only visible to members. Publishing one lists it
    in the discovery feed so any student can apply.
    """

    organization_id: Optional[UUID] = None
    name: str = ""
    description: str = ""
    public_description: str = ""

    status: ProjectStatus = ProjectStatus.PLANNING
    visibility: ProjectVisibility = ProjectVisibility.INTERNAL

    # Listing details
    application_deadline: Optional[date] = None
    max_applicants: Optional[int] = None
    required_commitment_hours: Optional[int] = None
    preferred_start_date: Optional[date] = None
    due_date: Optional[date] = None
    timeline: Optional[ProjectTimeline] = None
    is_remote: bool = False
    published_at: Optional[datetime] = None

    required_skills: List[str] = field(default_factory=list)
    preferred_skills: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationException("Project name is required", "name")
        if isinstance(self.status, str):
            self.status = ProjectStatus(self.status)
        if isinstance(self.visibility, str):
            self.visibility = ProjectVisibility(self.visibility)
        if self.timeline:
            self.timeline = ProjectTimeline(self.timeline)
        else:
            self.timeline = None
        if self.max_applicants is not None and self.max_applicants < 1:
            raise ValidationException("max_applicants must be positive", "max_applicants", self.max_applicants)
        if self.required_commitment_hours is not None and self.required_commitment_hours < 0:
            raise ValidationException(
                "Commitment hours cannot be negative",
                "required_commitment_hours",
                self.required_commitment_hours,
            )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_public(self) -> bool:
        return self.visibility == ProjectVisibility.PUBLIC

    @property
    def is_listed(self) -> bool:
        """Shown in the discovery feed."""
        return self.is_public and self.status == ProjectStatus.ACTIVE

    def deadline_passed(self, today: date) -> bool:
        return self.application_deadline is not None and self.application_deadline < today

    # =========================================================================
    # STATUS MANAGEMENT
    # =========================================================================

    def change_status(
        self,
        new_status: ProjectStatus,
        user_id: Optional[UUID] = None
    ) -> None:
        """Change project status with validation."""
        new_status = ProjectStatus(new_status)
        if new_status == self.status:
            return

        valid_transitions = VALID_STATUS_TRANSITIONS.get(self.status, set())
        if new_status not in valid_transitions:
            raise StatusTransitionException(
                "Project",
                self.status.value,
                new_status.value,
                [s.value for s in valid_transitions]
            )

        old_status = self.status
        self.status = new_status
        self.updated_by = user_id
        self.increment_version()

        self.add_domain_event(ProjectStatusChanged(
            project_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            changed_by=user_id
        ))

    def publish(self, user_id: Optional[UUID] = None) -> None:
        """
        List the project publicly. Planning projects become active on publish.
        """
        if self.status not in (ProjectStatus.PLANNING, ProjectStatus.ACTIVE):
            raise BusinessRuleViolationException(
                "PUBLISH_CLOSED_PROJECT",
                f"Cannot publish a project that is {self.status.value}"
            )
        if not (self.public_description or "").strip():
            raise ValidationException(
                "A public description is required to publish a project",
                "public_description"
            )

        if self.status == ProjectStatus.PLANNING:
            self.change_status(ProjectStatus.ACTIVE, user_id)

        self.visibility = ProjectVisibility.PUBLIC
        if self.published_at is None:
            self.published_at = utcnow()
        self.updated_by = user_id
        self.increment_version()

        self.add_domain_event(ProjectPublished(
            project_id=self.id,
            organization_id=self.organization_id,
        ))

    def unpublish(self, user_id: Optional[UUID] = None) -> None:
        self.visibility = ProjectVisibility.INTERNAL
        self.updated_by = user_id
        self.increment_version()

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    def check_accepts_applications(self, today: date, active_application_count: int) -> None:
        """Raise BusinessRuleViolationException if a new application is not allowed."""
        if not self.is_listed:
            raise BusinessRuleViolationException(
                "PROJECT_NOT_OPEN",
                "This project is not accepting applications"
            )
        if self.deadline_passed(today):
            raise BusinessRuleViolationException(
                "DEADLINE_PASSED",
                "The application deadline has passed"
            )
        if self.max_applicants is not None and active_application_count >= self.max_applicants:
            raise BusinessRuleViolationException(
                "APPLICANT_LIMIT_REACHED",
                "This project has reached its maximum number of applicants"
            )

    def accepts_applications(self, today: date, active_application_count: int = 0) -> bool:
        try:
            self.check_accepts_applications(today, active_application_count)
        except BusinessRuleViolationException:
            return False
        return True
