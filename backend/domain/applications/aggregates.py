"""
Applications Domain - Aggregates.

A student's application to a published project.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from domain.matching import SkillMatch
from domain.shared.base_aggregate import AggregateRoot
from domain.shared.base_entity import utcnow
from domain.shared.value_objects import ApplicationStatus, PortfolioUrl, WeeklyHours
from domain.shared.events import ApplicationSubmitted, ApplicationStatusChanged
from domain.shared.exceptions import (
    AuthorizationException,
    StatusTransitionException,
    ValidationException,
)

MAX_COVER_LETTER_LENGTH = 5000
MAX_PORTFOLIO_URLS = 5

VALID_STATUS_TRANSITIONS: Dict[ApplicationStatus, Set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.REVIEWING,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.REVIEWING: {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.PENDING,
        ApplicationStatus.WITHDRAWN,
    },
    # Reopen a decision
    ApplicationStatus.ACCEPTED: {ApplicationStatus.PENDING},
    ApplicationStatus.REJECTED: {ApplicationStatus.PENDING},
    ApplicationStatus.WITHDRAWN: set(),
}

# Statuses a reviewer (org admin) may set; withdrawing is the applicant's call.
REVIEWER_STATUSES = {
    ApplicationStatus.PENDING,
    ApplicationStatus.REVIEWING,
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
}


def clean_portfolio_urls(urls: Optional[Iterable[str]]) -> List[str]:
    """Drop blank entries and duplicates, validate the rest."""
    cleaned = []
    for raw in urls or ():
        value = (raw or "").strip()
        if not value or value in cleaned:
            continue
        try:
            cleaned.append(str(PortfolioUrl(value)))
        except ValueError as e:
            raise ValidationException(str(e), "portfolio_urls", value)
    if len(cleaned) > MAX_PORTFOLIO_URLS:
        raise ValidationException(
            f"At most {MAX_PORTFOLIO_URLS} portfolio links are allowed",
            "portfolio_urls",
            len(cleaned),
        )
    return cleaned


@dataclass(eq=False, repr=False)
class ProjectApplication(AggregateRoot):
    """
    Application with a frozen snapshot of the skill match taken at submit
    time; later profile changes do not rewrite it unless the project's
    skills change (see refresh_application_match_scores).
    """

    project_id: Optional[UUID] = None
    applicant_id: Optional[UUID] = None

    cover_letter: str = ""
    portfolio_urls: List[str] = field(default_factory=list)
    availability_hours_per_week: Optional[int] = None
    expected_start_date: Optional[date] = None

    skill_match_score: Optional[int] = None
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)

    status: ApplicationStatus = ApplicationStatus.PENDING
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    reviewer_notes: str = ""

    def __post_init__(self):
        if isinstance(self.status, str):
            self.status = ApplicationStatus(self.status)
        self.cover_letter = (self.cover_letter or "").strip()
        if len(self.cover_letter) > MAX_COVER_LETTER_LENGTH:
            raise ValidationException(
                f"Cover letter must be at most {MAX_COVER_LETTER_LENGTH} characters",
                "cover_letter",
            )
        self.portfolio_urls = clean_portfolio_urls(self.portfolio_urls)
        if self.availability_hours_per_week is not None:
            try:
                WeeklyHours(int(self.availability_hours_per_week))
            except ValueError as e:
                raise ValidationException(
                    str(e), "availability_hours_per_week", self.availability_hours_per_week
                )

    @classmethod
    def submit(
        cls,
        project_id: UUID,
        applicant_id: UUID,
        match: SkillMatch,
        **details
    ) -> ProjectApplication:
        application = cls(project_id=project_id, applicant_id=applicant_id, **details)
        application.apply_match(match)
        application.created_by = applicant_id
        application.add_domain_event(ApplicationSubmitted(
            application_id=application.id,
            project_id=project_id,
            applicant_id=applicant_id,
            match_score=match.score,
        ))
        return application

    def apply_match(self, match: SkillMatch) -> None:
        self.skill_match_score = match.score
        self.matched_skills = match.matched_skills
        self.missing_skills = list(match.missing_required)

    # =========================================================================
    # STATUS MANAGEMENT
    # =========================================================================

    def _transition(self, new_status: ApplicationStatus, user_id: Optional[UUID]) -> None:
        new_status = ApplicationStatus(new_status)
        if new_status == self.status:
            return
        allowed = VALID_STATUS_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise StatusTransitionException(
                "Application",
                self.status.value,
                new_status.value,
                [s.value for s in allowed],
            )
        old_status = self.status
        self.status = new_status
        self.updated_by = user_id
        self.increment_version()
        self.add_domain_event(ApplicationStatusChanged(
            application_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            changed_by=user_id,
        ))

    def review(self, new_status: ApplicationStatus, reviewer_id: UUID, notes: Optional[str] = None) -> None:
        """Reviewer decision. Callers check the reviewer manages the project."""
        new_status = ApplicationStatus(new_status)
        if new_status not in REVIEWER_STATUSES:
            raise ValidationException(
                f"Reviewers cannot set status '{new_status.value}'", "status", new_status.value
            )
        self._transition(new_status, reviewer_id)
        self.reviewed_by = reviewer_id
        self.reviewed_at = utcnow()
        if notes is not None:
            self.reviewer_notes = notes.strip()

    def withdraw(self, user_id: UUID) -> None:
        if user_id != self.applicant_id:
            raise AuthorizationException("withdraw", "Application")
        self._transition(ApplicationStatus.WITHDRAWN, user_id)
