"""
Role health and succession planning.

A position is vacant without a holder, at risk when the holder's term ends
within three (30-day) months, stable otherwise.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from domain.matching import coverage_score, normalize_skill

from .entities import Position

AT_RISK_DAYS = 3 * 30
READY_THRESHOLD = 80
MAX_CANDIDATES = 5


class RoleStatus(str, Enum):
    STABLE = "stable"
    AT_RISK = "at_risk"
    VACANT = "vacant"


def role_status(position: Position, today: date) -> RoleStatus:
    if position.is_vacant:
        return RoleStatus.VACANT
    if position.term_end_date is not None and (position.term_end_date - today).days < AT_RISK_DAYS:
        return RoleStatus.AT_RISK
    return RoleStatus.STABLE


@dataclass(frozen=True)
class MemberProfile:
    """A member as seen by succession planning."""

    user_id: UUID
    full_name: str = ""
    skills: Sequence[str] = ()
    year_of_study: Optional[str] = None


@dataclass(frozen=True)
class SuccessionCandidate:
    member: MemberProfile
    match_score: int
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.match_score >= READY_THRESHOLD

    def to_dict(self) -> dict:
        return {
            'user_id': str(self.member.user_id),
            'full_name': self.member.full_name,
            'year_of_study': self.member.year_of_study,
            'match_score': self.match_score,
            'matched_skills': self.matched_skills,
            'missing_skills': self.missing_skills,
            'ready': self.ready,
        }


def succession_candidates(
    position: Position,
    members: Iterable[MemberProfile],
    limit: int = MAX_CANDIDATES,
) -> List[SuccessionCandidate]:
    """Best-covered members for a position, excluding the current holder."""
    if not position.required_skills:
        return []
    candidates = []
    for member in members:
        if member.user_id == position.holder_id:
            continue
        score, matched = coverage_score(member.skills, position.required_skills)
        matched_keys = {normalize_skill(s) for s in matched}
        candidates.append(SuccessionCandidate(
            member=member,
            match_score=score,
            matched_skills=matched,
            missing_skills=[s for s in position.required_skills if normalize_skill(s) not in matched_keys],
        ))
    candidates.sort(key=lambda c: c.match_score, reverse=True)
    return candidates[:limit]


@dataclass(frozen=True)
class RoleHealthSummary:
    total_roles: int
    filled_roles: int
    vacant_roles: int
    at_risk_roles: int


def role_health_summary(positions: Iterable[Position], today: date) -> RoleHealthSummary:
    statuses = [role_status(p, today) for p in positions]
    return RoleHealthSummary(
        total_roles=len(statuses),
        filled_roles=sum(1 for s in statuses if s != RoleStatus.VACANT),
        vacant_roles=sum(1 for s in statuses if s == RoleStatus.VACANT),
        at_risk_roles=sum(1 for s in statuses if s == RoleStatus.AT_RISK),
    )


# =============================================================================
# SUCCESSION TIMELINE
# =============================================================================

@dataclass
class SemesterBucket:
    key: str
    label: str
    start: date
    end: date
    transitions: List[Position] = field(default_factory=list)
    vacant: List[Position] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.transitions or self.vacant)


def _semester_of(day: date):
    """('spring'|'fall', year) of the term a date falls in. Jun-Dec counts as fall."""
    return ('spring', day.year) if day.month <= 5 else ('fall', day.year)


def _bounds(season: str, year: int):
    if season == 'spring':
        return date(year, 1, 1), date(year, 5, 31)
    return date(year, 9, 1), date(year, 12, 31)


def _following(season: str, year: int):
    return ('fall', year) if season == 'spring' else ('spring', year + 1)


def succession_timeline(positions: Sequence[Position], today: date, upcoming: int = 3) -> List[SemesterBucket]:
    """
    Group term endings by semester: the rest of the current semester, then
    `upcoming` following semesters. Vacant positions are listed under the
    current semester.
    """
    season, year = _semester_of(today)
    current_end = date(year, 5, 31) if season == 'spring' else date(year, 12, 31)
    buckets = [SemesterBucket('current', 'Current Semester', today, current_end)]

    for _ in range(upcoming):
        season, year = _following(season, year)
        start, end = _bounds(season, year)
        buckets.append(SemesterBucket(f"{season}{year}", f"{season.title()} {year}", start, end))

    for position in positions:
        if position.is_vacant:
            buckets[0].vacant.append(position)
            continue
        if position.term_end_date is None:
            continue
        for bucket in buckets:
            if bucket.start <= position.term_end_date <= bucket.end:
                bucket.transitions.append(position)
                break
    return buckets
