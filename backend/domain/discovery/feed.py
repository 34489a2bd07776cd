"""
Discovery Feed.

Filtering, searching, ranking and offset pagination over feed rows that the
application layer has already loaded and scored.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from domain.matching import FOR_YOU_THRESHOLD, SkillMatch
from .deadlines import CLOSING_SOON_DAYS, DeadlineStatus, deadline_status, is_closing_soon

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
LOW_COMMITMENT_HOURS = 5
FOR_YOU_LIMIT = 4

VIEW_WEIGHT = 1
APPLICATION_WEIGHT = 3
SAVE_WEIGHT = 2


class FeedFilter(str, Enum):
    """Quick filters offered above the discovery feed."""

    ALL = "all"
    FOR_YOU = "for_you"
    CLOSING_SOON = "closing_soon"
    REMOTE = "remote"
    LOW_COMMITMENT = "low_commitment"
    TRENDING = "trending"

    @classmethod
    def parse(cls, value: Optional[str]) -> FeedFilter:
        """Accept both `closing_soon` and `closing-soon`; blank means ALL."""
        if not value:
            return cls.ALL
        return cls(value.strip().lower().replace('-', '_'))


@dataclass
class DiscoverProject:
    """One row of the discovery feed, scored for a particular viewer."""

    id: UUID
    name: str
    description: str = ""
    organization_id: Optional[UUID] = None
    organization_name: str = ""
    organization_slug: str = ""
    organization_logo_url: str = ""
    category: str = ""
    required_skills: List[str] = field(default_factory=list)
    preferred_skills: List[str] = field(default_factory=list)
    commitment_hours: Optional[int] = None
    application_deadline: Optional[date] = None
    is_remote: bool = False
    timeline: Optional[str] = None
    max_applicants: Optional[int] = None
    view_count: int = 0
    application_count: int = 0
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    match: Optional[SkillMatch] = None
    is_saved: bool = False
    has_applied: bool = False
    application_status: Optional[str] = None
    trending_score: int = 0

    @property
    def match_score(self) -> Optional[int]:
        return self.match.score if self.match else None

    @property
    def sort_timestamp(self) -> float:
        """Newest first ordering key; rows without a date sort last."""
        moment = self.published_at or self.created_at
        return moment.timestamp() if moment else float('-inf')

    def deadline(self, now: datetime) -> DeadlineStatus:
        return deadline_status(self.application_deadline, now)


@dataclass(frozen=True)
class FeedPage:
    """One infinite-scroll page."""

    items: List[DiscoverProject]
    offset: int
    limit: int
    total: int

    @property
    def next_offset(self) -> Optional[int]:
        end = self.offset + len(self.items)
        return end if end < self.total else None

    @property
    def has_more(self) -> bool:
        return self.next_offset is not None


@dataclass(frozen=True)
class ForYouSelection:
    featured: Optional[DiscoverProject]
    best_matches: List[DiscoverProject]

    @property
    def items(self) -> List[DiscoverProject]:
        return ([self.featured] if self.featured else []) + list(self.best_matches)


def trending_score(views_7d: int, applications_7d: int, saves_7d: int = 0) -> int:
    """Engagement over the last week; applications and saves weigh more than views."""
    return (
        VIEW_WEIGHT * max(views_7d, 0)
        + APPLICATION_WEIGHT * max(applications_7d, 0)
        + SAVE_WEIGHT * max(saves_7d, 0)
    )


def apply_feed_filter(
    projects: Iterable[DiscoverProject],
    feed_filter: FeedFilter,
    now: datetime,
    for_you_threshold: int = FOR_YOU_THRESHOLD,
    closing_soon_days: int = CLOSING_SOON_DAYS,
    low_commitment_hours: int = LOW_COMMITMENT_HOURS,
) -> List[DiscoverProject]:
    """
    Apply one quick filter, keeping input order except for TRENDING,
    which re-sorts by trending score (stable on ties).
    """
    projects = list(projects)

    if feed_filter == FeedFilter.FOR_YOU:
        return [p for p in projects if (p.match_score or 0) >= for_you_threshold]
    if feed_filter == FeedFilter.CLOSING_SOON:
        return [
            p for p in projects
            if is_closing_soon(p.application_deadline, now, closing_soon_days)
        ]
    if feed_filter == FeedFilter.REMOTE:
        return [p for p in projects if p.is_remote]
    if feed_filter == FeedFilter.LOW_COMMITMENT:
        return [
            p for p in projects
            if p.commitment_hours is not None and p.commitment_hours <= low_commitment_hours
        ]
    if feed_filter == FeedFilter.TRENDING:
        return sorted(projects, key=lambda p: p.trending_score, reverse=True)
    return projects


def search_projects(projects: Iterable[DiscoverProject], query: Optional[str]) -> List[DiscoverProject]:
    """Case-insensitive substring search over name, description, organization and skills."""
    projects = list(projects)
    needle = (query or "").strip().casefold()
    if not needle:
        return projects

    def haystack(project: DiscoverProject) -> str:
        parts = [project.name, project.description, project.organization_name]
        parts.extend(project.required_skills)
        parts.extend(project.preferred_skills)
        return "\n".join(p for p in parts if p).casefold()

    return [p for p in projects if needle in haystack(p)]


def rank_recommendations(projects: Iterable[DiscoverProject]) -> List[DiscoverProject]:
    """Best match first; newer projects win ties."""
    return sorted(
        projects,
        key=lambda p: (p.match_score or 0, p.sort_timestamp),
        reverse=True,
    )


def clamp_limit(limit: Optional[int], default: int = DEFAULT_PAGE_SIZE) -> int:
    if limit is None:
        return default
    return max(1, min(int(limit), MAX_PAGE_SIZE))


def paginate(items: Sequence[DiscoverProject], offset: int = 0, limit: Optional[int] = None) -> FeedPage:
    """Slice one page out of the filtered feed."""
    offset = max(0, int(offset or 0))
    limit = clamp_limit(limit)
    items = list(items)
    return FeedPage(
        items=items[offset:offset + limit],
        offset=offset,
        limit=limit,
        total=len(items),
    )


def select_for_you(
    projects: Iterable[DiscoverProject],
    limit: int = FOR_YOU_LIMIT,
    threshold: int = FOR_YOU_THRESHOLD,
) -> ForYouSelection:
    """Top matches above the threshold; the best one is featured."""
    ranked = rank_recommendations(
        p for p in projects if (p.match_score or 0) >= threshold
    )[:max(limit, 0)]
    if not ranked:
        return ForYouSelection(featured=None, best_matches=[])
    return ForYouSelection(featured=ranked[0], best_matches=ranked[1:])
