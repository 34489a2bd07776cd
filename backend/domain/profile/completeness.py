"""
Profile completeness and the contribution activity heatmap.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Union


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return any(_filled(v) for v in value) if not isinstance(value, dict) else bool(value)
    return bool(value)


def profile_checks(profile: Any) -> List[bool]:
    """The thirteen things a complete student profile has."""
    get = lambda name: getattr(profile, name, None)  # noqa: E731
    return [
        _filled(get('full_name')),
        _filled(get('username')),
        _filled(get('email')),
        _filled(get('bio')),
        _filled(get('tagline')),
        _filled(get('major')),
        _filled(get('year_of_study')),
        _filled(get('location')),
        _filled(get('website')) or _filled(get('linkedin_url')) or _filled(get('github_url')),
        _filled(get('interests')),
        _filled(get('looking_for')),
        _filled(get('avatar_url')),
        _filled(get('cover_photo_url')),
    ]


def profile_completeness(profile: Any) -> int:
    """Percent of profile checks that pass, rounded."""
    checks = profile_checks(profile)
    return round(100 * sum(checks) / len(checks))


def organization_profile_completeness(organization: Any) -> int:
    """Same idea for an organization's public page (twelve checks)."""
    get = lambda name: getattr(organization, name, None)  # noqa: E731
    checks = [
        _filled(get('name')),
        _filled(get('description')),
        _filled(get('category')) and get('category') != 'other',
        _filled(get('mission')),
        _filled(get('what_we_do')),
        _filled(get('values')),
        _filled(get('email')),
        _filled(get('website')),
        _filled(get('location')),
        _filled(get('meeting_schedule')),
        _filled(get('join_process')),
        _filled(get('social_links')),
    ]
    return round(100 * sum(checks) / len(checks))


# =============================================================================
# ACTIVITY HEATMAP
# =============================================================================

@dataclass(frozen=True)
class HeatmapDay:
    day: date
    count: int

    @property
    def day_of_week(self) -> int:
        """0 = Sunday .. 6 = Saturday."""
        return (self.day.weekday() + 1) % 7

    @property
    def intensity(self) -> int:
        return min(self.count, 4)

    def to_dict(self) -> dict:
        return {
            'date': self.day.isoformat(),
            'count': self.count,
            'day_of_week': self.day_of_week,
            'intensity': self.intensity,
        }


def activity_heatmap(
    completed: Iterable[Union[date, datetime]],
    today: date,
    weeks: int = 12,
) -> List[List[HeatmapDay]]:
    """
    Daily completion counts for the last `weeks` weeks, split into
    Sunday..Saturday columns; the last column ends today.
    """
    counts = Counter(
        value.date() if isinstance(value, datetime) else value
        for value in completed
        if value is not None
    )
    columns: List[List[HeatmapDay]] = []
    current: List[HeatmapDay] = []
    day = today - timedelta(days=7 * weeks)
    while day <= today:
        entry = HeatmapDay(day, counts.get(day, 0))
        current.append(entry)
        if entry.day_of_week == 6 or day == today:
            columns.append(current)
            current = []
        day += timedelta(days=1)
    return columns
