"""
Deadline urgency bucketing for application deadlines.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

DeadlineValue = Union[date, datetime, None]

URGENT_DAYS = 3
CLOSING_SOON_DAYS = 7
DATED_LABEL_DAYS = 30


class DeadlineUrgency(str, Enum):
    """Bucket of an application deadline relative to now."""

    ROLLING = "rolling"
    CLOSED = "closed"
    LAST_DAY = "last_day"
    TOMORROW = "tomorrow"
    URGENT = "urgent"
    SOON = "soon"
    OPEN = "open"

    @property
    def level(self) -> str:
        """Coarse level used by cards for colouring: expired/high/medium/low/none."""
        if self is DeadlineUrgency.CLOSED:
            return "expired"
        if self in (DeadlineUrgency.LAST_DAY, DeadlineUrgency.TOMORROW, DeadlineUrgency.URGENT):
            return "high"
        if self is DeadlineUrgency.SOON:
            return "medium"
        if self is DeadlineUrgency.OPEN:
            return "low"
        return "none"


@dataclass(frozen=True)
class DeadlineStatus:
    urgency: DeadlineUrgency
    days_left: Optional[int]
    label: str

    @property
    def is_urgent(self) -> bool:
        return self.urgency.level in ("expired", "high")

    @property
    def is_open(self) -> bool:
        return self.urgency is not DeadlineUrgency.CLOSED

    def to_dict(self) -> dict:
        return {
            'urgency': self.urgency.value,
            'level': self.urgency.level,
            'days_left': self.days_left,
            'label': self.label,
            'is_urgent': self.is_urgent,
        }


def days_until(deadline: DeadlineValue, now: datetime) -> Optional[int]:
    """
    Whole days left until `deadline`, rounded up.

    A plain date counts as open for the whole of that day, so the deadline
    day itself is 0 and yesterday is -1.
    """
    if deadline is None:
        return None
    if isinstance(deadline, datetime):
        if (deadline.tzinfo is None) != (now.tzinfo is None):
            deadline = deadline.replace(tzinfo=now.tzinfo)
        seconds = (deadline - now).total_seconds()
        return math.ceil(seconds / 86400)
    return (deadline - now.date()).days


def deadline_status(deadline: DeadlineValue, now: datetime) -> DeadlineStatus:
    days = days_until(deadline, now)
    if days is None:
        return DeadlineStatus(DeadlineUrgency.ROLLING, None, "Rolling basis")
    if days < 0:
        return DeadlineStatus(DeadlineUrgency.CLOSED, days, "Closed")
    if days == 0:
        return DeadlineStatus(DeadlineUrgency.LAST_DAY, 0, "Due today")
    if days == 1:
        return DeadlineStatus(DeadlineUrgency.TOMORROW, 1, "Due tomorrow")
    if days <= URGENT_DAYS:
        return DeadlineStatus(DeadlineUrgency.URGENT, days, f"{days} days left")
    if days <= CLOSING_SOON_DAYS:
        return DeadlineStatus(DeadlineUrgency.SOON, days, f"{days} days left")

    day = deadline.date() if isinstance(deadline, datetime) else deadline
    formatted = f"{day.strftime('%b')} {day.day}"
    if days <= DATED_LABEL_DAYS:
        return DeadlineStatus(DeadlineUrgency.OPEN, days, f"{formatted} ({days} days)")
    return DeadlineStatus(DeadlineUrgency.OPEN, days, formatted)


def is_closing_soon(deadline: DeadlineValue, now: datetime, within_days: int = CLOSING_SOON_DAYS) -> bool:
    """Deadline falls between today and `within_days` days from now."""
    days = days_until(deadline, now)
    return days is not None and 0 <= days <= within_days
