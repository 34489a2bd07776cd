"""
Natural-language due dates.

Turns phrases such as "tomorrow", "next friday", "in 2 weeks",
"end of month" or "Mar 15" into a concrete deadline at 17:00 local time.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

DEADLINE_TIME = time(17, 0)

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
_WEEKDAY_RE = '|'.join(WEEKDAYS)


@dataclass(frozen=True)
class ParsedDate:
    value: datetime
    confidence: str  # high | medium | low
    original_input: str

    @property
    def date(self) -> date:
        return self.value.date()


def _next_weekday(today: date, weekday: str, force_next_week: bool) -> date:
    days_to_add = WEEKDAYS.index(weekday) - today.weekday()
    if days_to_add < 0 or (days_to_add == 0 and force_next_week):
        days_to_add += 7
    return today + timedelta(days=days_to_add)


def _this_weekday(today: date, weekday: str) -> date:
    days_to_add = WEEKDAYS.index(weekday) - today.weekday()
    if days_to_add <= 0:
        days_to_add += 7
    return today + timedelta(days=days_to_add)


def _in_amount(today: date, amount: int, unit: str) -> date:
    if unit.startswith('day'):
        return today + timedelta(days=amount)
    if unit.startswith('week'):
        return today + timedelta(weeks=amount)
    return today + relativedelta(months=amount)


def _end_of(today: date, unit: str) -> date:
    if unit == 'week':
        # Weeks run Monday..Sunday
        return today + timedelta(days=6 - today.weekday())
    return today + relativedelta(day=31)


_RELATIVE_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match, date], date]]] = [
    (re.compile(r'^today$', re.I), lambda m, today: today),
    (re.compile(r'^tomorrow$', re.I), lambda m, today: today + timedelta(days=1)),
    (
        re.compile(rf'^(next\s+)?({_WEEKDAY_RE})$', re.I),
        lambda m, today: _next_weekday(today, m.group(2).lower(), bool(m.group(1))),
    ),
    (
        re.compile(r'^in\s+(\d+)\s+(day|days|week|weeks|month|months)$', re.I),
        lambda m, today: _in_amount(today, int(m.group(1)), m.group(2).lower()),
    ),
    (
        re.compile(r'^next\s+(week|month)$', re.I),
        lambda m, today: _in_amount(today, 1, m.group(1).lower()),
    ),
    (
        re.compile(r'^end\s+of\s+(the\s+)?(week|month)$', re.I),
        lambda m, today: _end_of(today, m.group(2).lower()),
    ),
    (
        re.compile(rf'^this\s+({_WEEKDAY_RE})$', re.I),
        lambda m, today: _this_weekday(today, m.group(1).lower()),
    ),
]

# (strptime format, has year)
_DATE_FORMATS = [
    ('%m/%d/%Y', True),
    ('%m-%d-%Y', True),
    ('%Y-%m-%d', True),
    ('%b %d', False),
    ('%b %d, %Y', True),
    ('%B %d', False),
    ('%B %d, %Y', True),
    ('%d %b', False),
    ('%d %b %Y', True),
]

_BY_TIME_RE = re.compile(r'^by\s+(midnight|noon|eod|end of day)$', re.I)
_SOON_RE = re.compile(r'asap|urgent|immediately|midnight|eod|end of day', re.I)


def _at_deadline(day: date, now: datetime) -> datetime:
    return datetime.combine(day, DEADLINE_TIME, tzinfo=now.tzinfo)


def _parse_fixed(text: str, today: date) -> Optional[Tuple[date, bool]]:
    for fmt, has_year in _DATE_FORMATS:
        try:
            if has_year:
                parsed = datetime.strptime(text, fmt).date()
            else:
                # Parse against the current year so Feb 29 works in leap years
                parsed = datetime.strptime(f"{text} {today.year}", f"{fmt} %Y").date()
        except ValueError:
            continue
        if not has_year and parsed < today:
            parsed = parsed + relativedelta(years=1)
        return parsed, has_year
    return None


def parse_natural_date(text: Optional[str], now: datetime) -> Optional[ParsedDate]:
    """
    Parse a due-date phrase relative to `now`.

    Returns None when nothing matches. Dates without a year that already
    passed this year roll over to next year and get medium confidence.
    """
    if not text or not isinstance(text, str):
        return None
    trimmed = " ".join(text.split())
    today = now.date()

    for pattern, handler in _RELATIVE_PATTERNS:
        match = pattern.match(trimmed)
        if match:
            return ParsedDate(_at_deadline(handler(match, today), now), 'high', trimmed)

    fixed = _parse_fixed(trimmed, today)
    if fixed is not None:
        day, has_year = fixed
        return ParsedDate(_at_deadline(day, now), 'high' if has_year else 'medium', trimmed)

    if _BY_TIME_RE.match(trimmed):
        return ParsedDate(_at_deadline(today, now), 'high', trimmed)

    if _SOON_RE.search(trimmed):
        return ParsedDate(_at_deadline(today, now), 'medium', trimmed)

    return None


def format_due_date(value: date, today: date) -> str:
    """Today / Tomorrow / weekday name within a week / "Mar 5"."""
    if isinstance(value, datetime):
        value = value.date()
    if value == today:
        return 'Today'
    if value == today + timedelta(days=1):
        return 'Tomorrow'
    if value < today + timedelta(weeks=1):
        return value.strftime('%A')
    return f"{value.strftime('%b')} {value.day}"
