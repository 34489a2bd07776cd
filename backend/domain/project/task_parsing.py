"""
Structured result of parsing a one-line task description.

The language model only extracts text fields; everything that must be
deterministic (priority fallback, assignee matching, due date) is done here.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from domain.shared.value_objects import PriorityLevel
from domain.shared.exceptions import ValidationException

_URGENT_RE = re.compile(r'\b(urgent|asap|midnight)\b', re.I)
_HIGH_RE = re.compile(r'\bimportant\b', re.I)
_LOW_RE = re.compile(r'\b(whenever|eventually)\b', re.I)


def infer_priority(text: Optional[str]) -> PriorityLevel:
    """Keyword fallback when the model returns no priority."""
    text = text or ""
    if _URGENT_RE.search(text):
        return PriorityLevel.URGENT
    if _HIGH_RE.search(text):
        return PriorityLevel.HIGH
    if _LOW_RE.search(text):
        return PriorityLevel.LOW
    return PriorityLevel.MEDIUM


@dataclass(frozen=True)
class AssigneeMatch:
    requested_name: str
    matched_name: Optional[str]

    @property
    def confidence(self) -> str:
        return 'high' if self.matched_name else 'low'

    def to_dict(self) -> dict:
        return {
            'requested_name': self.requested_name,
            'matched_name': self.matched_name,
            'confidence': self.confidence,
        }


def match_assignee(requested: str, member_names: Iterable[str]) -> AssigneeMatch:
    """
    First member whose name contains the requested name, or whose first
    name appears in the requested name ("Sarah" matches "Sarah Johnson").
    """
    wanted = requested.strip().lower()
    for member in member_names:
        lowered = member.lower()
        parts = lowered.split()
        first_name = parts[0] if parts else ""
        if wanted and (wanted in lowered or (first_name and first_name in wanted)):
            return AssigneeMatch(requested, member)
    return AssigneeMatch(requested, None)


def match_assignees(requested_names: Iterable[str], member_names: Iterable[str]) -> List[AssigneeMatch]:
    members = list(member_names)
    return [match_assignee(name, members) for name in requested_names or () if name and name.strip()]


@dataclass(frozen=True)
class ParsedTask:
    """Fields extracted from free text, before dates and names are resolved."""

    title: str
    description: str = ""
    priority: PriorityLevel = PriorityLevel.MEDIUM
    due_date_text: Optional[str] = None
    assignee_names: List[str] = field(default_factory=list)
    subtasks: List[str] = field(default_factory=list)

    @classmethod
    def from_arguments(cls, arguments: Dict[str, Any], original_input: str) -> ParsedTask:
        """
        Build from the model's function-call arguments.

        An unknown or missing priority falls back to keyword inference on
        the original input.
        """
        title = str(arguments.get('title') or '').strip()
        if not title:
            raise ValidationException("Could not find a task title", "title")

        raw_priority = arguments.get('priority')
        try:
            priority = PriorityLevel(raw_priority)
        except ValueError:
            priority = infer_priority(original_input)

        return cls(
            title=title,
            description=str(arguments.get('description') or '').strip(),
            priority=priority,
            due_date_text=(arguments.get('due_date') or None),
            assignee_names=[str(n) for n in arguments.get('assignee_names') or []],
            subtasks=[str(s).strip() for s in arguments.get('subtasks') or [] if str(s).strip()],
        )
