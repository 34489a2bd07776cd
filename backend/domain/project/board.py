"""
Kanban board for a project's contributions.

The board has four fixed columns. Cards inside a column show overdue tasks
first, then by priority (urgent > high > medium > low > unknown); ties keep
the order the tasks were given in.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from domain.shared.value_objects import ContributionStatus, PriorityLevel
from domain.shared.exceptions import EntityNotFoundException, ValidationException

from .entities import Contribution


@dataclass(frozen=True)
class KanbanColumn:
    status: ContributionStatus
    title: str


KANBAN_COLUMNS: Tuple[KanbanColumn, ...] = (
    KanbanColumn(ContributionStatus.PENDING, "To Do"),
    KanbanColumn(ContributionStatus.IN_PROGRESS, "In Progress"),
    KanbanColumn(ContributionStatus.COMPLETED, "Completed"),
    KanbanColumn(ContributionStatus.VERIFIED, "Verified"),
)


@dataclass
class BoardColumn:
    status: ContributionStatus
    title: str
    tasks: List[Contribution] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.tasks)


@dataclass
class Board:
    columns: List[BoardColumn]
    today: date

    @property
    def tasks(self) -> List[Contribution]:
        return [task for column in self.columns for task in column.tasks]

    @property
    def total(self) -> int:
        return sum(column.count for column in self.columns)

    def column(self, status: ContributionStatus) -> Optional[BoardColumn]:
        status = ContributionStatus(status)
        for column in self.columns:
            if column.status == status:
                return column
        return None

    def find(self, task_id: UUID) -> Contribution:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise EntityNotFoundException("Contribution", task_id)


def card_sort_key(task: Contribution, today: date) -> Tuple[int, int]:
    return (0 if task.is_overdue(today) else 1, -PriorityLevel.weight_of(task.priority))


def sort_cards(tasks: Iterable[Contribution], today: date) -> List[Contribution]:
    return sorted(tasks, key=lambda task: card_sort_key(task, today))


def _parse_status(value) -> ContributionStatus:
    try:
        return ContributionStatus(value)
    except ValueError:
        raise ValidationException(f"Unknown board column '{value}'", "status", value)


def build_board(
    tasks: Iterable[Contribution],
    today: date,
    member_id: Optional[UUID] = None,
    priority: Optional[str] = None,
    visible_columns: Optional[Sequence[str]] = None,
) -> Board:
    """
    Group tasks into columns.

    `member_id` keeps tasks assigned to that member, `priority` keeps one
    priority level, `visible_columns` hides the other columns.
    """
    selected = list(tasks)
    if member_id is not None:
        selected = [t for t in selected if t.is_assigned_to(member_id)]
    if priority:
        selected = [t for t in selected if PriorityLevel(t.priority).value == priority]

    shown = None
    if visible_columns:
        shown = {_parse_status(value) for value in visible_columns}

    columns = []
    for column in KANBAN_COLUMNS:
        if shown is not None and column.status not in shown:
            continue
        cards = [t for t in selected if t.status == column.status]
        columns.append(BoardColumn(column.status, column.title, sort_cards(cards, today)))
    return Board(columns=columns, today=today)


def move_on_board(
    tasks: Iterable[Contribution],
    task_id: UUID,
    new_status,
    today: date,
    expected_version: Optional[int] = None,
    user_id: Optional[UUID] = None,
) -> Tuple[Contribution, ContributionStatus]:
    """
    Move one card. Returns (task, previous status).

    Raises ConcurrencyException when the client's version is stale, so the
    client can revert its optimistic move and reload.
    """
    status = _parse_status(new_status)
    task = next((t for t in tasks if t.id == task_id), None)
    if task is None:
        raise EntityNotFoundException("Contribution", task_id)
    task.check_version(expected_version)
    old_status = task.move_to(status, user_id)
    return task, old_status
