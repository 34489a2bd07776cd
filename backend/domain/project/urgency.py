"""
Task urgency, the "My Tasks" list and per-member task load.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, List

from domain.shared.value_objects import PriorityLevel

from .entities import Contribution


class TaskUrgency(str, Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    DUE_THIS_WEEK = "due_this_week"
    UPCOMING = "upcoming"
    NO_DUE_DATE = "no_due_date"
    DONE = "done"

    @property
    def is_this_week(self) -> bool:
        return self in (TaskUrgency.DUE_TODAY, TaskUrgency.DUE_TOMORROW, TaskUrgency.DUE_THIS_WEEK)


class MyTasksFilter(str, Enum):
    ALL = "all"
    OVERDUE = "overdue"
    TODAY = "today"
    WEEK = "week"


def task_urgency(task: Contribution, today: date) -> TaskUrgency:
    if task.is_done:
        return TaskUrgency.DONE
    if task.due_date is None:
        return TaskUrgency.NO_DUE_DATE
    if task.due_date < today:
        return TaskUrgency.OVERDUE
    if task.due_date == today:
        return TaskUrgency.DUE_TODAY
    if task.due_date == today + timedelta(days=1):
        return TaskUrgency.DUE_TOMORROW
    if task.due_date <= today + timedelta(days=7):
        return TaskUrgency.DUE_THIS_WEEK
    return TaskUrgency.UPCOMING


def my_tasks(tasks: Iterable[Contribution], today: date, task_filter: MyTasksFilter = MyTasksFilter.ALL) -> List[Contribution]:
    """Open tasks by due date (undated last), narrowed by `task_filter`."""
    task_filter = MyTasksFilter(task_filter)
    open_tasks = [t for t in tasks if not t.is_done]

    if task_filter == MyTasksFilter.OVERDUE:
        open_tasks = [t for t in open_tasks if task_urgency(t, today) == TaskUrgency.OVERDUE]
    elif task_filter == MyTasksFilter.TODAY:
        open_tasks = [t for t in open_tasks if task_urgency(t, today) == TaskUrgency.DUE_TODAY]
    elif task_filter == MyTasksFilter.WEEK:
        open_tasks = [t for t in open_tasks if task_urgency(t, today).is_this_week]

    return sorted(open_tasks, key=lambda t: (t.due_date is None, t.due_date or date.max))


@dataclass(frozen=True)
class MyTaskStats:
    total: int
    overdue: int
    due_today: int
    due_this_week: int
    total_hours: Decimal


def my_task_stats(tasks: Iterable[Contribution], today: date) -> MyTaskStats:
    open_tasks = [t for t in tasks if not t.is_done]
    urgencies = [task_urgency(t, today) for t in open_tasks]
    return MyTaskStats(
        total=len(open_tasks),
        overdue=sum(1 for u in urgencies if u == TaskUrgency.OVERDUE),
        due_today=sum(1 for u in urgencies if u == TaskUrgency.DUE_TODAY),
        due_this_week=sum(1 for u in urgencies if u.is_this_week),
        total_hours=sum((Decimal(str(t.estimated_hours or 0)) for t in open_tasks), Decimal('0')),
    )


@dataclass(frozen=True)
class TaskLoad:
    """How busy a member is right now."""

    total_tasks: int
    overdue_tasks: int
    high_priority_tasks: int
    hours_committed: Decimal


def task_load(tasks: Iterable[Contribution], today: date) -> TaskLoad:
    active = [t for t in tasks if not t.is_done]
    return TaskLoad(
        total_tasks=len(active),
        overdue_tasks=sum(1 for t in active if t.is_overdue(today)),
        high_priority_tasks=sum(
            1 for t in active if t.priority in (PriorityLevel.HIGH, PriorityLevel.URGENT)
        ),
        hours_committed=sum((Decimal(str(t.estimated_hours or 0)) for t in active), Decimal('0')),
    )
