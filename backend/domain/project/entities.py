"""
Project Domain - Entities.

Contributions (tasks) and their subtasks.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from domain.shared.base_entity import AuditableEntity, utcnow
from domain.shared.value_objects import ContributionStatus, PriorityLevel
from domain.shared.exceptions import ValidationException


@dataclass(frozen=True)
class Subtask:
    """Checklist line inside a task."""

    title: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data) -> Subtask:
        if isinstance(data, str):
            return cls(title=data)
        return cls(title=str(data.get('title', '')), completed=bool(data.get('completed', False)))

    def to_dict(self) -> dict:
        return {'title': self.title, 'completed': self.completed}


@dataclass(eq=False, repr=False)
class Contribution(AuditableEntity):
    """
    A unit of work inside a project, shown as a card on the kanban board.

    Completing a task stamps `completed_at`; verifying it records the
    verifier. Moving it back to an earlier column clears both.
    """

    project_id: Optional[UUID] = None
    task_name: str = ""
    task_description: str = ""

    status: ContributionStatus = ContributionStatus.PENDING
    priority: PriorityLevel = PriorityLevel.MEDIUM
    due_date: Optional[date] = None

    estimated_hours: Optional[Decimal] = None
    hours_worked: Decimal = Decimal('0')
    skills_used: List[str] = field(default_factory=list)
    subtasks: List[Subtask] = field(default_factory=list)

    assignee_ids: List[UUID] = field(default_factory=list)
    primary_assignee_id: Optional[UUID] = None

    completed_at: Optional[datetime] = None
    verified_by: Optional[UUID] = None

    def __post_init__(self):
        self.task_name = (self.task_name or "").strip()
        if not self.task_name:
            raise ValidationException("Task name is required", "task_name")
        if isinstance(self.status, str):
            self.status = ContributionStatus(self.status)
        if isinstance(self.priority, str):
            self.priority = PriorityLevel(self.priority)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_done(self) -> bool:
        return self.status.is_done

    def is_overdue(self, today: date) -> bool:
        """Past due and not done yet."""
        return bool(self.due_date and not self.is_done and self.due_date < today)

    @property
    def subtask_progress(self) -> Tuple[int, int]:
        """(completed, total) subtasks."""
        return sum(1 for s in self.subtasks if s.completed), len(self.subtasks)

    @property
    def progress_percent(self) -> int:
        done, total = self.subtask_progress
        if self.is_done:
            return 100
        if not total:
            return 0
        return round(100 * done / total)

    def is_assigned_to(self, user_id: UUID) -> bool:
        return user_id in self.assignee_ids

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def move_to(self, new_status: ContributionStatus, user_id: Optional[UUID] = None) -> ContributionStatus:
        """
        Move the task to another column and return the previous status.

        Any column may be reached from any other.
        """
        new_status = ContributionStatus(new_status)
        old_status = self.status
        if new_status == old_status:
            return old_status

        self.status = new_status
        if new_status.is_done:
            if self.completed_at is None:
                self.completed_at = utcnow()
        else:
            self.completed_at = None

        if new_status == ContributionStatus.VERIFIED:
            self.verified_by = user_id
        else:
            self.verified_by = None

        self.updated_by = user_id
        self.increment_version()
        return old_status

    def assign(self, user_id: UUID, primary: bool = False) -> bool:
        """Add an assignee; returns False if already assigned (primary flag still applied)."""
        added = user_id not in self.assignee_ids
        if added:
            self.assignee_ids.append(user_id)
        if primary or self.primary_assignee_id is None:
            self.primary_assignee_id = user_id
        if added and self.status == ContributionStatus.PENDING:
            self.status = ContributionStatus.IN_PROGRESS
        self.increment_version()
        return added

    def unassign(self, user_id: UUID) -> bool:
        if user_id not in self.assignee_ids:
            return False
        self.assignee_ids.remove(user_id)
        if self.primary_assignee_id == user_id:
            self.primary_assignee_id = self.assignee_ids[0] if self.assignee_ids else None
        self.increment_version()
        return True

    def toggle_subtask(self, index: int) -> Subtask:
        if not 0 <= index < len(self.subtasks):
            raise ValidationException("Subtask index out of range", "index", index)
        current = self.subtasks[index]
        self.subtasks[index] = Subtask(title=current.title, completed=not current.completed)
        self.increment_version()
        return self.subtasks[index]
