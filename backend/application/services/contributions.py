"""
Contribution Service.

Kanban board, optimistic card moves, assignments, natural-language task
entry and the personal task views.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from domain.project.board import Board, build_board
from domain.project.date_parser import ParsedDate, parse_natural_date
from domain.project.entities import Contribution as ContributionEntity, Subtask
from domain.project.task_parsing import AssigneeMatch, ParsedTask, match_assignees
from domain.project.urgency import (
    MyTaskStats,
    MyTasksFilter,
    TaskLoad,
    my_task_stats,
    my_tasks,
    task_load,
)
from domain.shared.events import ContributionAssigned, ContributionMoved
from domain.shared.exceptions import EntityNotFoundException, ValidationException
from domain.shared.value_objects import ContributionStatus
from infrastructure.ai.task_parser import TaskParserClient
from infrastructure.persistence.mappers import apply_contribution, contribution_to_domain
from infrastructure.persistence.models import (
    Contribution,
    InternalProject,
    MemberSkill,
    OrganizationMember,
    Skill,
    SkillSourceChoices,
    TaskAssignee,
    TaskRequiredSkill,
    User,
    UserActivity,
)

from .access import require_member
from .realtime import broadcast_events

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'task_name', 'task_description', 'priority', 'due_date', 'estimated_hours',
    'hours_worked', 'skills_used', 'subtasks', 'assignee_notes',
)


@dataclass
class TaskPreview:
    """What the parser understood, before anything is saved."""

    parsed: ParsedTask
    due: Optional[ParsedDate]
    assignees: List[AssigneeMatch]
    assignee_ids: List[UUID] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'title': self.parsed.title,
            'description': self.parsed.description,
            'priority': self.parsed.priority.value,
            'due_date': self.due.value.isoformat() if self.due else None,
            'due_date_text': self.parsed.due_date_text,
            'due_date_confidence': self.due.confidence if self.due else None,
            'assignees': [m.to_dict() for m in self.assignees],
            'assignee_ids': [str(i) for i in self.assignee_ids],
            'subtasks': list(self.parsed.subtasks),
        }


class ContributionService:

    def __init__(self, user, now: Optional[datetime] = None, parser: Optional[TaskParserClient] = None):
        self.user = user
        self.now = now or timezone.now()
        self.today = timezone.localdate(self.now)
        self._parser = parser

    @property
    def parser(self) -> TaskParserClient:
        if self._parser is None:
            self._parser = TaskParserClient()
        return self._parser

    # =========================================================================
    # LOADING
    # =========================================================================

    def _project(self, project_id) -> InternalProject:
        project = InternalProject.objects.select_related('organization').filter(id=project_id).first()
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        require_member(self.user, project.organization_id, "view_board")
        return project

    def _task(self, task_id, lock: bool = False) -> Contribution:
        queryset = Contribution.objects.select_related('project')
        if lock:
            queryset = queryset.select_for_update(of=('self',))
        task = queryset.filter(id=task_id).first()
        if task is None:
            raise EntityNotFoundException("Contribution", task_id)
        require_member(self.user, task.project.organization_id, "edit_task")
        return task

    def _member_ids(self, organization_id) -> set:
        return set(
            OrganizationMember.objects.filter(organization_id=organization_id)
            .values_list('user_id', flat=True)
        )

    # =========================================================================
    # BOARD
    # =========================================================================

    def board(
        self,
        project_id,
        member_id: Optional[UUID] = None,
        priority: Optional[str] = None,
        columns: Optional[Iterable[str]] = None,
    ) -> Board:
        project = self._project(project_id)
        if member_id is not None:
            try:
                member_id = UUID(str(member_id))
            except ValueError:
                raise ValidationException("Invalid member id", "member", member_id)
        tasks = (
            Contribution.objects.filter(project=project)
            .prefetch_related('task_assignees')
        )
        return build_board(
            [contribution_to_domain(t) for t in tasks],
            self.today,
            member_id=member_id,
            priority=priority,
            visible_columns=list(columns) if columns else None,
        )

    @transaction.atomic
    def move(self, task_id, status, expected_version: Optional[int] = None) -> Contribution:
        """
        Move a card to another column.

        A stale `expected_version` raises ConcurrencyException so the client
        can roll back its optimistic move.
        """
        try:
            status = ContributionStatus(status)
        except ValueError:
            raise ValidationException(f"Unknown board column '{status}'", "status", status)

        model = self._task(task_id, lock=True)
        task = contribution_to_domain(model)
        task.check_version(expected_version)
        old_status = task.move_to(status, self.user.id)
        if old_status == task.status:
            return model

        apply_contribution(model, task, self.user)
        logger.info(f"Task {model.id} moved {old_status.value} -> {status.value} by {self.user.id}")

        if status == ContributionStatus.COMPLETED:
            for assignee in model.assignees.all():
                UserActivity.record(assignee, 'task_completed', model, task=model.task_name)
        elif status == ContributionStatus.VERIFIED:
            self._credit_skills(model)

        broadcast_events([ContributionMoved(
            contribution_id=model.id,
            project_id=model.project_id,
            old_status=old_status.value,
            new_status=status.value,
            version=model.version,
            moved_by=self.user.id,
        )])
        return model

    def _credit_skills(self, model: Contribution) -> None:
        """Verified work proves the skills it used."""
        names = list(model.skills_used or [])
        names += [r.skill.name for r in model.required_skills.select_related('skill')]
        skills = [Skill.get_or_create_by_name(name) for name in names if name and name.strip()]
        for assignee in model.assignees.all():
            for skill in skills:
                member_skill, created = MemberSkill.objects.get_or_create(
                    user=assignee,
                    skill=skill,
                    defaults={'source': SkillSourceChoices.TASK_VERIFIED, 'verified_at': self.now},
                )
                if not created and member_skill.verified_at is None:
                    member_skill.verified_at = self.now
                    member_skill.save(update_fields=['verified_at'])
            UserActivity.record(assignee, 'task_verified', model, task=model.task_name)

    # =========================================================================
    # ASSIGNMENT
    # =========================================================================

    def _sync_primary(self, model: Contribution, task: ContributionEntity) -> None:
        for row in model.task_assignees.all():
            is_primary = row.assignee_id == task.primary_assignee_id
            if row.is_primary != is_primary:
                row.is_primary = is_primary
                row.save(update_fields=['is_primary'])

    @transaction.atomic
    def assign(self, task_id, user_id, primary: bool = False) -> Contribution:
        model = self._task(task_id, lock=True)
        user_id = UUID(str(user_id))
        if user_id not in self._member_ids(model.project.organization_id):
            raise ValidationException("Assignee must be a member of the organization", "user_id", user_id)

        task = contribution_to_domain(model)
        added = task.assign(user_id, primary=primary)
        if added:
            TaskAssignee.objects.create(task=model, assignee_id=user_id, assigned_by=self.user)
        self._sync_primary(model, task)
        apply_contribution(model, task, self.user)

        broadcast_events([ContributionAssigned(
            contribution_id=model.id,
            project_id=model.project_id,
            user_id=user_id,
            is_primary=task.primary_assignee_id == user_id,
        )])
        logger.info(f"Task {model.id} assigned to {user_id} by {self.user.id}")
        return model

    @transaction.atomic
    def unassign(self, task_id, user_id) -> Contribution:
        model = self._task(task_id, lock=True)
        user_id = UUID(str(user_id))
        task = contribution_to_domain(model)
        if not task.unassign(user_id):
            raise EntityNotFoundException("TaskAssignee", user_id)
        TaskAssignee.objects.filter(task=model, assignee_id=user_id).delete()
        self._sync_primary(model, task)
        apply_contribution(model, task, self.user)

        broadcast_events([ContributionAssigned(
            contribution_id=model.id,
            project_id=model.project_id,
            user_id=user_id,
            removed=True,
        )])
        return model

    # =========================================================================
    # CREATION
    # =========================================================================

    @transaction.atomic
    def create(
        self,
        project_id,
        task_name: str,
        task_description: str = "",
        priority: str = "medium",
        due_date=None,
        estimated_hours=None,
        subtasks: Iterable[str] = (),
        required_skills: Iterable[str] = (),
        assignee_ids: Iterable[UUID] = (),
    ) -> Contribution:
        project = self._project(project_id)
        task = ContributionEntity(
            project_id=project.id,
            task_name=task_name,
            task_description=task_description or "",
            priority=priority,
            due_date=due_date,
            subtasks=[Subtask.from_dict(s) for s in subtasks],
        )
        members = self._member_ids(project.organization_id)
        assignee_ids = [a for a in (UUID(str(a)) for a in assignee_ids) if a in members]
        for index, user_id in enumerate(assignee_ids):
            task.assign(user_id, primary=index == 0)

        model = Contribution.objects.create(
            id=task.id,
            project=project,
            task_name=task.task_name,
            task_description=task.task_description,
            status=task.status.value,
            priority=task.priority.value,
            due_date=task.due_date,
            estimated_hours=estimated_hours,
            subtasks=[s.to_dict() for s in task.subtasks],
            created_by=self.user,
            updated_by=self.user,
        )
        for user_id in assignee_ids:
            TaskAssignee.objects.create(
                task=model,
                assignee_id=user_id,
                assigned_by=self.user,
                is_primary=user_id == task.primary_assignee_id,
            )
        for name in required_skills:
            if name and name.strip():
                TaskRequiredSkill.objects.get_or_create(task=model, skill=Skill.get_or_create_by_name(name))

        logger.info(f"Task {model.id} created in project {project.id} by {self.user.id}")
        broadcast_events([
            ContributionAssigned(
                contribution_id=model.id,
                project_id=project.id,
                user_id=user_id,
                is_primary=user_id == task.primary_assignee_id,
            )
            for user_id in assignee_ids
        ])
        return model

    @transaction.atomic
    def update(self, task_id, expected_version: Optional[int] = None, **fields) -> Contribution:
        """Edit card details. Status and assignees go through move/assign."""
        model = self._task(task_id, lock=True)
        task = contribution_to_domain(model)
        task.check_version(expected_version)
        for name in EDITABLE_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == 'subtasks':
                value = [Subtask.from_dict(s).to_dict() for s in value]
            setattr(model, name, value)
        # Re-run the entity's field checks on the edited values
        contribution_to_domain(model)
        model.updated_by = self.user
        model.save()
        return model

    @transaction.atomic
    def toggle_subtask(self, task_id, index: int, expected_version: Optional[int] = None) -> Contribution:
        model = self._task(task_id, lock=True)
        task = contribution_to_domain(model)
        task.check_version(expected_version)
        task.toggle_subtask(index)
        return apply_contribution(model, task, self.user)

    def parse(self, project_id, text: str) -> TaskPreview:
        """Run the language model over `text` and resolve dates and names."""
        project = self._project(project_id)
        members = list(
            User.objects.filter(memberships__organization_id=project.organization_id)
            .only('id', 'first_name', 'last_name', 'username')
        )
        names = [m.full_name or m.username for m in members]
        by_name = {n: m.id for n, m in zip(names, members)}

        parsed = self.parser.parse(text, timezone.localtime(self.now), names)
        due = parse_natural_date(parsed.due_date_text, timezone.localtime(self.now))
        matches = match_assignees(parsed.assignee_names, names)
        assignee_ids = []
        for match in matches:
            user_id = by_name.get(match.matched_name)
            if user_id is not None and user_id not in assignee_ids:
                assignee_ids.append(user_id)
        return TaskPreview(parsed=parsed, due=due, assignees=matches, assignee_ids=assignee_ids)

    def create_from_text(self, project_id, text: str) -> Contribution:
        preview = self.parse(project_id, text)
        return self.create(
            project_id,
            task_name=preview.parsed.title,
            task_description=preview.parsed.description,
            priority=preview.parsed.priority.value,
            due_date=preview.due.date if preview.due else None,
            subtasks=preview.parsed.subtasks,
            assignee_ids=preview.assignee_ids,
        )

    # =========================================================================
    # PERSONAL VIEWS
    # =========================================================================

    def _assigned_to(self, user_id, organization_id=None):
        queryset = (
            Contribution.objects
            .filter(task_assignees__assignee_id=user_id, project__deleted_at__isnull=True)
            .select_related('project__organization')
            .prefetch_related('task_assignees')
            .distinct()
        )
        if organization_id is not None:
            queryset = queryset.filter(project__organization_id=organization_id)
        return list(queryset)

    def my_tasks(self, task_filter=MyTasksFilter.ALL, organization_id=None):
        """(ordered task rows, stats) for the current user."""
        try:
            task_filter = MyTasksFilter(task_filter or MyTasksFilter.ALL)
        except ValueError:
            raise ValidationException(f"Unknown task filter '{task_filter}'", "filter", task_filter)
        models = {m.id: m for m in self._assigned_to(self.user.id, organization_id)}
        entities = [contribution_to_domain(m) for m in models.values()]
        ordered = my_tasks(entities, self.today, task_filter)
        stats: MyTaskStats = my_task_stats(entities, self.today)
        return [models[t.id] for t in ordered], stats

    def task_load(self, user_id, organization_id) -> TaskLoad:
        require_member(self.user, organization_id, "view_task_load")
        tasks = self._assigned_to(user_id, organization_id)
        return task_load([contribution_to_domain(t) for t in tasks], self.today)
