"""
Contribution Models.

Tasks inside a project (kanban cards), their assignees and the skills
they call for.
"""

from django.db import models
from django.conf import settings

from .base import BaseModelWithHistory, ActiveManager, AllObjectsManager
from .projects import SkillImportanceChoices

import uuid


class ContributionStatusChoices(models.TextChoices):
    PENDING = 'pending', 'To Do'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    VERIFIED = 'verified', 'Verified'


class PriorityChoices(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class Contribution(BaseModelWithHistory):
    """A task on a project board."""

    project = models.ForeignKey(
        'persistence.InternalProject',
        on_delete=models.CASCADE,
        related_name='contributions',
        verbose_name="Project"
    )
    task_name = models.CharField(
        max_length=300,
        verbose_name="Task"
    )
    task_description = models.TextField(
        blank=True,
        verbose_name="Description"
    )
    status = models.CharField(
        max_length=20,
        choices=ContributionStatusChoices.choices,
        default=ContributionStatusChoices.PENDING,
        db_index=True,
        verbose_name="Status"
    )
    priority = models.CharField(
        max_length=20,
        choices=PriorityChoices.choices,
        default=PriorityChoices.MEDIUM,
        db_index=True,
        verbose_name="Priority"
    )
    due_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name="Due date"
    )
    estimated_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name="Estimated hours"
    )
    hours_worked = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=0,
        verbose_name="Hours worked"
    )
    skills_used = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Skills used"
    )
    subtasks = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Subtasks"
    )
    assignee_notes = models.TextField(
        blank=True,
        verbose_name="Assignee notes"
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Completed at"
    )
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_contributions',
        verbose_name="Verified by"
    )

    assignees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='TaskAssignee',
        through_fields=('task', 'assignee'),
        related_name='contributions',
        verbose_name="Assignees"
    )

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        db_table = 'contributions'
        verbose_name = 'Contribution'
        verbose_name_plural = 'Contributions'
        ordering = ['due_date', '-created_at']
        indexes = [
            models.Index(fields=['project', 'status']),
        ]

    def __str__(self):
        return self.task_name


class TaskAssignee(models.Model):
    """Assignment of a member to a task; one assignee may be primary."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    task = models.ForeignKey(
        Contribution,
        on_delete=models.CASCADE,
        related_name='task_assignees',
        verbose_name="Task"
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='task_assignments',
        verbose_name="Assignee"
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='task_assignments_made',
        verbose_name="Assigned by"
    )
    is_primary = models.BooleanField(
        default=False,
        verbose_name="Primary"
    )
    assigned_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Assigned at"
    )

    class Meta:
        db_table = 'task_assignees'
        verbose_name = 'Task assignee'
        verbose_name_plural = 'Task assignees'
        ordering = ['-is_primary', 'assigned_at']
        constraints = [
            models.UniqueConstraint(fields=['task', 'assignee'], name='unique_task_assignee'),
        ]

    def __str__(self):
        return f"{self.assignee} -> {self.task}"


class TaskRequiredSkill(models.Model):
    """A skill a task needs; feeds project-level skill lists in discovery."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    task = models.ForeignKey(
        Contribution,
        on_delete=models.CASCADE,
        related_name='required_skills',
        verbose_name="Task"
    )
    skill = models.ForeignKey(
        'persistence.Skill',
        on_delete=models.CASCADE,
        related_name='task_requirements',
        verbose_name="Skill"
    )
    importance = models.CharField(
        max_length=20,
        choices=SkillImportanceChoices.choices,
        default=SkillImportanceChoices.REQUIRED,
        verbose_name="Importance"
    )
    added_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Added at"
    )

    class Meta:
        db_table = 'task_required_skills'
        verbose_name = 'Task skill'
        verbose_name_plural = 'Task skills'
        constraints = [
            models.UniqueConstraint(fields=['task', 'skill'], name='unique_task_skill'),
        ]
