"""
Project Models.

Organization projects, their declared skills, saves and views.
"""

from django.db import models
from django.conf import settings

from .base import BaseModelWithHistory, ActiveManager, AllObjectsManager

import uuid


class ProjectStatusChoices(models.TextChoices):
    PLANNING = 'planning', 'Planning'
    ACTIVE = 'active', 'Active'
    ON_HOLD = 'on_hold', 'On hold'
    COMPLETED = 'completed', 'Completed'
    ARCHIVED = 'archived', 'Archived'


class ProjectVisibilityChoices(models.TextChoices):
    INTERNAL = 'internal', 'Members only'
    PUBLIC = 'public', 'Public'


class ProjectTimelineChoices(models.TextChoices):
    THIS_WEEK = 'this_week', 'This week'
    THIS_MONTH = 'this_month', 'This month'
    THIS_SEMESTER = 'this_semester', 'This semester'


class SkillImportanceChoices(models.TextChoices):
    REQUIRED = 'required', 'Required'
    PREFERRED = 'preferred', 'Preferred'


class InternalProject(BaseModelWithHistory):
    """
    A project run by an organization.

    Public + active projects are listed in the discovery feed.
    """

    organization = models.ForeignKey(
        'persistence.Organization',
        on_delete=models.CASCADE,
        related_name='projects',
        verbose_name="Organization"
    )
    name = models.CharField(
        max_length=300,
        verbose_name="Name"
    )
    description = models.TextField(
        blank=True,
        verbose_name="Description"
    )
    public_description = models.TextField(
        blank=True,
        verbose_name="Public description"
    )
    status = models.CharField(
        max_length=20,
        choices=ProjectStatusChoices.choices,
        default=ProjectStatusChoices.PLANNING,
        db_index=True,
        verbose_name="Status"
    )
    visibility = models.CharField(
        max_length=20,
        choices=ProjectVisibilityChoices.choices,
        default=ProjectVisibilityChoices.INTERNAL,
        db_index=True,
        verbose_name="Visibility"
    )

    # Listing
    application_deadline = models.DateField(
        null=True,
        blank=True,
        verbose_name="Application deadline"
    )
    max_applicants = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Max applicants"
    )
    required_commitment_hours = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        verbose_name="Commitment, hours/week"
    )
    preferred_start_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Preferred start"
    )
    due_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Due date"
    )
    timeline = models.CharField(
        max_length=20,
        choices=ProjectTimelineChoices.choices,
        blank=True,
        verbose_name="Timeline"
    )
    is_remote = models.BooleanField(
        default=False,
        verbose_name="Remote"
    )
    image_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="Image URL"
    )
    published_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Published at"
    )

    # Counters
    view_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Views"
    )
    application_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Applications"
    )

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        db_table = 'internal_projects'
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['visibility', 'status']),
            models.Index(fields=['application_deadline']),
        ]

    def __str__(self):
        return self.name

    def skill_names(self, importance):
        return [ps.skill.name for ps in self.project_skills.all() if ps.importance == importance]

    @property
    def required_skills(self):
        return self.skill_names(SkillImportanceChoices.REQUIRED)

    @property
    def preferred_skills(self):
        return self.skill_names(SkillImportanceChoices.PREFERRED)


class ProjectSkill(models.Model):
    """A skill a project asks for, required or nice to have."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    project = models.ForeignKey(
        InternalProject,
        on_delete=models.CASCADE,
        related_name='project_skills',
        verbose_name="Project"
    )
    skill = models.ForeignKey(
        'persistence.Skill',
        on_delete=models.CASCADE,
        related_name='project_skills',
        verbose_name="Skill"
    )
    importance = models.CharField(
        max_length=20,
        choices=SkillImportanceChoices.choices,
        default=SkillImportanceChoices.REQUIRED,
        verbose_name="Importance"
    )
    order = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Order"
    )

    class Meta:
        db_table = 'project_skills'
        verbose_name = 'Project skill'
        verbose_name_plural = 'Project skills'
        ordering = ['order', 'skill__name']
        constraints = [
            models.UniqueConstraint(fields=['project', 'skill'], name='unique_project_skill'),
        ]

    def __str__(self):
        return f"{self.project}: {self.skill} ({self.importance})"


class SavedProject(models.Model):
    """A project bookmarked by a student."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='saved_projects',
        verbose_name="User"
    )
    project = models.ForeignKey(
        InternalProject,
        on_delete=models.CASCADE,
        related_name='saves',
        verbose_name="Project"
    )
    saved_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Saved at"
    )

    class Meta:
        db_table = 'saved_projects'
        verbose_name = 'Saved project'
        verbose_name_plural = 'Saved projects'
        ordering = ['-saved_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'project'], name='unique_saved_project'),
        ]


class ProjectView(models.Model):
    """One view of a project page, used for trending."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    project = models.ForeignKey(
        InternalProject,
        on_delete=models.CASCADE,
        related_name='views',
        verbose_name="Project"
    )
    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='project_views',
        verbose_name="Viewer"
    )
    referrer = models.CharField(
        max_length=50,
        blank=True,
        verbose_name="Referrer"
    )
    view_duration_seconds = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Duration, s"
    )
    viewed_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Viewed at"
    )

    class Meta:
        db_table = 'project_views'
        verbose_name = 'Project view'
        verbose_name_plural = 'Project views'
        ordering = ['-viewed_at']
