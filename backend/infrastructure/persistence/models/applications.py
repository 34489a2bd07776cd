"""
Application Models.

Student applications to published projects.
"""

from django.db import models
from django.conf import settings

from .base import BaseModelWithHistory, ActiveManager, AllObjectsManager


class ApplicationStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    REVIEWING = 'reviewing', 'Under review'
    ACCEPTED = 'accepted', 'Accepted'
    REJECTED = 'rejected', 'Rejected'
    WITHDRAWN = 'withdrawn', 'Withdrawn'


class ProjectApplication(BaseModelWithHistory):
    """
    An application with the skill match snapshot taken when it was sent.
    """

    project = models.ForeignKey(
        'persistence.InternalProject',
        on_delete=models.CASCADE,
        related_name='applications',
        verbose_name="Project"
    )
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='project_applications',
        verbose_name="Applicant"
    )

    cover_letter = models.TextField(
        max_length=5000,
        blank=True,
        verbose_name="Cover letter"
    )
    portfolio_urls = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Portfolio links"
    )
    availability_hours_per_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        verbose_name="Availability, hours/week"
    )
    expected_start_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Can start on"
    )

    # Match snapshot
    skill_match_score = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        verbose_name="Match score"
    )
    matched_skills = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Matched skills"
    )
    missing_skills = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Missing skills"
    )

    # Review
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatusChoices.choices,
        default=ApplicationStatusChoices.PENDING,
        db_index=True,
        verbose_name="Status"
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_applications',
        verbose_name="Reviewed by"
    )
    reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Reviewed at"
    )
    reviewer_notes = models.TextField(
        blank=True,
        verbose_name="Reviewer notes"
    )

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        db_table = 'project_applications'
        verbose_name = 'Application'
        verbose_name_plural = 'Applications'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['project', 'applicant'], name='unique_project_application'),
        ]
        indexes = [
            models.Index(fields=['project', 'status']),
        ]

    def __str__(self):
        return f"{self.applicant} -> {self.project} ({self.status})"
