"""
Activity and Audit ORM Models.

User-facing activity feed entries and the administrative audit log.
"""

from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType

import uuid


class UserActivity(models.Model):
    """Something a user did that shows up on their profile or dashboard."""

    ACTION_CHOICES = [
        ('task_completed', 'Completed a task'),
        ('task_verified', 'Task verified'),
        ('applied', 'Applied to a project'),
        ('joined_organization', 'Joined an organization'),
        ('skill_added', 'Added a skill'),
        ('project_published', 'Published a project'),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='activities',
        verbose_name="User"
    )
    action = models.CharField(
        max_length=30,
        choices=ACTION_CHOICES,
        db_index=True,
        verbose_name="Action"
    )
    resource_type = models.CharField(
        max_length=50,
        verbose_name="Resource type"
    )
    resource_id = models.UUIDField(
        null=True,
        blank=True,
        verbose_name="Resource ID"
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="Metadata"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Created at"
    )

    class Meta:
        db_table = 'user_activities'
        verbose_name = 'User activity'
        verbose_name_plural = 'User activities'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at']),
        ]

    def __str__(self):
        return f"{self.user} {self.get_action_display()}"

    @classmethod
    def record(cls, user, action, resource, **metadata):
        return cls.objects.create(
            user=user,
            action=action,
            resource_type=resource.__class__.__name__,
            resource_id=resource.pk,
            metadata=metadata,
        )


class AuditLog(models.Model):
    """
    Audit log for changes made through the API.

    Tracks who did what, when, and what changed.
    """

    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('soft_delete', 'Soft delete'),
        ('restore', 'Restore'),
        ('login', 'Login'),
        ('logout', 'Logout'),
        ('export', 'Export'),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # When
    timestamp = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Timestamp"
    )

    # Who
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name="User"
    )
    user_ip = models.GenericIPAddressField(
        null=True,
        blank=True,
        verbose_name="IP address"
    )
    user_agent = models.CharField(
        max_length=500,
        blank=True,
        verbose_name="User agent"
    )

    action = models.CharField(
        max_length=20,
        choices=ACTION_CHOICES,
        db_index=True,
        verbose_name="Action"
    )

    # What object (generic foreign key)
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name="Object type"
    )
    object_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        verbose_name="Object ID"
    )
    content_object = GenericForeignKey('content_type', 'object_id')
    object_repr = models.CharField(
        max_length=500,
        blank=True,
        verbose_name="Object"
    )

    changes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="Changes"
    )
    extra_data = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="Extra data"
    )

    class Meta:
        db_table = 'audit_log'
        verbose_name = 'Audit log entry'
        verbose_name_plural = 'Audit log'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['content_type', 'object_id']),
            models.Index(fields=['user', 'timestamp']),
        ]

    def __str__(self):
        return f"{self.timestamp}: {self.user} - {self.get_action_display()} {self.object_repr}"
