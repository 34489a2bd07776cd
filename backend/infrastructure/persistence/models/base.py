"""
Base ORM Models and Mixins.

Provides common functionality for all models:
- UUID primary keys
- Timestamps (created_at, updated_at)
- Soft delete
- Version control (optimistic locking)
- Audit tracking
"""

import uuid
from django.db import models
from django.conf import settings
from django.utils import timezone
from simple_history.models import HistoricalRecords

from domain.shared.exceptions import ConcurrencyException


class TimeStampedMixin(models.Model):
    """Mixin for created_at and updated_at timestamps."""

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created at"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated at"
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """Mixin for soft delete functionality."""

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Deleted at"
    )
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_deleted",
        verbose_name="Deleted by"
    )

    class Meta:
        abstract = True

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def soft_delete(self, user=None):
        self.deleted_at = timezone.now()
        self.deleted_by = user
        self.save(update_fields=['deleted_at', 'deleted_by', 'updated_at'])

    def restore(self):
        self.deleted_at = None
        self.deleted_by = None
        self.save(update_fields=['deleted_at', 'deleted_by', 'updated_at'])


class VersionedMixin(models.Model):
    """
    Mixin for optimistic locking with version control.

    Every save of an existing row bumps `version`; clients send back the
    version they last saw and `check_version` rejects stale writes.
    """

    version = models.PositiveIntegerField(
        default=1,
        verbose_name="Version"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            self.version += 1
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'version' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['version']
        super().save(*args, **kwargs)

    def check_version(self, expected_version):
        if expected_version is not None and int(expected_version) != self.version:
            raise ConcurrencyException(
                self.__class__.__name__, self.pk, int(expected_version), self.version
            )


class AuditMixin(models.Model):
    """Mixin for tracking who created/modified records."""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_created",
        verbose_name="Created by"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_updated",
        verbose_name="Updated by"
    )

    class Meta:
        abstract = True


class BaseModel(TimeStampedMixin, SoftDeleteMixin, VersionedMixin, AuditMixin):
    """
    Base model with all common functionality.

    Includes:
    - UUID primary key
    - Timestamps (created_at, updated_at)
    - Soft delete (deleted_at, deleted_by)
    - Version control (version)
    - Audit (created_by, updated_by)
    - Active flag (is_active)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name="ID"
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name="Active"
    )

    class Meta:
        abstract = True

    def __str__(self):
        return str(self.id)


class BaseModelWithHistory(BaseModel):
    """
    Base model with historical records tracking.

    Uses django-simple-history to track all changes.
    """

    history = HistoricalRecords(inherit=True)

    class Meta:
        abstract = True


# =============================================================================
# MANAGER FOR SOFT DELETE
# =============================================================================

class ActiveManager(models.Manager):
    """Manager that excludes soft-deleted records by default."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class AllObjectsManager(models.Manager):
    """Manager that includes all records, including soft-deleted."""

    pass
