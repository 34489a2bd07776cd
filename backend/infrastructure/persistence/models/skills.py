"""
Skill Models.

The shared skill catalogue and the skills each member records.
"""

from django.db import models
from django.conf import settings

from .base import TimeStampedMixin

import uuid


class SkillCategoryChoices(models.TextChoices):
    TECHNICAL = 'technical', 'Technical'
    DESIGN = 'design', 'Design'
    BUSINESS = 'business', 'Business'
    COMMUNICATION = 'communication', 'Communication'
    LEADERSHIP = 'leadership', 'Leadership'
    OTHER = 'other', 'Other'


class SkillSourceChoices(models.TextChoices):
    SELF_REPORTED = 'self_reported', 'Self reported'
    TASK_VERIFIED = 'task_verified', 'Verified through a task'
    PEER_ENDORSED = 'peer_endorsed', 'Peer endorsed'
    MIGRATED = 'migrated', 'Migrated'


class Skill(TimeStampedMixin, models.Model):
    """Catalogue entry; names are unique case-insensitively."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Name"
    )
    category = models.CharField(
        max_length=20,
        choices=SkillCategoryChoices.choices,
        default=SkillCategoryChoices.OTHER,
        db_index=True,
        verbose_name="Category"
    )
    description = models.TextField(
        blank=True,
        verbose_name="Description"
    )
    usage_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Usage count"
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active"
    )

    class Meta:
        db_table = 'skills'
        verbose_name = 'Skill'
        verbose_name_plural = 'Skills'
        ordering = ['name']

    def __str__(self):
        return self.name

    @classmethod
    def get_or_create_by_name(cls, name, category=SkillCategoryChoices.OTHER):
        """Find a skill ignoring case, creating it with the given spelling."""
        name = ' '.join((name or '').split())
        skill = cls.objects.filter(name__iexact=name).first()
        if skill is None:
            skill = cls.objects.create(name=name, category=category)
        return skill


class MemberSkill(models.Model):
    """A skill a user has, and how we know it."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='member_skills',
        verbose_name="User"
    )
    skill = models.ForeignKey(
        Skill,
        on_delete=models.CASCADE,
        related_name='member_skills',
        verbose_name="Skill"
    )
    source = models.CharField(
        max_length=20,
        choices=SkillSourceChoices.choices,
        default=SkillSourceChoices.SELF_REPORTED,
        verbose_name="Source"
    )
    endorsed_by_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Endorsements"
    )
    added_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Added at"
    )
    verified_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Verified at"
    )

    class Meta:
        db_table = 'member_skills'
        verbose_name = 'Member skill'
        verbose_name_plural = 'Member skills'
        ordering = ['skill__name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'skill'], name='unique_member_skill'),
        ]

    def __str__(self):
        return f"{self.user} - {self.skill}"
