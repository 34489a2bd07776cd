"""
User Models.

Custom user model carrying the student profile, plus universities.
"""

from django.db import models
from django.contrib.auth.models import AbstractUser
from django.contrib.auth.validators import UnicodeUsernameValidator

from .base import TimeStampedMixin

import uuid


class University(TimeStampedMixin, models.Model):
    """A campus users and organizations belong to."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    name = models.CharField(
        max_length=255,
        unique=True,
        verbose_name="Name"
    )
    domain = models.CharField(
        max_length=255,
        blank=True,
        verbose_name="Email domain"
    )
    location = models.CharField(
        max_length=255,
        blank=True,
        verbose_name="Location"
    )
    logo_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="Logo URL"
    )
    student_count = models.PositiveIntegerField(
        default=0,
        verbose_name="Students"
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active"
    )

    class Meta:
        db_table = 'universities'
        verbose_name = 'University'
        verbose_name_plural = 'Universities'
        ordering = ['name']

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom User model.

    Extends Django's AbstractUser with the public student profile shown on
    discovery cards, applications and the member directory.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    username_validator = UnicodeUsernameValidator()

    username = models.CharField(
        max_length=150,
        unique=True,
        validators=[username_validator],
        verbose_name="Username"
    )
    email = models.EmailField(
        unique=True,
        verbose_name="Email"
    )

    # Personal info
    first_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name="First name"
    )
    last_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name="Last name"
    )
    bio = models.TextField(
        max_length=1000,
        blank=True,
        verbose_name="Bio"
    )
    tagline = models.CharField(
        max_length=200,
        blank=True,
        verbose_name="Tagline"
    )

    # Campus info
    university = models.ForeignKey(
        University,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students',
        verbose_name="University"
    )
    major = models.CharField(
        max_length=200,
        blank=True,
        verbose_name="Major"
    )
    year_of_study = models.CharField(
        max_length=50,
        blank=True,
        verbose_name="Year of study"
    )
    location = models.CharField(
        max_length=200,
        blank=True,
        verbose_name="Location"
    )

    # Links
    website = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="Website"
    )
    linkedin_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="LinkedIn"
    )
    github_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="GitHub"
    )
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="Avatar URL"
    )
    cover_photo_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name="Cover photo URL"
    )

    # Discovery preferences
    interests = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Interests"
    )
    looking_for = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Looking for"
    )

    profile_completeness = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Profile completeness, %"
    )
    onboarding_completed = models.BooleanField(
        default=False,
        verbose_name="Onboarding completed"
    )
    timezone = models.CharField(
        max_length=50,
        default='America/New_York',
        verbose_name="Timezone"
    )

    # Metadata
    last_activity = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Last activity"
    )

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return self.full_name or self.username

    @property
    def full_name(self):
        return self.get_full_name()

    def get_full_name(self):
        parts = [self.first_name, self.last_name]
        return ' '.join(p for p in parts if p)

    def get_short_name(self):
        """Return first name."""
        return self.first_name or self.username

    @property
    def skill_names(self):
        return [ms.skill.name for ms in self.member_skills.select_related('skill')]
