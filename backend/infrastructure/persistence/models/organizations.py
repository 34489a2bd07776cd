"""
Organization Models.

Campus organizations, their members, positions (offices), teams,
invitations, skill needs and analytics snapshots.
"""

from django.db import models
from django.conf import settings

from .base import BaseModelWithHistory, TimeStampedMixin, ActiveManager, AllObjectsManager

import uuid


class OrganizationCategoryChoices(models.TextChoices):
    ACADEMIC = 'academic', 'Academic'
    TECHNOLOGY = 'technology', 'Technology'
    ARTS = 'arts', 'Arts'
    SPORTS = 'sports', 'Sports'
    SERVICE = 'service', 'Service'
    CULTURAL = 'cultural', 'Cultural'
    PROFESSIONAL = 'professional', 'Professional'
    OTHER = 'other', 'Other'


class MemberRoleChoices(models.TextChoices):
    MEMBER = 'member', 'Member'
    ADMIN = 'admin', 'Admin'
    PRESIDENT = 'president', 'President'
    VICE_PRESIDENT = 'vice_president', 'Vice President'
    TREASURER = 'treasurer', 'Treasurer'
    SECRETARY = 'secretary', 'Secretary'
    TECH_LEAD = 'tech_lead', 'Tech Lead'
    PROJECT_LEAD = 'project_lead', 'Project Lead'


class InvitationStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    EXPIRED = 'expired', 'Expired'
    REVOKED = 'revoked', 'Revoked'


class Organization(BaseModelWithHistory):
    """A student organization (club, society, team)."""

    name = models.CharField(
        max_length=200,
        verbose_name="Name"
    )
    slug = models.SlugField(
        max_length=220,
        unique=True,
        verbose_name="Slug"
    )
    category = models.CharField(
        max_length=20,
        choices=OrganizationCategoryChoices.choices,
        default=OrganizationCategoryChoices.OTHER,
        db_index=True,
        verbose_name="Category"
    )
    university = models.ForeignKey(
        'persistence.University',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='organizations',
        verbose_name="University"
    )
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='administered_organizations',
        verbose_name="Admin"
    )

    # Public profile
    description = models.TextField(blank=True, verbose_name="Description")
    mission = models.TextField(blank=True, verbose_name="Mission")
    what_we_do = models.TextField(blank=True, verbose_name="What we do")
    values = models.JSONField(default=list, blank=True, verbose_name="Values")
    email = models.EmailField(blank=True, verbose_name="Contact email")
    website = models.URLField(max_length=500, blank=True, verbose_name="Website")
    location = models.CharField(max_length=200, blank=True, verbose_name="Location")
    meeting_schedule = models.CharField(max_length=200, blank=True, verbose_name="Meeting schedule")
    join_process = models.TextField(blank=True, verbose_name="How to join")
    social_links = models.JSONField(default=dict, blank=True, verbose_name="Social links")
    logo_url = models.URLField(max_length=500, blank=True, verbose_name="Logo URL")
    founded_date = models.DateField(null=True, blank=True, verbose_name="Founded")
    verified = models.BooleanField(default=False, verbose_name="Verified")

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='OrganizationMember',
        related_name='organizations',
        verbose_name="Members"
    )

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        db_table = 'organizations'
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def member_count(self):
        return self.memberships.count()


class OrganizationMember(models.Model):
    """Membership of a user in an organization."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name="Organization"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name="User"
    )
    role = models.CharField(
        max_length=20,
        choices=MemberRoleChoices.choices,
        default=MemberRoleChoices.MEMBER,
        verbose_name="Role"
    )
    joined_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Joined at"
    )

    class Meta:
        db_table = 'organization_members'
        verbose_name = 'Organization member'
        verbose_name_plural = 'Organization members'
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'user'], name='unique_organization_member'),
        ]

    def __str__(self):
        return f"{self.user} @ {self.organization} ({self.role})"


class Position(BaseModelWithHistory):
    """An office in an organization's chart (President, Treasurer, ...)."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='positions',
        verbose_name="Organization"
    )
    role = models.CharField(
        max_length=100,
        verbose_name="Role key"
    )
    title = models.CharField(
        max_length=200,
        blank=True,
        verbose_name="Title"
    )
    description = models.TextField(
        blank=True,
        verbose_name="Description"
    )
    holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='held_positions',
        verbose_name="Current holder"
    )
    reports_to = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='direct_reports',
        verbose_name="Reports to"
    )
    reports_to_role = models.CharField(
        max_length=100,
        blank=True,
        verbose_name="Reports to (role key)"
    )
    order = models.PositiveIntegerField(
        default=0,
        verbose_name="Order"
    )
    required_skills = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Required skills"
    )
    term_end_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Term ends"
    )

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        db_table = 'organization_positions'
        verbose_name = 'Position'
        verbose_name_plural = 'Positions'
        ordering = ['organization', 'order', 'created_at']

    def __str__(self):
        return f"{self.title or self.role} ({self.organization})"


class Team(TimeStampedMixin, models.Model):
    """A working group inside an organization, led by one or more members."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='teams',
        verbose_name="Organization"
    )
    name = models.CharField(
        max_length=100,
        verbose_name="Name"
    )
    color = models.CharField(
        max_length=20,
        blank=True,
        verbose_name="Color"
    )
    leads = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='led_teams',
        verbose_name="Leads"
    )

    class Meta:
        db_table = 'organization_teams'
        verbose_name = 'Team'
        verbose_name_plural = 'Teams'
        ordering = ['name']

    def __str__(self):
        return self.name


class Invitation(TimeStampedMixin, models.Model):
    """An emailed invitation to join an organization."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='invitations',
        verbose_name="Organization"
    )
    inviter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='sent_invitations',
        verbose_name="Invited by"
    )
    invitee_email = models.EmailField(
        verbose_name="Invitee email"
    )
    code = models.CharField(
        max_length=64,
        unique=True,
        verbose_name="Invitation code"
    )
    status = models.CharField(
        max_length=20,
        choices=InvitationStatusChoices.choices,
        default=InvitationStatusChoices.PENDING,
        verbose_name="Status"
    )
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Expires at"
    )
    accepted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Accepted at"
    )

    class Meta:
        db_table = 'invitations'
        verbose_name = 'Invitation'
        verbose_name_plural = 'Invitations'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.invitee_email} -> {self.organization}"


class OrganizationSkillNeed(TimeStampedMixin, models.Model):
    """A skill the organization keeps needing (used by health scoring)."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='skill_needs',
        verbose_name="Organization"
    )
    skill = models.ForeignKey(
        'persistence.Skill',
        on_delete=models.CASCADE,
        related_name='organization_needs',
        verbose_name="Skill"
    )
    need_type = models.CharField(
        max_length=50,
        default='ongoing',
        verbose_name="Need type"
    )
    current_gap_level = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Gap level"
    )

    class Meta:
        db_table = 'organization_skill_needs'
        verbose_name = 'Skill need'
        verbose_name_plural = 'Skill needs'
        constraints = [
            models.UniqueConstraint(fields=['organization', 'skill'], name='unique_organization_skill_need'),
        ]


class OrganizationAnalytics(models.Model):
    """Point-in-time organization health snapshot."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='analytics',
        verbose_name="Organization"
    )
    calculated_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Calculated at"
    )
    skill_sufficiency_score = models.PositiveSmallIntegerField(default=0, verbose_name="Skill sufficiency, %")
    project_completion_rate = models.PositiveSmallIntegerField(default=0, verbose_name="Project completion, %")
    member_utilization_rate = models.PositiveSmallIntegerField(default=0, verbose_name="Member utilization, %")
    external_dependency_rate = models.PositiveSmallIntegerField(default=0, verbose_name="External dependency, %")
    active_members = models.PositiveIntegerField(default=0, verbose_name="Members")
    total_projects = models.PositiveIntegerField(default=0, verbose_name="Projects")

    class Meta:
        db_table = 'organization_analytics'
        verbose_name = 'Organization analytics'
        verbose_name_plural = 'Organization analytics'
        ordering = ['-calculated_at']
