"""
Discovery Serializers.

Feed rows, applications and their review.
"""

from django.utils import timezone
from rest_framework import serializers

from domain.matching import reviewer_insight
from infrastructure.persistence.models import ApplicationStatusChoices, ProjectApplication
from .base import BaseModelSerializer, ExpectedVersionMixin, UserMinimalSerializer, VersionedFieldsMixin


class DiscoverProjectSerializer(serializers.Serializer):
    """One scored feed row."""

    id = serializers.UUIDField()
    name = serializers.CharField()
    description = serializers.CharField()
    organization = serializers.SerializerMethodField()
    category = serializers.CharField()
    required_skills = serializers.ListField(child=serializers.CharField())
    preferred_skills = serializers.ListField(child=serializers.CharField())
    commitment_hours = serializers.IntegerField(allow_null=True)
    application_deadline = serializers.DateField(allow_null=True)
    deadline = serializers.SerializerMethodField()
    is_remote = serializers.BooleanField()
    timeline = serializers.CharField(allow_null=True)
    max_applicants = serializers.IntegerField(allow_null=True)
    view_count = serializers.IntegerField()
    application_count = serializers.IntegerField()
    trending_score = serializers.IntegerField()
    published_at = serializers.DateTimeField(allow_null=True)
    match = serializers.SerializerMethodField()
    is_saved = serializers.BooleanField()
    has_applied = serializers.BooleanField()
    application_status = serializers.CharField(allow_null=True)

    def get_organization(self, row):
        return {
            'id': str(row.organization_id) if row.organization_id else None,
            'name': row.organization_name,
            'slug': row.organization_slug,
            'logo_url': row.organization_logo_url,
        }

    def get_deadline(self, row):
        now = self.context.get('now') or timezone.now()
        return row.deadline(now).to_dict()

    def get_match(self, row):
        return row.match.to_dict() if row.match else None


class ApplicationSerializer(VersionedFieldsMixin, BaseModelSerializer):
    """An application as seen by its applicant or the reviewing team."""

    applicant = UserMinimalSerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    organization_name = serializers.CharField(source='project.organization.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    insight = serializers.SerializerMethodField()

    class Meta:
        model = ProjectApplication
        fields = [
            'id', 'project', 'project_name', 'organization_name', 'applicant',
            'cover_letter', 'portfolio_urls', 'availability_hours_per_week',
            'expected_start_date', 'skill_match_score', 'matched_skills',
            'missing_skills', 'insight', 'status', 'status_display',
            'reviewed_by', 'reviewed_at', 'reviewer_notes',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_insight(self, obj):
        return reviewer_insight(obj.skill_match_score)


class ApplicationCreateSerializer(serializers.Serializer):
    cover_letter = serializers.CharField(max_length=5000, required=False, allow_blank=True, default='')
    portfolio_urls = serializers.ListField(
        child=serializers.URLField(max_length=500), required=False, default=list, max_length=10
    )
    availability_hours_per_week = serializers.IntegerField(
        required=False, allow_null=True, min_value=1, max_value=60
    )
    expected_start_date = serializers.DateField(required=False, allow_null=True)


class ApplicationReviewSerializer(ExpectedVersionMixin):
    status = serializers.ChoiceField(choices=[
        ApplicationStatusChoices.REVIEWING,
        ApplicationStatusChoices.ACCEPTED,
        ApplicationStatusChoices.REJECTED,
    ])
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ProjectViewSerializer(serializers.Serializer):
    referrer = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    duration_seconds = serializers.IntegerField(required=False, allow_null=True, min_value=0)
