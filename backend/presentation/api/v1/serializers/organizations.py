"""
Organization Serializers.
"""

from rest_framework import serializers

from domain.profile.completeness import organization_profile_completeness
from infrastructure.persistence.models import (
    MemberRoleChoices,
    Organization,
    OrganizationAnalytics,
    OrganizationCategoryChoices,
    OrganizationMember,
    Position,
    Team,
)
from .base import BaseModelSerializer, UserMinimalSerializer, VersionedFieldsMixin


class OrganizationListSerializer(BaseModelSerializer):
    """List serializer for organizations."""

    member_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Organization
        fields = [
            'id', 'name', 'slug', 'category', 'logo_url',
            'description', 'verified', 'member_count',
        ]
        read_only_fields = fields


class OrganizationDetailSerializer(VersionedFieldsMixin, BaseModelSerializer):
    """Detail serializer for organizations."""

    admin = UserMinimalSerializer(read_only=True)
    member_count = serializers.IntegerField(read_only=True)
    profile_completeness = serializers.SerializerMethodField()
    my_role = serializers.SerializerMethodField()

    class Meta:
        model = Organization
        fields = [
            'id', 'name', 'slug', 'category', 'university', 'admin',
            'description', 'mission', 'what_we_do', 'values',
            'email', 'website', 'location', 'meeting_schedule', 'join_process',
            'social_links', 'logo_url', 'founded_date', 'verified',
            'member_count', 'profile_completeness', 'my_role',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'slug', 'university', 'admin', 'verified',
            'version', 'created_at', 'updated_at',
        ]

    def get_profile_completeness(self, obj):
        return organization_profile_completeness(obj)

    def get_my_role(self, obj):
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return None
        membership = obj.memberships.filter(user=request.user).first()
        return membership.role if membership else None


class OrganizationCreateSerializer(serializers.ModelSerializer):
    """Fields accepted when a student founds an organization."""

    category = serializers.ChoiceField(
        choices=OrganizationCategoryChoices.choices,
        default=OrganizationCategoryChoices.OTHER,
    )

    class Meta:
        model = Organization
        fields = [
            'name', 'category', 'description', 'mission', 'what_we_do', 'values',
            'email', 'website', 'location', 'meeting_schedule', 'join_process',
            'social_links', 'logo_url', 'founded_date',
        ]


class OrganizationMemberSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = OrganizationMember
        fields = ['id', 'user', 'role', 'role_display', 'joined_at']
        read_only_fields = fields


class MemberAddSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=MemberRoleChoices.choices, default=MemberRoleChoices.MEMBER)


class MemberRoleSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=MemberRoleChoices.choices)


class MemberRemoveSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class PositionSerializer(VersionedFieldsMixin, BaseModelSerializer):
    """Serializer for positions in the org chart."""

    holder = UserMinimalSerializer(read_only=True)
    display_title = serializers.SerializerMethodField()

    class Meta:
        model = Position
        fields = [
            'id', 'organization', 'role', 'title', 'display_title', 'description',
            'holder', 'reports_to', 'reports_to_role', 'order', 'required_skills', 'term_end_date',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'holder', 'term_end_date', 'version', 'created_at', 'updated_at']

    def get_display_title(self, obj):
        return obj.title or obj.role.replace('_', ' ').title()

    def validate_required_skills(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError('Expected a list of skill names.')
        return [v.strip() for v in value if v.strip()]

    def validate(self, attrs):
        parent = attrs.get('reports_to')
        if parent is None:
            return attrs
        organization = getattr(self.instance, 'organization', None) or attrs.get('organization')
        if self.instance is not None and parent.pk == self.instance.pk:
            raise serializers.ValidationError({'reports_to': 'A position cannot report to itself.'})
        if organization is not None and parent.organization_id != organization.pk:
            raise serializers.ValidationError({'reports_to': 'Must be a position of the same organization.'})
        return attrs


class PositionFillSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    term_end_date = serializers.DateField(required=False, allow_null=True)


class TeamSerializer(serializers.ModelSerializer):
    leads = UserMinimalSerializer(many=True, read_only=True)

    class Meta:
        model = Team
        fields = ['id', 'name', 'color', 'leads']


class OrganizationAnalyticsSerializer(serializers.ModelSerializer):

    class Meta:
        model = OrganizationAnalytics
        fields = [
            'calculated_at', 'skill_sufficiency_score', 'project_completion_rate',
            'member_utilization_rate', 'external_dependency_rate',
            'active_members', 'total_projects',
        ]
        read_only_fields = fields
