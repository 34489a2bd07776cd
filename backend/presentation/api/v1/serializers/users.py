"""
User Serializers.

Serializers for authentication, profiles and skills.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model, authenticate

from infrastructure.persistence.models import MemberSkill, Skill, SkillCategoryChoices, University
from .base import BaseModelSerializer

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    """Serializer for login."""

    username = serializers.CharField(required=True)
    password = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        username = attrs.get('username')
        password = attrs.get('password')

        if username and password:
            user = authenticate(
                request=self.context.get('request'),
                username=username,
                password=password
            )
            if not user:
                raise serializers.ValidationError(
                    'Invalid username or password.',
                    code='authorization'
                )
            if not user.is_active:
                raise serializers.ValidationError(
                    'This account is deactivated.',
                    code='authorization'
                )
            attrs['user'] = user
        return attrs


class UniversitySerializer(serializers.ModelSerializer):

    class Meta:
        model = University
        fields = ['id', 'name', 'domain', 'location', 'logo_url']


class SkillSerializer(BaseModelSerializer):
    """Serializer for the skill catalog."""

    class Meta:
        model = Skill
        fields = ['id', 'name', 'category', 'description', 'usage_count']
        read_only_fields = ['id', 'usage_count']


class MemberSkillSerializer(serializers.ModelSerializer):
    """A skill on a user's profile."""

    name = serializers.CharField(source='skill.name', read_only=True)
    category = serializers.CharField(source='skill.category', read_only=True)
    is_verified = serializers.SerializerMethodField()

    class Meta:
        model = MemberSkill
        fields = [
            'id', 'skill', 'name', 'category', 'source',
            'endorsed_by_count', 'added_at', 'verified_at', 'is_verified',
        ]
        read_only_fields = fields

    def get_is_verified(self, obj):
        return obj.verified_at is not None


class MemberSkillCreateSerializer(serializers.Serializer):
    """Add a skill by name; unknown names are added to the catalog."""

    name = serializers.CharField(max_length=100)
    category = serializers.ChoiceField(
        choices=SkillCategoryChoices.choices,
        default=SkillCategoryChoices.OTHER,
    )

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Skill name cannot be blank.')
        return value


class UserListSerializer(BaseModelSerializer):
    """List serializer for users."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'full_name', 'avatar_url',
            'tagline', 'major', 'year_of_study',
        ]
        read_only_fields = fields


class UserDetailSerializer(BaseModelSerializer):
    """Public profile of another user."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)
    university = UniversitySerializer(read_only=True)
    skills = MemberSkillSerializer(source='member_skills', many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'full_name', 'first_name', 'last_name',
            'bio', 'tagline', 'university', 'major', 'year_of_study', 'location',
            'website', 'linkedin_url', 'github_url', 'avatar_url', 'cover_photo_url',
            'interests', 'looking_for', 'skills', 'date_joined',
        ]
        read_only_fields = fields


class UserProfileSerializer(UserDetailSerializer):
    """Serializer for user profile (self)."""

    class Meta(UserDetailSerializer.Meta):
        fields = UserDetailSerializer.Meta.fields + [
            'email', 'profile_completeness', 'onboarding_completed', 'timezone',
            'is_superuser', 'last_login', 'last_activity',
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may edit on their own profile."""

    interests = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    looking_for = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = User
        fields = [
            'first_name', 'last_name', 'bio', 'tagline', 'university', 'major',
            'year_of_study', 'location', 'website', 'linkedin_url', 'github_url',
            'avatar_url', 'cover_photo_url', 'interests', 'looking_for', 'timezone',
            'onboarding_completed',
        ]
        extra_kwargs = {name: {'required': False} for name in fields}
