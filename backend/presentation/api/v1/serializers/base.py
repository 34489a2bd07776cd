"""
Base Serializers.

Common serializer mixins and base classes.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class VersionedFieldsMixin(serializers.Serializer):
    """Mixin for versioned fields."""

    version = serializers.IntegerField(read_only=True)


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer with common configuration.
    """

    class Meta:
        abstract = True
        read_only_fields = ['id', 'created_at', 'updated_at']


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user serializer for nested representations."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name', 'avatar_url']
        read_only_fields = fields


class SkillListField(serializers.ListField):
    """A list of skill names; blanks are dropped and names trimmed."""

    child = serializers.CharField(max_length=100, allow_blank=True)

    def to_internal_value(self, data):
        names = super().to_internal_value(data)
        return [name.strip() for name in names if name and name.strip()]


class ExpectedVersionMixin(serializers.Serializer):
    """Optional optimistic-lock version sent by the client."""

    expected_version = serializers.IntegerField(required=False, allow_null=True, min_value=1)
