"""
Project Serializers.

Organization projects, their task board and contributions.
"""

from rest_framework import serializers

from infrastructure.persistence.mappers import contribution_to_domain
from infrastructure.persistence.models import (
    Contribution,
    ContributionStatusChoices,
    InternalProject,
    PriorityChoices,
    ProjectStatusChoices,
    ProjectTimelineChoices,
    TaskAssignee,
)
from .base import (
    BaseModelSerializer,
    ExpectedVersionMixin,
    SkillListField,
    UserMinimalSerializer,
    VersionedFieldsMixin,
)


# =============================================================================
# PROJECTS
# =============================================================================

class ProjectListSerializer(BaseModelSerializer):
    """List serializer for an organization's projects."""

    organization_name = serializers.CharField(source='organization.name', read_only=True)
    required_skills = serializers.ListField(read_only=True)
    preferred_skills = serializers.ListField(read_only=True)

    class Meta:
        model = InternalProject
        fields = [
            'id', 'organization', 'organization_name', 'name', 'status', 'visibility',
            'application_deadline', 'due_date', 'required_commitment_hours',
            'is_remote', 'required_skills', 'preferred_skills',
            'view_count', 'application_count', 'published_at', 'version',
        ]
        read_only_fields = fields


class ProjectDetailSerializer(VersionedFieldsMixin, ProjectListSerializer):
    """Detail serializer for projects."""

    class Meta(ProjectListSerializer.Meta):
        fields = ProjectListSerializer.Meta.fields + [
            'description', 'public_description', 'max_applicants',
            'preferred_start_date', 'timeline', 'image_url',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ProjectWriteSerializer(serializers.ModelSerializer):
    """Create and edit a project. Skills are given as names."""

    required_skills = SkillListField(required=False)
    preferred_skills = SkillListField(required=False)
    timeline = serializers.ChoiceField(
        choices=ProjectTimelineChoices.choices, required=False, allow_blank=True
    )

    class Meta:
        model = InternalProject
        fields = [
            'organization', 'name', 'description', 'public_description',
            'application_deadline', 'max_applicants', 'required_commitment_hours',
            'preferred_start_date', 'due_date', 'timeline', 'is_remote', 'image_url',
            'required_skills', 'preferred_skills',
        ]
        extra_kwargs = {
            'description': {'required': False},
            'public_description': {'required': False},
        }

    def validate(self, attrs):
        start = attrs.get('preferred_start_date')
        due = attrs.get('due_date')
        if start and due and due < start:
            raise serializers.ValidationError({'due_date': 'Due date cannot be before the start date.'})
        return attrs


class ProjectPublishSerializer(ExpectedVersionMixin):
    pass


class ProjectStatusSerializer(ExpectedVersionMixin):
    status = serializers.ChoiceField(choices=ProjectStatusChoices.choices)


class ProjectSkillsSerializer(serializers.Serializer):
    required_skills = SkillListField(required=False)
    preferred_skills = SkillListField(required=False)


# =============================================================================
# CONTRIBUTIONS
# =============================================================================

class TaskAssigneeSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(source='assignee', read_only=True)

    class Meta:
        model = TaskAssignee
        fields = ['user', 'is_primary', 'assigned_at']
        read_only_fields = fields


class ContributionSerializer(VersionedFieldsMixin, BaseModelSerializer):
    """Full contribution (task) representation."""

    project_name = serializers.CharField(source='project.name', read_only=True)
    assignees = TaskAssigneeSerializer(source='task_assignees', many=True, read_only=True)
    required_skills = serializers.SerializerMethodField()
    progress_percent = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Contribution
        fields = [
            'id', 'project', 'project_name', 'task_name', 'task_description',
            'status', 'priority', 'due_date', 'estimated_hours', 'hours_worked',
            'skills_used', 'subtasks', 'assignee_notes', 'assignees',
            'required_skills', 'progress_percent', 'is_overdue',
            'completed_at', 'verified_by', 'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_required_skills(self, obj):
        return [r.skill.name for r in obj.required_skills.select_related('skill')]

    def get_progress_percent(self, obj):
        return contribution_to_domain(obj).progress_percent

    def get_is_overdue(self, obj):
        today = self.context.get('today')
        if today is None:
            return False
        return contribution_to_domain(obj).is_overdue(today)


class SubtaskField(serializers.Field):
    """A subtask given either as a title or as {title, completed}."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = {'title': data}
        if not isinstance(data, dict) or not str(data.get('title', '')).strip():
            raise serializers.ValidationError('Subtask needs a title.')
        return {'title': str(data['title']).strip(), 'completed': bool(data.get('completed', False))}

    def to_representation(self, value):
        return value


class ContributionCreateSerializer(serializers.Serializer):
    task_name = serializers.CharField(max_length=300)
    task_description = serializers.CharField(required=False, allow_blank=True, default='')
    priority = serializers.ChoiceField(choices=PriorityChoices.choices, default=PriorityChoices.MEDIUM)
    due_date = serializers.DateField(required=False, allow_null=True)
    estimated_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)
    subtasks = serializers.ListField(child=SubtaskField(), required=False, default=list)
    required_skills = SkillListField(required=False, default=list)
    assignee_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)


class ContributionUpdateSerializer(ExpectedVersionMixin):
    task_name = serializers.CharField(max_length=300, required=False)
    task_description = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=PriorityChoices.choices, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    estimated_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)
    hours_worked = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, min_value=0)
    skills_used = SkillListField(required=False)
    subtasks = serializers.ListField(child=SubtaskField(), required=False)
    assignee_notes = serializers.CharField(required=False, allow_blank=True)


class ContributionMoveSerializer(ExpectedVersionMixin):
    status = serializers.ChoiceField(choices=ContributionStatusChoices.choices)


class ContributionAssignSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    primary = serializers.BooleanField(default=False)


class SubtaskToggleSerializer(ExpectedVersionMixin):
    index = serializers.IntegerField(min_value=0)


class TaskTextSerializer(serializers.Serializer):
    project = serializers.UUIDField()
    text = serializers.CharField(max_length=2000)
    create = serializers.BooleanField(default=False)


class BoardCardSerializer(serializers.Serializer):
    """A card on the board, built from the domain task."""

    id = serializers.UUIDField()
    task_name = serializers.CharField()
    task_description = serializers.CharField()
    status = serializers.CharField(source='status.value')
    priority = serializers.CharField(source='priority.value')
    due_date = serializers.DateField(allow_null=True)
    estimated_hours = serializers.DecimalField(max_digits=6, decimal_places=2, allow_null=True)
    progress_percent = serializers.IntegerField()
    subtasks = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()
    assignees = serializers.SerializerMethodField()
    version = serializers.IntegerField()

    def get_subtasks(self, task):
        return [s.to_dict() for s in task.subtasks]

    def get_is_overdue(self, task):
        return task.is_overdue(self.context['today'])

    def get_assignees(self, task):
        names = self.context.get('member_names', {})
        return [
            {
                'id': str(user_id),
                'full_name': names.get(user_id, ''),
                'is_primary': user_id == task.primary_assignee_id,
            }
            for user_id in task.assignee_ids
        ]


class BoardColumnSerializer(serializers.Serializer):
    status = serializers.CharField(source='status.value')
    title = serializers.CharField()
    count = serializers.IntegerField()
    tasks = BoardCardSerializer(many=True)
