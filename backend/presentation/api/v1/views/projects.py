"""
Project Views.

Organization-internal project management: projects, their task board
and contributions.
"""

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from application.services.access import require_member
from application.services.applications import ApplicationService
from application.services.contributions import ContributionService
from application.services.projects import ProjectService
from infrastructure.persistence.models import Contribution, InternalProject, User
from presentation.api.throttling import TaskParseThrottle
from ..serializers.discovery import ApplicationSerializer
from ..serializers.projects import (
    BoardColumnSerializer,
    ContributionAssignSerializer,
    ContributionCreateSerializer,
    ContributionMoveSerializer,
    ContributionSerializer,
    ContributionUpdateSerializer,
    ProjectDetailSerializer,
    ProjectListSerializer,
    ProjectPublishSerializer,
    ProjectSkillsSerializer,
    ProjectStatusSerializer,
    ProjectWriteSerializer,
    SubtaskToggleSerializer,
    TaskTextSerializer,
)
from .base import BaseModelViewSet, audit


def _csv(value):
    return [v.strip() for v in value.split(',') if v.strip()] if value else None


class ProjectViewSet(BaseModelViewSet):
    """
    ViewSet for organization projects.

    Endpoints:
    - GET /projects/?organization={id}&status=active
    - POST /projects/ - create (organization admins)
    - GET/PATCH/DELETE /projects/{id}/
    - POST /projects/{id}/publish/ - list in the discovery feed
    - POST /projects/{id}/unpublish/
    - POST /projects/{id}/set-status/
    - POST /projects/{id}/skills/ - replace required/preferred skills
    - GET /projects/{id}/board/?member={id}&priority=high&columns=pending,in_progress
    - GET /projects/{id}/applications/ - applications, best match first
    """

    queryset = InternalProject.objects.select_related('organization').prefetch_related('project_skills__skill')

    serializer_classes = {
        'list': ProjectListSerializer,
        'create': ProjectWriteSerializer,
        'update': ProjectWriteSerializer,
        'partial_update': ProjectWriteSerializer,
        'default': ProjectDetailSerializer,
    }

    search_fields = ['name', 'description']
    filterset_fields = ['organization', 'status', 'visibility']
    ordering_fields = ['created_at', 'due_date', 'application_deadline', 'name']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.is_superuser:
            return queryset
        return queryset.filter(organization__memberships__user=user)

    def service(self):
        return ProjectService(self.request.user)

    def _detail(self, project):
        project = self.get_queryset().get(pk=project.pk)
        return ProjectDetailSerializer(project, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = self.service().create(**serializer.validated_data)
        audit(request, 'create', project)
        return Response(self._detail(project), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        listing = dict(serializer.validated_data)
        listing.pop('organization', None)
        project = self.service().update(instance.id, **listing)
        audit(request, 'update', project, fields=sorted(listing))
        return Response(self._detail(project))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.service().delete(instance.id)
        audit(request, 'soft_delete', instance)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @action(detail=True, methods=['post'])
    def publish(self, request, pk=None):
        serializer = ProjectPublishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = self.service().publish(
            self.get_object().id,
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return Response(self._detail(project))

    @action(detail=True, methods=['post'])
    def unpublish(self, request, pk=None):
        project = self.service().unpublish(self.get_object().id)
        return Response(self._detail(project))

    @action(detail=True, methods=['post'], url_path='set-status')
    def set_status(self, request, pk=None):
        serializer = ProjectStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = self.service().change_status(
            self.get_object().id,
            serializer.validated_data['status'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return Response(self._detail(project))

    @action(detail=True, methods=['post'])
    def skills(self, request, pk=None):
        serializer = ProjectSkillsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = self.service().set_skills(
            self.get_object().id,
            serializer.validated_data.get('required_skills'),
            serializer.validated_data.get('preferred_skills'),
        )
        return Response(self._detail(project))

    # =========================================================================
    # BOARD AND APPLICATIONS
    # =========================================================================

    @action(detail=True, methods=['get'])
    def board(self, request, pk=None):
        project = self.get_object()
        service = ContributionService(request.user)
        board = service.board(
            project.id,
            member_id=request.query_params.get('member') or None,
            priority=request.query_params.get('priority') or None,
            columns=_csv(request.query_params.get('columns')),
        )
        names = {
            user.id: user.full_name or user.username
            for user in User.objects.filter(memberships__organization_id=project.organization_id)
        }
        context = {'today': board.today, 'member_names': names}
        return Response({
            'project': str(project.id),
            'total': board.total,
            'columns': BoardColumnSerializer(board.columns, many=True, context=context).data,
        })

    @action(detail=True, methods=['get'])
    def applications(self, request, pk=None):
        project = self.get_object()
        applications = ApplicationService(request.user).for_project(project.id)
        status_filter = request.query_params.get('status')
        if status_filter:
            applications = applications.filter(status=status_filter)
        return Response(ApplicationSerializer(applications, many=True).data)


class ContributionViewSet(BaseModelViewSet):
    """
    ViewSet for contributions (tasks on a project board).

    Endpoints:
    - GET /contributions/?project={id}&status=pending
    - POST /contributions/ - create a task
    - GET/PATCH/DELETE /contributions/{id}/
    - POST /contributions/{id}/move/ - move to another column (optimistic)
    - POST /contributions/{id}/assign/
    - POST /contributions/{id}/unassign/
    - POST /contributions/{id}/toggle-subtask/
    - GET /contributions/my-tasks/?filter=overdue&organization={id}
    - GET /contributions/load/?user={id}&organization={id}
    - POST /contributions/parse/ - natural language task entry
    """

    queryset = Contribution.objects.select_related('project').prefetch_related('task_assignees__assignee')
    serializer_class = ContributionSerializer
    filterset_fields = ['project', 'status', 'priority']
    search_fields = ['task_name', 'task_description']
    ordering_fields = ['due_date', 'created_at', 'priority']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.is_superuser:
            return queryset
        return queryset.filter(project__organization__memberships__user=user)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['today'] = timezone.localdate()
        return context

    def service(self):
        return ContributionService(self.request.user)

    def _detail(self, task):
        task = self.get_queryset().get(pk=task.pk)
        return ContributionSerializer(task, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        project_id = request.data.get('project')
        if not project_id:
            return Response({'project': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
        serializer = ContributionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self.service().create(project_id, **serializer.validated_data)
        return Response(self._detail(task), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = ContributionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        expected = fields.pop('expected_version', None)
        task = self.service().update(self.get_object().id, expected_version=expected, **fields)
        return Response(self._detail(task))

    def destroy(self, request, *args, **kwargs):
        task = self.get_object()
        require_member(request.user, task.project.organization_id, "delete_task")
        task.soft_delete(user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # BOARD OPERATIONS
    # =========================================================================

    @action(detail=True, methods=['post'])
    def move(self, request, pk=None):
        serializer = ContributionMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self.service().move(
            self.get_object().id,
            serializer.validated_data['status'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return Response(self._detail(task))

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = ContributionAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self.service().assign(self.get_object().id, **serializer.validated_data)
        return Response(self._detail(task))

    @action(detail=True, methods=['post'])
    def unassign(self, request, pk=None):
        serializer = ContributionAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self.service().unassign(self.get_object().id, serializer.validated_data['user_id'])
        return Response(self._detail(task))

    @action(detail=True, methods=['post'], url_path='toggle-subtask')
    def toggle_subtask(self, request, pk=None):
        serializer = SubtaskToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self.service().toggle_subtask(
            self.get_object().id,
            serializer.validated_data['index'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return Response(self._detail(task))

    # =========================================================================
    # PERSONAL VIEWS
    # =========================================================================

    @action(detail=False, methods=['get'], url_path='my-tasks')
    def my_tasks(self, request):
        tasks, stats = self.service().my_tasks(
            request.query_params.get('filter') or 'all',
            organization_id=request.query_params.get('organization') or None,
        )
        return Response({
            'stats': {
                'total': stats.total,
                'overdue': stats.overdue,
                'due_today': stats.due_today,
                'due_this_week': stats.due_this_week,
                'total_hours': stats.total_hours,
            },
            'results': ContributionSerializer(tasks, many=True, context=self.get_serializer_context()).data,
        })

    @action(detail=False, methods=['get'])
    def load(self, request):
        organization_id = request.query_params.get('organization')
        if not organization_id:
            return Response({'organization': ['This parameter is required.']}, status=status.HTTP_400_BAD_REQUEST)
        user_id = request.query_params.get('user') or request.user.id
        load = self.service().task_load(user_id, organization_id)
        return Response({
            'user': str(user_id),
            'total_tasks': load.total_tasks,
            'overdue_tasks': load.overdue_tasks,
            'high_priority_tasks': load.high_priority_tasks,
            'hours_committed': load.hours_committed,
        })

    @action(
        detail=False,
        methods=['post'],
        throttle_classes=[TaskParseThrottle],
    )
    def parse(self, request):
        """
        Parse a sentence like "Ana to draft the budget by next Friday, urgent"
        into a task preview. With `create: true` the task is saved.
        """
        serializer = TaskTextSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = self.service()
        project_id = serializer.validated_data['project']
        text = serializer.validated_data['text']
        if serializer.validated_data['create']:
            task = service.create_from_text(project_id, text)
            return Response(self._detail(task), status=status.HTTP_201_CREATED)
        return Response(service.parse(project_id, text).to_dict())
