"""
Discovery Views.

The student-facing project feed, bookmarks, applying, and the
applications endpoints used by both applicants and reviewers.
"""

from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from application.services.access import MANAGER_ROLES
from application.services.applications import ApplicationService
from application.services.discovery import DiscoveryService
from domain.shared.exceptions import ValidationException
from infrastructure.persistence.models import ProjectApplication
from ..serializers.discovery import (
    ApplicationCreateSerializer,
    ApplicationReviewSerializer,
    ApplicationSerializer,
    DiscoverProjectSerializer,
    ProjectViewSerializer,
)
from .base import audit


def _int_param(request, name, default=None):
    value = request.query_params.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationException(f"'{name}' must be an integer", name, value)


class DiscoverViewSet(viewsets.ViewSet):
    """
    Project discovery for students.

    Endpoints:
    - GET /discover/feed/?filter=all|for_you|closing_soon|remote|low_commitment|trending&search=&offset=&limit=
    - GET /discover/for-you/ - featured project plus best matches
    - GET /discover/saved/
    - GET /discover/applied/
    - GET /discover/{id}/ - one scored project
    - GET /discover/{id}/match/ - match breakdown
    - POST /discover/{id}/save/ - toggle bookmark
    - POST /discover/{id}/apply/
    - POST /discover/{id}/view/ - record a view
    """

    permission_classes = [IsAuthenticated]

    def service(self):
        return DiscoveryService(self.request.user)

    def _rows(self, rows, service):
        return DiscoverProjectSerializer(rows, many=True, context={'now': service.now}).data

    @action(detail=False, methods=['get'])
    def feed(self, request):
        service = self.service()
        page = service.feed(
            request.query_params.get('filter'),
            search=request.query_params.get('search'),
            offset=max(_int_param(request, 'offset', 0), 0),
            limit=_int_param(request, 'limit'),
        )
        return Response({
            'results': self._rows(page.items, service),
            'offset': page.offset,
            'limit': page.limit,
            'total': page.total,
            'next_offset': page.next_offset,
            'has_more': page.has_more,
        })

    @action(detail=False, methods=['get'], url_path='for-you')
    def for_you(self, request):
        service = self.service()
        selection = service.for_you()
        return Response({
            'featured': self._rows([selection.featured], service)[0] if selection.featured else None,
            'best_matches': self._rows(selection.best_matches, service),
        })

    @action(detail=False, methods=['get'])
    def saved(self, request):
        service = self.service()
        return Response(self._rows(service.saved(), service))

    @action(detail=False, methods=['get'])
    def applied(self, request):
        service = self.service()
        return Response(self._rows(service.applied(), service))

    def retrieve(self, request, pk=None):
        service = self.service()
        return Response(self._rows([service.row(pk)], service)[0])

    @action(detail=True, methods=['get'])
    def match(self, request, pk=None):
        return Response(self.service().match(pk).to_dict())

    @action(detail=True, methods=['post'])
    def save(self, request, pk=None):
        return Response({'is_saved': self.service().toggle_save(pk)})

    @action(detail=True, methods=['post'])
    def apply(self, request, pk=None):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = ApplicationService(request.user).submit(pk, **serializer.validated_data)
        audit(request, 'create', application)
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='view')
    def record_view(self, request, pk=None):
        serializer = ProjectViewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.service().record_view(pk, **serializer.validated_data)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ApplicationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Project applications.

    Applicants see their own applications; organization managers see the
    applications to their organization's projects.

    Endpoints:
    - GET /applications/?project={id}&status=pending
    - GET /applications/{id}/
    - POST /applications/{id}/review/ - set reviewing / accepted / rejected
    - POST /applications/{id}/withdraw/
    - GET /applications/export/?project={id} - Excel workbook
    """

    serializer_class = ApplicationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['project', 'status']
    ordering_fields = ['created_at', 'skill_match_score']

    def get_queryset(self):
        user = self.request.user
        queryset = ProjectApplication.objects.select_related('applicant', 'project__organization')
        if user.is_superuser:
            return queryset
        return queryset.filter(
            Q(applicant=user)
            | Q(project__organization__admin=user)
            | Q(
                project__organization__memberships__user=user,
                project__organization__memberships__role__in=MANAGER_ROLES,
            )
        ).distinct()

    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        serializer = ApplicationReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = ApplicationService(request.user).review(
            self.get_object().id,
            serializer.validated_data['status'],
            notes=serializer.validated_data.get('notes'),
            expected_version=serializer.validated_data.get('expected_version'),
        )
        audit(request, 'update', application, status=application.status)
        return Response(ApplicationSerializer(application).data)

    @action(detail=True, methods=['post'])
    def withdraw(self, request, pk=None):
        application = ApplicationService(request.user).withdraw(self.get_object().id)
        return Response(ApplicationSerializer(application).data)

    @action(detail=False, methods=['get'])
    def export(self, request):
        project_id = request.query_params.get('project')
        if not project_id:
            return Response({'project': ['This parameter is required.']}, status=status.HTTP_400_BAD_REQUEST)
        content = ApplicationService(request.user).export_xlsx(project_id)
        audit(request, 'export', project=project_id)

        filename = f"applications_{timezone.localdate():%Y%m%d}.xlsx"
        response = HttpResponse(
            content,
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
