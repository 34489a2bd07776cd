"""
Dashboard Views.

The student's home screen: task stats, application pipeline, saved
projects, organizations, recent activity and the contribution heatmap.
"""

from django.db.models import Count
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from application.services.contributions import ContributionService
from application.services.profiles import ProfileService
from infrastructure.persistence.models import (
    Organization,
    ProjectApplication,
    SavedProject,
    UserActivity,
)
from ..serializers.organizations import OrganizationListSerializer

HEATMAP_MAX_WEEKS = 52


class DashboardViewSet(viewsets.ViewSet):
    """
    ViewSet for the personal dashboard.

    Endpoints:
    - GET /dashboard/summary/ - complete dashboard data
    - GET /dashboard/heatmap/?weeks=12 - completed tasks per day
    """

    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['get'])
    def summary(self, request):
        user = request.user
        _, stats = ContributionService(user).my_tasks()

        applications = dict(
            ProjectApplication.objects.filter(applicant=user)
            .order_by()
            .values_list('status')
            .annotate(n=Count('id'))
        )
        organizations = Organization.objects.filter(memberships__user=user)
        activity = UserActivity.objects.filter(user=user)[:10]

        return Response({
            'profile_completeness': ProfileService(user).recompute_completeness(),
            'tasks': {
                'open': stats.total,
                'overdue': stats.overdue,
                'due_today': stats.due_today,
                'due_this_week': stats.due_this_week,
                'total_hours': stats.total_hours,
            },
            'applications': applications,
            'saved_projects': SavedProject.objects.filter(user=user, project__deleted_at__isnull=True).count(),
            'organizations': OrganizationListSerializer(organizations, many=True).data,
            'recent_activity': [
                {
                    'action': a.action,
                    'label': a.get_action_display(),
                    'resource_type': a.resource_type,
                    'resource_id': a.resource_id,
                    'metadata': a.metadata,
                    'created_at': a.created_at,
                }
                for a in activity
            ],
        })

    @action(detail=False, methods=['get'])
    def heatmap(self, request):
        try:
            weeks = int(request.query_params.get('weeks', 12))
        except ValueError:
            weeks = 12
        weeks = max(1, min(weeks, HEATMAP_MAX_WEEKS))
        grid = ProfileService(request.user).heatmap(weeks=weeks)
        return Response({
            'weeks': [[day.to_dict() for day in week] for week in grid],
            'total': sum(day.count for week in grid for day in week),
        })
