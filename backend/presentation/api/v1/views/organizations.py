"""
Organization Views.

Organizations, their members and positions, and the leadership read
models (org chart, role health, health score, insights).
"""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from application.services.access import require_admin, require_member
from application.services.organizations import OrganizationService
from infrastructure.persistence.models import Organization, OrganizationMember, Position
from ..serializers.organizations import (
    MemberAddSerializer,
    MemberRemoveSerializer,
    MemberRoleSerializer,
    OrganizationAnalyticsSerializer,
    OrganizationCreateSerializer,
    OrganizationDetailSerializer,
    OrganizationListSerializer,
    OrganizationMemberSerializer,
    PositionFillSerializer,
    PositionSerializer,
    TeamSerializer,
)
from .base import BaseModelViewSet, audit


class OrganizationViewSet(BaseModelViewSet):
    """
    ViewSet for organizations.

    Endpoints:
    - GET /organizations/ - list organizations
    - GET /organizations/mine/ - organizations I belong to
    - POST /organizations/ - found an organization (creator becomes admin)
    - GET/PATCH/DELETE /organizations/{id}/
    - GET/POST /organizations/{id}/members/ - list or add members
    - POST /organizations/{id}/members/role/ - change a member's role
    - POST /organizations/{id}/members/remove/ - remove a member (or leave)
    - GET /organizations/{id}/teams/
    - GET /organizations/{id}/org-chart/?direction=TB|LR
    - GET /organizations/{id}/role-health/
    - GET /organizations/{id}/health/
    - GET /organizations/{id}/insights/
    - GET /organizations/{id}/analytics/
    """

    queryset = Organization.objects.select_related('admin', 'university')

    serializer_classes = {
        'list': OrganizationListSerializer,
        'mine': OrganizationListSerializer,
        'create': OrganizationCreateSerializer,
        'default': OrganizationDetailSerializer,
    }

    search_fields = ['name', 'description']
    filterset_fields = ['category', 'university', 'verified']
    ordering_fields = ['name', 'created_at']

    def service(self):
        return OrganizationService(self.request.user)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        queryset = self.get_queryset().filter(memberships__user=request.user)
        return Response(self.get_serializer(queryset, many=True).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        organization = self.service().create(**serializer.validated_data)
        audit(request, 'create', organization)
        data = OrganizationDetailSerializer(organization, context=self.get_serializer_context()).data
        return Response(data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        require_admin(self.request.user, serializer.instance, "update_organization")
        super().perform_update(serializer)
        audit(self.request, 'update', serializer.instance, fields=sorted(serializer.validated_data))

    def perform_destroy(self, instance):
        require_admin(self.request.user, instance, "delete_organization")
        instance.soft_delete(user=self.request.user)
        audit(self.request, 'soft_delete', instance)

    # =========================================================================
    # MEMBERS
    # =========================================================================

    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        organization = self.get_object()
        if request.method == 'GET':
            members = (
                OrganizationMember.objects.filter(organization=organization)
                .select_related('user')
                .order_by('joined_at')
            )
            return Response(OrganizationMemberSerializer(members, many=True).data)

        serializer = MemberAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = self.service().add_member(organization.id, **serializer.validated_data)
        return Response(OrganizationMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='members/role')
    def change_role(self, request, pk=None):
        serializer = MemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = self.service().change_role(self.get_object().id, **serializer.validated_data)
        return Response(OrganizationMemberSerializer(member).data)

    @action(detail=True, methods=['post'], url_path='members/remove')
    def remove_member(self, request, pk=None):
        serializer = MemberRemoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.service().remove_member(self.get_object().id, serializer.validated_data['user_id'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def teams(self, request, pk=None):
        organization = self.get_object()
        teams = organization.teams.prefetch_related('leads')
        return Response(TeamSerializer(teams, many=True).data)

    # =========================================================================
    # LEADERSHIP READ MODELS
    # =========================================================================

    @action(detail=True, methods=['get'], url_path='org-chart')
    def org_chart(self, request, pk=None):
        organization = self.get_object()
        require_member(request.user, organization.id, "view_org_chart")
        direction = request.query_params.get('direction', 'TB')
        chart = self.service().org_chart(organization.id, direction=direction)
        return Response(chart.to_dict())

    @action(detail=True, methods=['get'], url_path='role-health')
    def role_health(self, request, pk=None):
        return Response(self.service().role_health(self.get_object().id))

    @action(detail=True, methods=['get'])
    def health(self, request, pk=None):
        organization = self.get_object()
        require_member(request.user, organization.id, "view_health")
        return Response(self.service().health(organization.id).to_dict())

    @action(detail=True, methods=['get'])
    def insights(self, request, pk=None):
        insights = self.service().insights(self.get_object().id)
        return Response([insight.to_dict() for insight in insights])

    @action(detail=True, methods=['get'])
    def analytics(self, request, pk=None):
        """Stored health snapshots, newest first."""
        organization = self.get_object()
        require_member(request.user, organization.id, "view_analytics")
        snapshots = organization.analytics.all()[:30]
        return Response(OrganizationAnalyticsSerializer(snapshots, many=True).data)


class PositionViewSet(BaseModelViewSet):
    """
    ViewSet for organization positions.

    Endpoints:
    - GET /positions/?organization={id}
    - POST /positions/ - create a position (organization admins)
    - GET/PATCH/DELETE /positions/{id}/
    - POST /positions/{id}/fill/ - give the position a holder
    - POST /positions/{id}/vacate/ - clear the holder
    """

    queryset = Position.objects.select_related('organization', 'holder')
    serializer_class = PositionSerializer
    filterset_fields = ['organization', 'role']
    ordering_fields = ['order', 'created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.is_superuser:
            return queryset
        return queryset.filter(organization__memberships__user=user)

    def perform_create(self, serializer):
        require_admin(self.request.user, serializer.validated_data['organization'], "create_position")
        super().perform_create(serializer)

    def perform_update(self, serializer):
        require_admin(self.request.user, serializer.instance.organization, "update_position")
        serializer.save(updated_by=self.request.user, organization=serializer.instance.organization)

    def perform_destroy(self, instance):
        require_admin(self.request.user, instance.organization, "delete_position")
        instance.soft_delete(user=self.request.user)

    @action(detail=True, methods=['post'])
    def fill(self, request, pk=None):
        serializer = PositionFillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        position = OrganizationService(request.user).fill_position(
            self.get_object().id, **serializer.validated_data
        )
        return Response(PositionSerializer(position).data)

    @action(detail=True, methods=['post'])
    def vacate(self, request, pk=None):
        position = OrganizationService(request.user).vacate_position(self.get_object().id)
        return Response(PositionSerializer(position).data)
