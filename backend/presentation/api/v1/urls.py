"""
API v1 URL Configuration.

All API endpoints for version 1.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views.users import (
    AuthViewSet,
    UserViewSet,
    SkillViewSet,
    MemberSkillViewSet,
)
from .views.organizations import (
    OrganizationViewSet,
    PositionViewSet,
)
from .views.projects import (
    ProjectViewSet,
    ContributionViewSet,
)
from .views.discovery import (
    DiscoverViewSet,
    ApplicationViewSet,
)
from .views.dashboard import DashboardViewSet

# Create router
router = DefaultRouter()

# Auth & Users
router.register(r'auth', AuthViewSet, basename='auth')
router.register(r'users', UserViewSet, basename='users')
router.register(r'skills', SkillViewSet, basename='skills')
router.register(r'member-skills', MemberSkillViewSet, basename='member-skills')

# Organizations
router.register(r'organizations', OrganizationViewSet, basename='organizations')
router.register(r'positions', PositionViewSet, basename='positions')

# Projects
router.register(r'projects', ProjectViewSet, basename='projects')
router.register(r'contributions', ContributionViewSet, basename='contributions')

# Discovery & applications
router.register(r'discover', DiscoverViewSet, basename='discover')
router.register(r'applications', ApplicationViewSet, basename='applications')

# Dashboard
router.register(r'dashboard', DashboardViewSet, basename='dashboard')

app_name = 'api_v1'

urlpatterns = [
    path('', include(router.urls)),
]
