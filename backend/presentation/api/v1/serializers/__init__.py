"""
Serializers Package.

All API serializers for CampusHub.
"""

from .base import BaseModelSerializer, UserMinimalSerializer

from .users import (
    LoginSerializer,
    UniversitySerializer,
    SkillSerializer,
    MemberSkillSerializer,
    MemberSkillCreateSerializer,
    UserListSerializer,
    UserDetailSerializer,
    UserProfileSerializer,
    ProfileUpdateSerializer,
)

from .organizations import (
    OrganizationListSerializer,
    OrganizationDetailSerializer,
    OrganizationCreateSerializer,
    OrganizationMemberSerializer,
    MemberAddSerializer,
    MemberRoleSerializer,
    MemberRemoveSerializer,
    PositionSerializer,
    PositionFillSerializer,
    TeamSerializer,
    OrganizationAnalyticsSerializer,
)

from .projects import (
    ProjectListSerializer,
    ProjectDetailSerializer,
    ProjectWriteSerializer,
    ProjectStatusSerializer,
    ProjectSkillsSerializer,
    ContributionSerializer,
    ContributionCreateSerializer,
    ContributionUpdateSerializer,
    ContributionMoveSerializer,
    ContributionAssignSerializer,
    SubtaskToggleSerializer,
    TaskTextSerializer,
    BoardColumnSerializer,
    BoardCardSerializer,
)

from .discovery import (
    DiscoverProjectSerializer,
    ApplicationSerializer,
    ApplicationCreateSerializer,
    ApplicationReviewSerializer,
    ProjectViewSerializer,
)
