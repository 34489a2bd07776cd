"""
User Views.

API views for authentication, profiles and skills.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from django.contrib.auth import get_user_model
from django.db.models import Prefetch
from django.utils import timezone

from application.services.profiles import ProfileService
from infrastructure.persistence.models import MemberSkill, Skill
from ..serializers.users import (
    LoginSerializer,
    MemberSkillCreateSerializer,
    MemberSkillSerializer,
    ProfileUpdateSerializer,
    SkillSerializer,
    UserDetailSerializer,
    UserListSerializer,
    UserProfileSerializer,
)
from .base import ReadOnlyModelViewSet, audit

User = get_user_model()


class AuthViewSet(viewsets.GenericViewSet):
    """
    ViewSet for authentication.

    Endpoints:
    - POST /auth/login/ - login and get JWT tokens
    - POST /auth/logout/ - logout (blacklist refresh token)
    - POST /auth/refresh/ - refresh access token
    - GET /auth/me/ - get current user profile
    - PATCH /auth/update-profile/ - edit own profile
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'], permission_classes=[AllowAny])
    def login(self, request):
        """Login and get JWT tokens."""
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        refresh = RefreshToken.for_user(user)

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        audit(request, 'login', user=user)

        return Response({
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'user': UserProfileSerializer(user).data,
        })

    @action(detail=False, methods=['post'], permission_classes=[AllowAny])
    def refresh(self, request):
        """Refresh access token."""
        serializer = TokenRefreshSerializer(data=request.data)

        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            return Response(
                {"code": "token_not_valid", "detail": str(e)},
                status=status.HTTP_401_UNAUTHORIZED
            )

        return Response(serializer.validated_data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], permission_classes=[IsAuthenticated])
    def logout(self, request):
        """Logout and blacklist refresh token."""
        refresh_token = request.data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        audit(request, 'logout')
        return Response({'message': 'Logged out'})

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def me(self, request):
        """Get current user profile."""
        return Response(UserProfileSerializer(request.user).data)

    @action(
        detail=False,
        methods=['put', 'patch'],
        url_path='update-profile',
        permission_classes=[IsAuthenticated],
    )
    def update_profile(self, request):
        """Update current user profile."""
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = ProfileService(request.user).update_profile(**serializer.validated_data)
        audit(request, 'update', user, fields=sorted(serializer.validated_data))
        return Response(UserProfileSerializer(user).data)


class UserViewSet(ReadOnlyModelViewSet):
    """
    Student directory.

    Endpoints:
    - GET /users/ - list users (search by name, major)
    - GET /users/{id}/ - public profile
    """

    queryset = User.objects.filter(is_active=True).select_related('university').prefetch_related(
        Prefetch('member_skills', queryset=MemberSkill.objects.select_related('skill'))
    )

    serializer_classes = {
        'list': UserListSerializer,
        'default': UserDetailSerializer,
    }

    search_fields = ['username', 'first_name', 'last_name', 'major', 'tagline']
    filterset_fields = ['university', 'year_of_study']
    ordering_fields = ['first_name', 'last_name', 'date_joined']


class SkillViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Skill catalog.

    Endpoints:
    - GET /skills/ - list skills (search by name, filter by category)
    - GET /skills/popular/ - most used skills
    """

    queryset = Skill.objects.filter(is_active=True)
    serializer_class = SkillSerializer
    permission_classes = [IsAuthenticated]
    search_fields = ['name']
    filterset_fields = ['category']
    ordering_fields = ['name', 'usage_count']

    @action(detail=False, methods=['get'])
    def popular(self, request):
        skills = self.get_queryset().order_by('-usage_count', 'name')[:20]
        return Response(self.get_serializer(skills, many=True).data)


class MemberSkillViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    The current user's own skills.

    Endpoints:
    - GET /member-skills/ - my skills
    - POST /member-skills/ - add a skill by name
    - DELETE /member-skills/{id}/ - remove a skill
    """

    serializer_class = MemberSkillSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return MemberSkill.objects.filter(user=self.request.user).select_related('skill')

    def create(self, request, *args, **kwargs):
        serializer = MemberSkillCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member_skill = ProfileService(request.user).add_skill(**serializer.validated_data)
        return Response(MemberSkillSerializer(member_skill).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        ProfileService(request.user).remove_skill(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)
