"""
Base Views.

Common view mixins and base classes.
"""

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from infrastructure.persistence.models import AuditLog


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def audit(request, action_name, obj=None, user=None, **extra):
    """Write an AuditLog row for an API action."""
    user = user or request.user
    return AuditLog.objects.create(
        user=user if user.is_authenticated else None,
        action=action_name,
        user_ip=get_client_ip(request),
        user_agent=request.META.get('HTTP_USER_AGENT', '')[:500],
        object_id=str(obj.pk) if obj is not None else '',
        object_repr=str(obj if obj is not None else user)[:200],
        extra_data=extra,
    )


class AuditViewMixin:
    """
    Mixin that adds audit fields on create/update.
    """

    def perform_create(self, serializer):
        """Set created_by and updated_by on create."""
        serializer.save(
            created_by=self.request.user,
            updated_by=self.request.user
        )

    def perform_update(self, serializer):
        """Set updated_by on update."""
        serializer.save(updated_by=self.request.user)


class HistoryViewMixin:
    """
    Mixin for accessing object history.
    """

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        """Get object history."""
        obj = self.get_object()

        history = obj.history.all()[:50]
        data = [{
            'id': h.history_id,
            'date': h.history_date,
            'user': str(h.history_user) if h.history_user else None,
            'type': h.history_type,
            'changes': h.history_change_reason,
        } for h in history]

        return Response(data)


class SerializerByActionMixin:
    """
    Return different serializers per action.

    Override `serializer_classes` dict in subclass:
    serializer_classes = {
        'list': ListSerializer,
        'retrieve': DetailSerializer,
        'default': DetailSerializer,
    }
    """

    def get_serializer_class(self):
        serializer_classes = getattr(self, 'serializer_classes', {})
        return serializer_classes.get(
            self.action,
            serializer_classes.get('default', super().get_serializer_class())
        )


class BaseModelViewSet(
    AuditViewMixin,
    HistoryViewMixin,
    SerializerByActionMixin,
    viewsets.ModelViewSet
):
    """
    Base viewset with common functionality.
    """
    permission_classes = [IsAuthenticated]


class ReadOnlyModelViewSet(
    SerializerByActionMixin,
    viewsets.ReadOnlyModelViewSet
):
    permission_classes = [IsAuthenticated]
