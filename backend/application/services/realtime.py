"""
Realtime broadcasting.

Pushes domain events to Channels groups after the database commit:
`project_<id>` for board watchers, `notifications_<user id>` for one user.
"""

import logging
from typing import Iterable, Optional
from uuid import UUID

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from domain.shared.events import (
    ApplicationStatusChanged,
    ContributionAssigned,
    ContributionMoved,
    DomainEvent,
    PositionFilled,
    ProjectStatusChanged,
)

logger = logging.getLogger(__name__)


def project_group(project_id) -> str:
    return f'project_{project_id}'


def user_group(user_id) -> str:
    return f'notifications_{user_id}'


def group_send(group: str, message: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(group, message)
    except Exception as e:
        # Realtime is best effort; the write already happened.
        logger.warning(f"Broadcast to {group} failed: {e}")


def notify_user(user_id, title: str, message: str, level: str = 'info', action_url: Optional[str] = None) -> None:
    group_send(user_group(user_id), {
        'type': 'notification',
        'title': title,
        'message': message,
        'level': level,
        'action_url': action_url,
    })


def _route(event: DomainEvent, recipient_id: Optional[UUID] = None) -> None:
    payload = event.to_payload()
    if isinstance(event, ContributionMoved):
        group_send(project_group(event.project_id), {'type': 'task.moved', **payload})
    elif isinstance(event, ContributionAssigned):
        group_send(project_group(event.project_id), {'type': 'task.assigned', **payload})
        if not event.removed:
            group_send(user_group(event.user_id), {'type': 'assignment', **payload})
    elif isinstance(event, ProjectStatusChanged):
        group_send(project_group(event.project_id), {'type': 'project.status', **payload})
    elif isinstance(event, ApplicationStatusChanged) and recipient_id is not None:
        group_send(user_group(recipient_id), {'type': 'application.status', **payload})
    elif isinstance(event, PositionFilled):
        group_send(user_group(event.holder_id), {'type': 'position.filled', **payload})


def broadcast_events(events: Iterable[DomainEvent], recipient_id: Optional[UUID] = None) -> None:
    """Send events once the surrounding transaction commits."""
    events = list(events)
    if not events:
        return
    transaction.on_commit(lambda: [_route(e, recipient_id) for e in events])
