"""
WebSocket Consumers.

Real-time updates for project boards and personal notifications.
"""

from channels.generic.websocket import AsyncJsonWebsocketConsumer
from channels.db import database_sync_to_async
import logging

logger = logging.getLogger(__name__)


class BaseConsumer(AsyncJsonWebsocketConsumer):
    """Base consumer with common functionality."""

    room_name = None

    async def connect(self):
        """Connect to WebSocket."""
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        await self.accept()

    async def disconnect(self, close_code):
        """Leave the room joined on connect."""
        if self.room_name:
            await self.channel_layer.group_discard(
                self.room_name,
                self.channel_name
            )

    async def receive_json(self, content):
        if content.get('type') == 'ping':
            await self.send_json({'type': 'pong'})

    async def send_error(self, message: str):
        """Send error message."""
        await self.send_json({
            'type': 'error',
            'message': message
        })

    async def forward(self, event, client_type: str):
        """Relay a channel layer message to the client under `client_type`."""
        data = {key: value for key, value in event.items() if key != 'type'}
        await self.send_json({'type': client_type, **data})


class ProjectBoardConsumer(BaseConsumer):
    """
    Live task board of one project.

    Only members of the project's organization may join.
    """

    async def connect(self):
        """Connect and join project room."""
        await super().connect()

        if not self.user or not self.user.is_authenticated:
            return

        self.project_id = self.scope['url_route']['kwargs'].get('project_id')

        has_access = await self._check_project_access()
        if not has_access:
            await self.send_error('Access denied')
            await self.close(code=4003)
            return

        self.room_name = f'project_{self.project_id}'
        await self.channel_layer.group_add(
            self.room_name,
            self.channel_name
        )

        logger.info(f"User {self.user.id} joined board of project {self.project_id}")

    # Event handlers (called by channel layer)

    async def task_moved(self, event):
        await self.forward(event, 'task_moved')

    async def task_assigned(self, event):
        await self.forward(event, 'task_assigned')

    async def project_status(self, event):
        await self.forward(event, 'project_status')

    @database_sync_to_async
    def _check_project_access(self):
        """Member of the owning organization, or superuser."""
        from application.services.access import is_member
        from infrastructure.persistence.models import InternalProject

        project = InternalProject.objects.filter(id=self.project_id).only('organization_id').first()
        if project is None:
            return False
        return self.user.is_superuser or is_member(self.user, project.organization_id)


class NotificationConsumer(BaseConsumer):
    """
    Personal notification stream.

    Delivers assignments, application decisions, filled positions and
    generic notifications to one user.
    """

    async def connect(self):
        """Connect and join user's notification room."""
        await super().connect()

        if not self.user or not self.user.is_authenticated:
            return

        self.room_name = f'notifications_{self.user.id}'
        await self.channel_layer.group_add(
            self.room_name,
            self.channel_name
        )

        logger.info(f"User {self.user.id} connected to notifications")

    # Event handlers

    async def notification(self, event):
        """Handle generic notification."""
        await self.send_json({
            'type': 'notification',
            'title': event['title'],
            'message': event['message'],
            'level': event.get('level', 'info'),  # info, warning, error, success
            'action_url': event.get('action_url'),
        })

    async def assignment(self, event):
        await self.forward(event, 'assignment')

    async def application_status(self, event):
        await self.forward(event, 'application_status')

    async def position_filled(self, event):
        await self.forward(event, 'position_filled')
