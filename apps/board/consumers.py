# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from apps.core.models import Project
from apps.core.permissions import NexusPermissions
from .queries import build_board
from .realtime import board_group_name

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    WebSocket for live updates of a project's board

    - Relays task moves, creations, updates and deletions
    - Presence (user joined/left)
    - ``sync_board`` returns the full board read model on demand
    """

    async def connect(self):
        """
        Joins the board group after checking membership
        """
        self.project_id = int(self.scope['url_route']['kwargs']['project_id'])
        self.board_group_name = board_group_name(self.project_id)
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("❌ WebSocket rejected - not authenticated")
            await self.close()
            return

        has_access = await self.check_board_access()
        if not has_access:
            logger.warning(f"❌ WebSocket rejected - {self.user.username} has no access to project {self.project_id}")
            await self.close()
            return

        await self.channel_layer.group_add(
            self.board_group_name,
            self.channel_name
        )
        await self.accept()

        await self.channel_layer.group_send(
            self.board_group_name,
            {
                'type': 'user_joined',
                'message': {
                    'user': self.user.display_name,
                    'user_id': self.user.id,
                    'timestamp': self.get_timestamp()
                }
            }
        )

        logger.info(f"✅ WebSocket connected - {self.user.username} on project {self.project_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'board_group_name') and self.user.is_authenticated:
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'user_left',
                    'message': {
                        'user': self.user.display_name,
                        'user_id': self.user.id,
                        'timestamp': self.get_timestamp()
                    }
                }
            )
            await self.channel_layer.group_discard(
                self.board_group_name,
                self.channel_name
            )

    async def receive(self, text_data=None, bytes_data=None):
        """
        Client messages: ``ping`` and ``sync_board``
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ Invalid JSON over WebSocket from {self.user.username}")
            await self.send_json({'type': 'error', 'error': 'Invalid JSON'})
            return

        if not isinstance(data, dict):
            await self.send_json({'type': 'error', 'error': 'Message must be a JSON object'})
            return

        message_type = data.get('type')

        if message_type == 'ping':
            await self.send_json({'type': 'pong', 'timestamp': self.get_timestamp()})

        elif message_type == 'sync_board':
            board = await self.get_board_state()
            if board is None:
                await self.send_json({'type': 'error', 'error': 'Project not found'})
                return
            await self.send_json({
                'type': 'board_sync',
                'board': board,
                'timestamp': self.get_timestamp()
            })

        else:
            await self.send_json({'type': 'error', 'error': f'Unknown message type: {message_type}'})

    # === Group event handlers ===

    async def task_moved(self, event):
        await self.send_json({'type': 'task_moved', 'message': event['message']})

    async def task_created(self, event):
        await self.send_json({'type': 'task_created', 'message': event['message']})

    async def task_updated(self, event):
        await self.send_json({'type': 'task_updated', 'message': event['message']})

    async def task_deleted(self, event):
        await self.send_json({'type': 'task_deleted', 'message': event['message']})

    async def user_joined(self, event):
        # Not echoed back to the user who joined
        if event['message']['user_id'] != self.user.id:
            await self.send_json({'type': 'user_joined', 'message': event['message']})

    async def user_left(self, event):
        if event['message']['user_id'] != self.user.id:
            await self.send_json({'type': 'user_left', 'message': event['message']})

    # === Helpers ===

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content, default=str))

    @database_sync_to_async
    def check_board_access(self):
        project = Project.objects.select_related('workspace').filter(pk=self.project_id).first()
        if project is None:
            return False
        return NexusPermissions.has_project_access(self.user, project)

    @database_sync_to_async
    def get_board_state(self):
        project = Project.objects.select_related('workspace').filter(pk=self.project_id).first()
        if project is None:
            return None
        return build_board(project)

    def get_timestamp(self):
        return timezone.now().isoformat()
