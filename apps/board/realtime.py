# apps/board/realtime.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)


def board_group_name(project_id):
    return f'board_{project_id}'


def broadcast_board_event(project_id, event_type, message, user=None):
    """
    Sends an event to every WebSocket watching the project's board

    Other sessions treat these as a hint to re-read; the store stays the
    only source of truth. A broken channel layer must not fail the write that
    already committed, so delivery errors are logged and dropped.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    payload = dict(message)
    payload['timestamp'] = timezone.now().isoformat()
    if user is not None:
        payload['user'] = user.display_name
        payload['user_id'] = user.id

    try:
        async_to_sync(channel_layer.group_send)(
            board_group_name(project_id),
            {'type': event_type, 'message': payload}
        )
    except (OSError, RuntimeError) as e:
        logger.warning(f"⚠️  Broadcast {event_type} to board {project_id} failed: {e}")
