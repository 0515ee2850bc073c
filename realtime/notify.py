import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def room_group(room_id) -> str:
    return f"room_{room_id}"


def notify_room_changed(room_id, reason: str = "") -> None:
    """Tell every subscriber of the room to reload its state."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(room_group(room_id), {
            "type": "room.changed",
            "payload": {
                "type": "room-changed",
                "room_id": str(room_id),
                "reason": reason,
            },
        })
    except Exception:
        logger.exception("Failed to publish change notification for room %s", room_id)
