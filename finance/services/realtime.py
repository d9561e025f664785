"""Push small change notifications to WebSocket clients of a hospital."""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def group_name(hospital_id: str) -> str:
    return f"updates.{hospital_id}"


def notify_update(hospital_id: str, entity: str, obj_id, status: str | None = None) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        "type": "finance.update",
        "entity": entity,
        "id": obj_id,
        "status": status,
        "hospitalId": hospital_id,
    }
    async_to_sync(channel_layer.group_send)(group_name(hospital_id), event)
    logger.debug("broadcast %s %s -> %s", entity, obj_id, group_name(hospital_id))
