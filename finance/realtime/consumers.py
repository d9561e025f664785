import json
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from finance.authentication import user_for_token_key
from finance.permissions import VIEW_REPORTS, has_capability
from finance.services.realtime import group_name

logger = logging.getLogger(__name__)


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Streams ``finance.update`` events for the connecting user's hospital.

    Browsers cannot set headers on a WebSocket handshake, so a DRF token
    may be passed as ``?token=<key>``; otherwise the session user is used.
    """

    group = None

    async def connect(self):
        user = await self._resolve_user()
        if user is None or not has_capability(user, VIEW_REPORTS) or not user.hospital_id:
            await self.close(code=4401)
            return
        self.group = group_name(user.hospital_id)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "hospitalId": user.hospital_id}))
        logger.debug("ws %s joined %s", user.username, self.group)

    async def disconnect(self, close_code):
        if self.group:
            await self.channel_layer.group_discard(self.group, self.channel_name)

    async def finance_update(self, event):
        await self.send(json.dumps(event))

    async def _resolve_user(self):
        query = parse_qs(self.scope.get("query_string", b"").decode())
        key = (query.get("token") or [None])[0]
        if key:
            return await database_sync_to_async(user_for_token_key)(key)
        user = self.scope.get("user")
        if user is not None and user.is_authenticated:
            return user
        return None
