import json
from channels.generic.websocket import AsyncWebsocketConsumer

from .notify import room_group


class RoomConsumer(AsyncWebsocketConsumer):
    """Change feed for one room.

    Subscribers only ever receive ``room-changed`` notices; they reload the
    full room state over HTTP in response.
    """

    async def connect(self):
        self.room_id = self.scope["url_route"]["kwargs"]["room_id"]
        self.group = room_group(self.room_id)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.group, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            msg = json.loads(text_data or "")
        except json.JSONDecodeError:
            return

        if msg.get("type") == "ping":
            await self.send(text_data=json.dumps({"type": "pong"}))

    async def room_changed(self, event):
        await self.send(text_data=json.dumps(event["payload"]))
