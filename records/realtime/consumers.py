import json
from channels.generic.websocket import AsyncWebsocketConsumer

from records.services.appointments import APPOINTMENTS_GROUP


class AppointmentsConsumer(AsyncWebsocketConsumer):
    """Pushes ``appointments.created|patched|removed`` to connected clients."""
    GROUP = APPOINTMENTS_GROUP

    async def connect(self):
        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            await self.close(code=4401)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def appointment_event(self, event):
        # event: {"type": "appointment.event", "event": "appointments.created", "data": {...}}
        await self.send(json.dumps({"event": event["event"], "data": event["data"]}))
