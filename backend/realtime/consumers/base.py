"""Shared plumbing for authenticated JSON WebSocket consumers."""

import logging
from typing import Dict, Any

from channels.generic.websocket import AsyncJsonWebsocketConsumer

logger = logging.getLogger(__name__)

# Close code for handshakes without a valid access token
UNAUTHENTICATED_CLOSE_CODE = 4401


class BaseConsumer(AsyncJsonWebsocketConsumer):
    """
    Refuses anonymous handshakes and dispatches inbound frames by their
    `type` to a `handle_<type>` coroutine on the subclass.

    Subclasses may override:
        - on_connect(): runs after the socket is accepted
        - on_disconnect(close_code): runs when the socket goes away
    """

    async def connect(self):
        self.user = self.scope.get("user")
        if self.user is None or self.user.is_anonymous:
            logger.info("Refusing unauthenticated WebSocket handshake")
            await self.close(code=UNAUTHENTICATED_CLOSE_CODE)
            return

        self.user_id = getattr(self.user, "id", None)
        await self.accept()
        await self.on_connect()

    async def on_connect(self):
        await self.send_frame("connection_established", user_id=self.user_id)

    async def disconnect(self, close_code):
        if not hasattr(self, "user_id"):
            return
        try:
            await self.on_disconnect(close_code)
        except Exception:
            logger.exception("Cleanup failed for WebSocket session of user %s", self.user_id)

    async def on_disconnect(self, close_code):
        pass

    async def receive_json(self, content: Any, **kwargs):
        msg_type = content.get("type") if isinstance(content, dict) else None
        if not msg_type:
            await self.send_error("Frames must be JSON objects with a type")
            return

        handler = getattr(self, f"handle_{msg_type}", None)
        if handler is None:
            await self.send_error(f"Unknown message type: {msg_type}")
            return

        try:
            await handler(content)
        except Exception:
            logger.exception("Handler for %s failed", msg_type)
            await self.send_error(f"Error processing {msg_type}")

    # ---------------------- Outbound frames ----------------------

    async def send_frame(self, frame_type: str, **fields):
        payload: Dict[str, Any] = {"type": frame_type}
        payload.update(fields)
        await self.send_json(payload)

    async def send_error(self, message: str):
        await self.send_frame("error", message=message)
