"""
Registry of connected relay sessions.

Each WebSocket session registers under its channel name when it connects and
is removed when it disconnects. Publishing fans an event out to every
registered session, the sender included, through one channel-layer group so
the fan-out also reaches sessions served by other processes.

Nothing is buffered: a session that registers after an event was published
never sees it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

RELAY_GROUP = "relay_sessions"


@dataclass
class SessionInfo:
    session_id: str
    user_id: Optional[int]
    connected_at: Any = field(default_factory=timezone.now)


class SessionRegistry:
    """Narrow publish/subscribe interface over the channel layer."""

    def __init__(self, channel_layer=None, group: str = RELAY_GROUP):
        self._channel_layer = channel_layer
        self.group = group
        self._sessions: Dict[str, SessionInfo] = {}

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def add(self, session_id: str, user_id: Optional[int] = None) -> SessionInfo:
        """Subscribe a session to the relay."""
        await self.channel_layer.group_add(self.group, session_id)
        info = SessionInfo(session_id=session_id, user_id=user_id)
        self._sessions[session_id] = info
        logger.info("Relay session %s connected (user %s), %s active", session_id, user_id, len(self._sessions))
        return info

    async def remove(self, session_id: str) -> None:
        """Unsubscribe a session; unknown ids are ignored."""
        await self.channel_layer.group_discard(self.group, session_id)
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Relay session %s disconnected, %s active", session_id, len(self._sessions))

    async def publish(self, event: Dict[str, Any]) -> None:
        """
        Fan an event out to every subscribed session.

        `event["type"]` names the consumer handler; the rest is passed through
        untouched. Transport errors propagate to the caller.
        """
        await self.channel_layer.group_send(self.group, event)

    def sessions(self) -> List[SessionInfo]:
        return list(self._sessions.values())

    def count(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Process-wide registry used by the relay consumer and publishers."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def set_session_registry(registry: Optional[SessionRegistry]) -> None:
    """Swap the process-wide registry (tests inject their own)."""
    global _registry
    _registry = registry
