"""Realtime consumers for WebSocket communication."""

from .base import BaseConsumer
from .relay_consumer import LiveRelayConsumer

__all__ = [
    "BaseConsumer",
    "LiveRelayConsumer",
]
