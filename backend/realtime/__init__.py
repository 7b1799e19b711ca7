"""
Realtime app: the live relay for driver location events.

Key Components:
    - registry.py: explicit registry of connected sessions with publish/subscribe
    - broadcast.py: fire-and-forget location publishing (sync and async)
    - consumers/: WebSocket consumer for dashboard sessions
    - middleware.py: JWT authentication for WebSocket handshakes

Usage:
    from realtime.broadcast import publish_driver_location
    from realtime.registry import get_session_registry
"""
