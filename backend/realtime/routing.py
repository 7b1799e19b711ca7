"""WebSocket URL routing for the realtime app."""

from django.urls import re_path

from .consumers import LiveRelayConsumer

websocket_urlpatterns = [
    # Live relay shared by every dashboard session
    # URL: ws://localhost:8000/ws/relay/?token=<access>
    re_path(
        r"ws/relay/$",
        LiveRelayConsumer.as_asgi(),
        name="relay-ws"
    ),
]
