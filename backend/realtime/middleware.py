"""WebSocket authentication middleware for JWT access tokens."""

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()
logger = logging.getLogger(__name__)


def token_from_scope(scope):
    """
    Find the access token for a WebSocket handshake:
    1. ?token=... in the query string (browsers cannot set headers)
    2. Authorization header, with or without the Bearer prefix
    """
    params = parse_qs(scope.get("query_string", b"").decode())
    token_list = params.get("token")
    if token_list:
        return token_list[0]

    headers = dict(scope.get("headers", []))
    header = headers.get(b"authorization", b"").decode()
    if header:
        parts = header.split()
        return parts[-1] if parts else None
    return None


def get_user_for_token(token):
    """Resolve an access token to a user, or AnonymousUser if it does not verify."""
    if not token:
        return AnonymousUser()
    try:
        access = AccessToken(token)
        return User.objects.get(id=access["user_id"], is_active=True)
    except (TokenError, KeyError, User.DoesNotExist) as e:
        logger.debug("WebSocket JWT auth failed: %s", e)
        return AnonymousUser()


class JWTQueryAuthMiddleware(BaseMiddleware):
    """Populate scope["user"] from the handshake's access token."""

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        scope["user"] = await database_sync_to_async(get_user_for_token)(token_from_scope(scope))
        return await super().__call__(scope, receive, send)
