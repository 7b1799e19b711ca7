"""
API error types and the REST framework exception handler.

Every error leaving the API has the same body:
    {"error": "<code>", "message": "<text>", "details": {...}}
"""

import logging

from django.http import Http404
from rest_framework import exceptions, status

logger = logging.getLogger(__name__)


class MalformedToken(exceptions.APIException):
    """Raised when an identity token is present but fails verification."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Token is invalid or expired."
    default_code = "malformed_token"


class InvalidCredentials(exceptions.APIException):
    """Raised when login credentials do not match a user."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid email or password."
    default_code = "invalid_credentials"


class VersionConflict(exceptions.APIException):
    """Raised when a conditional write names a version that is no longer current."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The entity was modified by another request."
    default_code = "conflict"


class InvalidTransition(exceptions.APIException):
    """Raised when a delivery status change is not in the transition table."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Status transition not allowed."
    default_code = "invalid_transition"


class RoutingUnavailable(exceptions.APIException):
    """Raised when the external routing service cannot produce a route."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Routing service unavailable."
    default_code = "routing_unavailable"


def _error_code(exc):
    if isinstance(exc, exceptions.ValidationError):
        return "validation_error"
    if isinstance(exc, exceptions.NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, (exceptions.NotFound, Http404)):
        return "not_found"
    codes = exc.get_codes() if hasattr(exc, "get_codes") else None
    if isinstance(codes, str):
        return codes
    return getattr(exc, "default_code", "error")


def api_exception_handler(exc, context):
    """Wrap DRF's default handler so every error has the same shape."""
    # rest_framework.views loads the authentication classes, which import this module
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)
    if response is None:
        # Unhandled errors fall through to Django's 500 handling
        return None

    code = _error_code(exc)
    details = None
    if isinstance(exc, exceptions.ValidationError):
        message = "Invalid request data."
        details = response.data
    elif isinstance(response.data, dict) and "detail" in response.data:
        message = str(response.data["detail"])
    else:
        message = str(response.data)

    view = context.get("view")
    logger.info(
        "API error %s (%s) in %s",
        code, response.status_code, view.__class__.__name__ if view else "unknown view",
    )

    body = {"error": code, "message": message}
    if details is not None:
        body["details"] = details
    response.data = body
    return response
