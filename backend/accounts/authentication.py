"""JWT authentication for the REST API."""

import logging

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from common.exceptions import MalformedToken

logger = logging.getLogger(__name__)


class DispatchJWTAuthentication(JWTAuthentication):
    """
    Accepts `Authorization: Bearer <token>` as well as a bare token in the
    header (what the browser dashboard sends).

    A missing header leaves the request anonymous (401 from the permission
    check); a token that fails verification is a 400 malformed token.
    """

    def get_raw_token(self, header):
        parts = header.split()
        if len(parts) == 1:
            return parts[0]
        return super().get_raw_token(header)

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except InvalidToken as e:
            logger.debug("Rejected token: %s", e)
            raise MalformedToken()
