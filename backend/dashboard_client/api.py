"""REST client for the dispatch API built on requests."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

FAMILIES = ("places", "clients", "deliveries", "drivers")


class ApiError(Exception):
    """Base error for a failed API call."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Optional[Dict] = None):
        super().__init__(message)
        self.status = status
        self.payload = payload or {}


class AuthorizationError(ApiError):
    """Missing, malformed or expired token (401/403, or 400 malformed_token)."""


class ValidationError(ApiError):
    """Rejected body: missing required field, unknown field, bad transition."""


class NotFoundError(ApiError):
    """The entity vanished or belongs to someone else."""


class ConflictError(ApiError):
    """Conditional write lost against a newer version."""


class TransportError(ApiError):
    """Connection failure, timeout or unexpected server error."""


def _error_for(response) -> ApiError:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {"details": payload}

    message = payload.get("message") or payload.get("detail") or response.reason or "Request failed"
    code = payload.get("error")
    status = response.status_code

    if status in (401, 403) or code == "malformed_token":
        cls = AuthorizationError
    elif status == 404:
        cls = NotFoundError
    elif status == 409:
        cls = ConflictError
    elif 400 <= status < 500:
        cls = ValidationError
    else:
        cls = TransportError
    return cls(str(message), status=status, payload=payload)


class DashboardAPI:
    """
    Thin wrapper over the REST surface.

    Every call is issued and awaited sequentially; nothing is retried.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token = None
        if token:
            self.set_token(token)

    @property
    def api_root(self) -> str:
        return f"{self.base_url}/api"

    def set_token(self, token: str) -> None:
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_root}/{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Could not reach the server: {e}") from e

        if response.status_code >= 400:
            raise _error_for(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ---------------------- Auth ----------------------

    def register(self, name: str, email: str, password: str) -> Dict:
        data = self._request("POST", "auth/register/", json={"name": name, "email": email, "password": password})
        self.set_token(data["tokens"]["access"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict:
        data = self._request("POST", "auth/login/", json={"email": email, "password": password})
        self.set_token(data["tokens"]["access"])
        return data["user"]

    def me(self) -> Dict:
        return self._request("GET", "auth/me/")

    # ---------------------- Entity families ----------------------

    def list(self, family: str, **params) -> List[Dict]:
        return self._request("GET", f"{family}/", params=params or None)

    def get(self, family: str, pk) -> Dict:
        return self._request("GET", f"{family}/{pk}/")

    def create(self, family: str, body: Dict) -> Dict:
        return self._request("POST", f"{family}/", json=body)

    def update(self, family: str, pk, body: Dict) -> Dict:
        return self._request("PUT", f"{family}/{pk}/", json=body)

    def delete(self, family: str, pk) -> None:
        self._request("DELETE", f"{family}/{pk}/")

    def update_driver_location(self, pk, lat: float, lng: float) -> Dict:
        return self._request("POST", f"drivers/{pk}/location/", json={"lat": lat, "lng": lng})

    # ---------------------- Zones / routing ----------------------

    def list_zones(self) -> List[Dict]:
        return self.list("zones")

    def create_zone(self, body: Dict) -> Dict:
        return self.create("zones", body)

    def delete_zone(self, pk) -> None:
        self.delete("zones", pk)

    def directions(self, coordinates=None, delivery_ids=None) -> Dict:
        body: Dict[str, Any] = {}
        if coordinates is not None:
            body["coordinates"] = coordinates
        if delivery_ids is not None:
            body["delivery_ids"] = delivery_ids
        return self._request("POST", "directions/", json=body)
