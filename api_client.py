"""
api_client.py
=============
Thin wrapper around the game tracker REST service.

Every request goes to a fixed base URL, carries a JSON body when one is
given, and includes ``Authorization: Bearer <token>`` when the client was
built with a token.  Success payloads are returned unchanged; failures are
raised as :class:`TrackerAPIError` subclasses so callers can tell a dead
network from a rejected login or a server fault.

The token is bound to the client instance.  Logging in or out produces a
new client via :meth:`TrackerAPIClient.with_token` instead of mutating a
process-wide default header.

Usage
-----
::

    from api_client import TrackerAPIClient

    client = TrackerAPIClient("http://localhost:5000/api", token="abc")
    games = client.get("/games")
    # [{"_id": "64f...", "name": "Celeste", "genre": "Platformer", ...}, ...]
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger('tracker.api')

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT  = 10  # seconds

_GENERIC_MESSAGES = {
    'network':    "Could not reach the tracker service.",
    'auth':       "Authentication required.",
    'validation': "The request was rejected by the tracker service.",
    'server':     "The tracker service reported an internal error.",
}


class TrackerAPIError(Exception):
    """Raised when a tracker request fails.

    Attributes:
        status_code: HTTP status code, or ``None`` when no response arrived.
        payload:     Decoded JSON error body from the service, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class TrackerNetworkError(TrackerAPIError):
    """Raised when no response was received (connection error, timeout)."""


class TrackerAuthError(TrackerAPIError):
    """Raised on HTTP 401: the token is missing, expired or revoked."""


class TrackerValidationError(TrackerAPIError):
    """Raised on any other 4xx response."""


class TrackerServerError(TrackerAPIError):
    """Raised on 5xx responses."""


class RequestCancelled(TrackerAPIError):
    """Raised when a request's :class:`CancellationToken` was triggered."""


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a request.

    ``requests`` cannot abort a blocking call from another thread, so the
    token is checked right before dispatch and again once the response has
    arrived.  A request cancelled mid-flight has its result discarded.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def error_message(payload: Any, default: str) -> str:
    """Pull a human-readable message out of an error payload."""
    if isinstance(payload, dict):
        for key in ('message', 'error'):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default


class TrackerAPIClient:
    """Configured HTTP client for the tracker service."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            base_url: Service root, e.g. ``http://localhost:5000/api``.
            token:    Bearer token to attach to every request (optional).
            timeout:  Default per-request timeout in seconds.
            session:  ``requests.Session`` to reuse; a new one is created
                      when omitted.
        """
        if not base_url:
            raise ValueError("base_url must not be empty")
        self.base_url = base_url.rstrip('/')
        self._token   = token or None
        self.timeout  = timeout
        self._session = session if session is not None else requests.Session()

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self._token

    def with_token(self, token: Optional[str]) -> 'TrackerAPIClient':
        """Return a client sharing this one's settings but bound to *token*."""
        return TrackerAPIClient(
            self.base_url, token=token, timeout=self.timeout, session=self._session,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self._token:
            headers['Authorization'] = f'Bearer {self._token}'
        return headers

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        """Send one request and return the decoded JSON payload.

        Args:
            method:       HTTP verb (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path:         Path below the base URL, e.g. ``/games``.
            body:         JSON-serialisable request body.
            params:       Query-string parameters.
            timeout:      Overrides the client default for this request.
            cancel_token: Optional :class:`CancellationToken`.

        Returns:
            The response payload unchanged, or ``None`` for an empty body.

        Raises:
            RequestCancelled:       *cancel_token* fired.
            TrackerNetworkError:    No response was received.
            TrackerAuthError:       HTTP 401.
            TrackerValidationError: Other 4xx responses.
            TrackerServerError:     5xx responses.
        """
        method = method.upper()
        if cancel_token is not None and cancel_token.cancelled:
            raise RequestCancelled(f"{method} {path} cancelled before dispatch")

        url = self.base_url + '/' + path.lstrip('/')
        kwargs: Dict[str, Any] = {
            'headers': self._headers(),
            'timeout': self.timeout if timeout is None else timeout,
        }
        if body is not None:
            kwargs['json'] = body
        if params:
            kwargs['params'] = params

        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TrackerNetworkError(
                f"{_GENERIC_MESSAGES['network']} ({exc})"
            ) from exc

        if cancel_token is not None and cancel_token.cancelled:
            logger.debug("Discarding response for cancelled %s %s", method, path)
            raise RequestCancelled(f"{method} {path} cancelled", resp.status_code)

        if resp.status_code >= 400:
            raise self._error_for(resp, method, path)
        return self._decode(resp)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self.request('GET', path, params=params, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return self.request('POST', path, body=body, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs) -> Any:
        return self.request('PUT', path, body=body, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(resp) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _error_for(self, resp, method: str, path: str) -> TrackerAPIError:
        """Map an error response onto the exception hierarchy."""
        status = resp.status_code
        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if status == 401:
            cls, kind = TrackerAuthError, 'auth'
        elif status >= 500:
            cls, kind = TrackerServerError, 'server'
        else:
            cls, kind = TrackerValidationError, 'validation'

        message = error_message(payload, _GENERIC_MESSAGES[kind])
        logger.info("%s %s -> HTTP %s: %s", method, path, status, message)
        return cls(message, status_code=status, payload=payload)
