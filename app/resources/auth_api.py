"""REST calls under ``/auth``."""
from typing import Dict


class AuthAPI:
    """Login, registration and profile lookup.

    Each method maps to exactly one request and returns the service payload
    unchanged.  Errors propagate as :class:`~api_client.TrackerAPIError`.
    """

    def __init__(self, client) -> None:
        """
        Args:
            client: A :class:`~api_client.TrackerAPIClient`.
        """
        self._client = client

    def login(self, email: str, password: str, **kwargs) -> Dict:
        """``POST /auth/login`` → ``{'token': ..., 'user': {...}}``."""
        return self._client.post(
            '/auth/login', {'email': email, 'password': password}, **kwargs
        )

    def register(self, username: str, email: str, password: str, **kwargs) -> Dict:
        """``POST /auth/register`` → ``{'token': ..., 'user': {...}}``."""
        return self._client.post(
            '/auth/register',
            {'username': username, 'email': email, 'password': password},
            **kwargs,
        )

    def get_profile(self, **kwargs) -> Dict:
        """``GET /auth/me`` → the user the current token belongs to."""
        return self._client.get('/auth/me', **kwargs)
