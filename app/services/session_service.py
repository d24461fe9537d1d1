"""Session state: who is signed in and which token requests carry."""
import logging
from typing import Dict, Optional, Tuple

from api_client import TrackerAPIClient, TrackerAPIError, TrackerAuthError, error_message
from ..repositories.token_repository import TokenRepository
from ..resources.auth_api import AuthAPI

ANONYMOUS = 'anonymous'
AUTHENTICATING = 'authenticating'
AUTHENTICATED = 'authenticated'


class SessionStore:
    """Holds the current user and token and hands out a matching client.

    State moves ``anonymous`` → ``authenticating`` (login/register in
    flight) → ``authenticated`` and back to ``anonymous`` on logout or when
    a view reports an authentication failure.

    The token lives in a :class:`TokenRepository` so it survives restarts.
    The user object is kept in memory only.  :attr:`client` is rebuilt
    whenever the token changes; clients handed out earlier keep the token
    they were built with, so logging out does not affect a request that is
    already in flight.
    """

    LOGIN_FAILED = 'Login failed. Please try again.'
    REGISTER_FAILED = 'Registration failed. Please try again.'

    def __init__(self, repository: TokenRepository,
                 client: Optional[TrackerAPIClient] = None) -> None:
        """
        Args:
            repository: Durable token storage.
            client:     Template client (base URL, timeout, HTTP session).
                        Its token, if any, is ignored in favour of the
                        stored one.
        """
        self._repo = repository
        self._log = logging.getLogger('tracker.session')
        self._base_client = client if client is not None else TrackerAPIClient()
        self.user: Optional[Dict] = None
        self.error: Optional[str] = None
        self._authenticating = False
        self.client = self._base_client.with_token(self._repo.get())

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        """``True`` while a user object is held.

        This is not proof the token is still valid: an expired token keeps
        the session authenticated until a request comes back with 401.
        """
        return self.user is not None

    @property
    def has_token(self) -> bool:
        return self.client.token is not None

    @property
    def state(self) -> str:
        if self._authenticating:
            return AUTHENTICATING
        return AUTHENTICATED if self.is_authenticated else ANONYMOUS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Tuple[bool, Optional[str]]:
        """Sign in with *email* / *password*.

        Returns:
            ``(True, None)`` on success; ``(False, message)`` otherwise, in
            which case nothing is persisted.
        """
        return self._authenticate(
            lambda api: api.login(email, password), self.LOGIN_FAILED,
        )

    def register(self, username: str, email: str,
                 password: str) -> Tuple[bool, Optional[str]]:
        """Create an account and sign in to it.  Same contract as :meth:`login`."""
        return self._authenticate(
            lambda api: api.register(username, email, password), self.REGISTER_FAILED,
        )

    def logout(self) -> None:
        """Drop the stored token and the in-memory user.  Always succeeds."""
        try:
            self._repo.clear()
        except OSError as exc:
            self._log.warning("Could not remove session file: %s", exc)
        self.user = None
        self.client = self._base_client.with_token(None)
        self._log.info("Logged out")

    def handle_auth_failure(self) -> None:
        """Called when a request came back 401; ends the session."""
        if self.has_token or self.user is not None:
            self._log.warning("Session rejected by the service; logging out")
        self.logout()

    def restore(self, verify: bool = True) -> bool:
        """Pick up a token persisted by an earlier run.

        With *verify*, ``GET /auth/me`` loads the user.  A 401 ends the
        session; any other failure keeps the token but leaves the user
        unset.

        Returns:
            ``True`` when the session ends up authenticated.
        """
        self.client = self._base_client.with_token(self._repo.get())
        if not self.has_token:
            return False
        if not verify:
            return False
        try:
            self.refresh_profile()
        except TrackerAuthError:
            self.handle_auth_failure()
        except TrackerAPIError as exc:
            self._log.warning("Could not verify stored session: %s", exc)
        return self.is_authenticated

    def refresh_profile(self) -> Dict:
        """Reload the current user from ``GET /auth/me``.

        Raises:
            TrackerAPIError: Propagated unchanged.
        """
        self.user = AuthAPI(self.client).get_profile()
        return self.user

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _authenticate(self, call, fallback: str) -> Tuple[bool, Optional[str]]:
        self.error = None
        self._authenticating = True
        try:
            # Credentials go out on a token-less client.
            data = call(AuthAPI(self._base_client.with_token(None)))
        except TrackerAPIError as exc:
            self._log.info("Authentication failed: %s", exc)
            self.error = error_message(exc.payload, fallback)
            return False, self.error
        finally:
            self._authenticating = False

        token = data.get('token') if isinstance(data, dict) else None
        if not token:
            self._log.warning("Authentication response did not include a token")
            self.error = fallback
            return False, self.error

        try:
            self._repo.set(token)
        except OSError as exc:
            self._log.error("Could not persist session token: %s", exc)
            self.error = fallback
            return False, self.error

        self.client = self._base_client.with_token(token)
        user = data.get('user')
        self.user = user if isinstance(user, dict) else {}
        self._log.info("Signed in as %s", self.user.get('username') or self.user.get('email', '?'))
        return True, None
