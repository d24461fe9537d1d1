"""Repository for the persisted session token ({"token": "<string>"})."""
from typing import Optional

from .base import BaseRepository


class TokenRepository(BaseRepository):
    """Persists exactly one bearer token so a session survives restarts.

    Schema::

        {"token": "<opaque bearer token>"}

    The file is owner-readable only where the platform supports it.  Reads
    always go to disk, so a token cleared by another process is seen on the
    next request.
    """

    KEY = 'token'
    file_mode = 0o600

    def __init__(self, file_path: str = '.tracker_session.json') -> None:
        super().__init__(file_path)

    def get(self) -> Optional[str]:
        """Return the stored token, or ``None`` when there is none."""
        data = self._load({})
        token = data.get(self.KEY) if isinstance(data, dict) else None
        if isinstance(token, str) and token:
            return token
        return None

    def set(self, token: str) -> None:
        """Store *token*, replacing any previous one."""
        if not token:
            raise ValueError("token must not be empty")
        self._save({self.KEY: token})

    def clear(self) -> None:
        """Forget the stored token.  Safe to call when none is stored."""
        if self._delete():
            self._log.debug("Session token removed from %s", self._path)
