"""Repository base: one small JSON document kept in a local file."""
import json
import logging
import os
import tempfile
from typing import Any, Optional


class BaseRepository:
    """One JSON document in one file, re-read from disk on every call.

    A missing or unreadable file reads as the caller's default.  Writes
    are staged next to the target and swapped in with ``os.replace``; when
    :attr:`file_mode` is set the staged copy gets those permissions before
    the swap, so the document never appears with wider ones.
    """

    file_mode: Optional[int] = None

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._log = logging.getLogger(f'tracker.repository.{type(self).__name__}')

    @property
    def path(self) -> str:
        return self._path

    def _load(self, default: Any) -> Any:
        try:
            with open(self._path, 'r') as fh:
                return json.load(fh)
        except FileNotFoundError:
            return default
        except (ValueError, OSError) as exc:
            self._log.warning("Ignoring unreadable %s: %s", self._path, exc)
            return default

    def _save(self, data: Any) -> None:
        """Replace the file with *data*.  A failed write keeps the old file."""
        folder = os.path.dirname(os.path.abspath(self._path))
        fd, staged = tempfile.mkstemp(prefix='.staged-', dir=folder)
        try:
            with os.fdopen(fd, 'w') as fh:
                json.dump(data, fh)
            if self.file_mode is not None:
                self._restrict(staged)
            os.replace(staged, self._path)
        except BaseException:
            if os.path.exists(staged):
                os.remove(staged)
            raise

    def _restrict(self, target: str) -> None:
        try:
            os.chmod(target, self.file_mode)
        except OSError as exc:
            # Not every filesystem honours POSIX modes.
            self._log.debug("Could not chmod %s: %s", target, exc)

    def _delete(self) -> bool:
        """Remove the file.  ``False`` when there was nothing to remove."""
        try:
            os.remove(self._path)
        except FileNotFoundError:
            return False
        return True
