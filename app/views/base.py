"""Shared plumbing for the list views (games, achievements)."""
import logging
from typing import Callable, Dict, List, Optional

from api_client import TrackerAPIError, TrackerAuthError
from .state import (
    DialogClosed, DialogState, Failed, Idle, Loading, ViewState, begin_submit,
)


class ListView:
    """A list of entities plus one add/edit dialog.

    Sub-classes supply the fetch and the create/update/delete calls; this
    class drives the state transitions, the confirmation step before delete
    and the error reporting.  Errors are shown as fixed messages; the
    detail only goes to the log.
    """

    FETCH_ERROR = 'Failed to load. Please try again.'
    SAVE_ERROR = 'An error occurred. Please try again.'
    DELETE_ERROR = 'Failed to delete. Please try again.'

    def __init__(self, session, logger_name: str) -> None:
        """
        Args:
            session:     The :class:`~app.services.session_service.SessionStore`
                         whose client the view's requests use.
            logger_name: Child logger, e.g. ``'tracker.views.games'``.
        """
        self._session = session
        self._log = logging.getLogger(logger_name)
        self.state: ViewState = Loading()
        self.dialog: DialogState = DialogClosed()
        self.form_errors: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Read-only helpers for the UI
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[Dict]:
        return list(self.state.items or [])

    @property
    def error(self) -> Optional[str]:
        return self.state.message if isinstance(self.state, Failed) else None

    @property
    def busy(self) -> bool:
        return self.state.kind in ('loading', 'submitting')

    def close_dialog(self) -> None:
        self.dialog = DialogClosed()
        self.form_errors = {}

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _fetch(self, call: Callable[[], List[Dict]], message: str) -> bool:
        previous = self.state.items
        if not isinstance(self.state, Idle):
            self.state = Loading()
        try:
            items = call()
        except TrackerAPIError as exc:
            self._fail(message, exc, previous)
            return False
        self.state = Idle(items or [])
        return True

    def _mutate(self, action: str, call: Callable[[], object],
                refresh: Callable[[], bool], message: str) -> bool:
        """Run one create/update/delete, then re-fetch the list."""
        previous = self.state.items
        self.state = begin_submit(self.state, action)
        try:
            call()
        except TrackerAPIError as exc:
            self._fail(message, exc, previous)
            return False
        self.state = Idle(previous or [])
        self.close_dialog()
        refresh()
        return True

    def _confirmed_delete(self, entity_id: str, confirm: Callable[[], bool],
                          call: Callable[[], object],
                          refresh: Callable[[], bool]) -> bool:
        if not entity_id:
            raise ValueError("entity_id must not be empty")
        if not confirm():
            self._log.debug("Delete of %s not confirmed", entity_id)
            return False
        return self._mutate('delete', call, refresh, self.DELETE_ERROR)

    def _submit_form(self, create: Callable[[Dict], object],
                     update: Callable[[str, Dict], object],
                     refresh: Callable[[], bool]) -> bool:
        """Validate the open dialog's form and send it.

        An invalid form sets :attr:`form_errors` and sends nothing.
        """
        if not self.dialog.is_open:
            raise RuntimeError("no dialog is open")
        form = self.dialog.form
        self.form_errors = form.validate()
        if self.form_errors:
            return False
        payload = form.to_payload()
        if self.dialog.mode == 'edit':
            entity_id = self.dialog.entity_id
            return self._mutate('update', lambda: update(entity_id, payload),
                                refresh, self.SAVE_ERROR)
        return self._mutate('create', lambda: create(payload), refresh, self.SAVE_ERROR)

    def _fail(self, message: str, exc: TrackerAPIError,
              items: Optional[List[Dict]]) -> None:
        self._log.error("%s %s", message, exc)
        self.state = Failed(message, items)
        if isinstance(exc, TrackerAuthError):
            self._session.handle_auth_failure()
