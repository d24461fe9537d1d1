"""Tagged states shared by the list views.

A list view is always in exactly one of :class:`Loading`, :class:`Idle`,
:class:`Submitting` or :class:`Failed`.  The transition helpers only accept
the source states that make sense, so e.g. a submit can never start before
data has been loaded.

Dialogs are either :class:`DialogClosed` or :class:`DialogOpen`.
"""
from typing import Dict, List, Optional


class InvalidTransition(Exception):
    """Raised when a view is asked to move between incompatible states."""


class ViewState:
    kind = 'base'
    items: Optional[List[Dict]] = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class Loading(ViewState):
    """Initial fetch in flight; nothing to show yet."""
    kind = 'loading'


class Idle(ViewState):
    """Data loaded and shown."""
    kind = 'idle'

    def __init__(self, items: List[Dict]) -> None:
        self.items = list(items)

    def __repr__(self) -> str:
        return f"<Idle items={len(self.items)}>"


class Submitting(ViewState):
    """A create/update/delete is in flight.  Only reachable from :class:`Idle`."""
    kind = 'submitting'

    def __init__(self, previous: Idle, action: str) -> None:
        self.items = previous.items
        self.action = action

    def __repr__(self) -> str:
        return f"<Submitting action={self.action!r}>"


class Failed(ViewState):
    """The last fetch or submit failed.

    ``items`` holds whatever was on screen before the failure (``None`` if
    the first fetch failed).  Re-triggering the action is the retry.
    """
    kind = 'error'

    def __init__(self, message: str, items: Optional[List[Dict]] = None) -> None:
        self.message = message
        self.items = list(items) if items is not None else None

    def __repr__(self) -> str:
        return f"<Failed {self.message!r}>"


def begin_submit(state: ViewState, action: str) -> Submitting:
    """Move from :class:`Idle` (or a failure with data on screen) to submitting."""
    if isinstance(state, Idle):
        return Submitting(state, action)
    if isinstance(state, Failed) and state.items is not None:
        return Submitting(Idle(state.items), action)
    raise InvalidTransition(f"cannot {action} while {state.kind}")


class DialogState:
    is_open = False


class DialogClosed(DialogState):
    def __repr__(self) -> str:
        return "<DialogClosed>"


class DialogOpen(DialogState):
    """Form dialog in ``create`` or ``edit`` mode.

    In edit mode ``entity_id`` names the entity being changed and ``form``
    was pre-populated from it.
    """
    is_open = True

    def __init__(self, mode: str, form, entity_id: Optional[str] = None) -> None:
        if mode not in ('create', 'edit'):
            raise ValueError(f"unknown dialog mode {mode!r}")
        if mode == 'edit' and not entity_id:
            raise ValueError("edit dialog needs an entity_id")
        self.mode = mode
        self.form = form
        self.entity_id = entity_id

    def __repr__(self) -> str:
        return f"<DialogOpen {self.mode} {self.entity_id or ''}>"
