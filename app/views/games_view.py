"""Games list with its add/edit dialog."""
from typing import Callable, Dict

from ..resources.games_api import GamesAPI
from .base import ListView
from .forms import GameForm, extract_entity_id
from .state import DialogOpen


class GamesView(ListView):
    """The signed-in user's games."""

    FETCH_ERROR = 'Failed to fetch games. Please try again.'
    DELETE_ERROR = 'Failed to delete game. Please try again.'

    def __init__(self, session) -> None:
        super().__init__(session, 'tracker.views.games')

    def _api(self) -> GamesAPI:
        return GamesAPI(self._session.client)

    def load(self) -> bool:
        """Fetch the list.  Returns ``False`` (and enters the error state) on failure."""
        return self._fetch(lambda: self._api().get_games(), self.FETCH_ERROR)

    def open_create(self) -> GameForm:
        form = GameForm()
        self.dialog = DialogOpen('create', form)
        self.form_errors = {}
        return form

    def open_edit(self, game: Dict) -> GameForm:
        form = GameForm.from_game(game)
        self.dialog = DialogOpen('edit', form, extract_entity_id(game))
        self.form_errors = {}
        return form

    def submit(self) -> bool:
        """Create or update from the open dialog, then reload the list."""
        api = self._api()
        return self._submit_form(api.create_game, api.update_game, self.load)

    def delete(self, game_id: str, confirm: Callable[[], bool]) -> bool:
        """Delete *game_id* once *confirm* returns ``True``.  There is no undo."""
        return self._confirmed_delete(
            game_id, confirm, lambda: self._api().delete_game(game_id), self.load,
        )
