"""Achievements of one selected game, with search and an add/edit dialog."""
from typing import Callable, Dict, List, Optional

from api_client import TrackerAPIError, TrackerAuthError
from ..resources.achievements_api import AchievementsAPI
from ..resources.games_api import GamesAPI
from .base import ListView
from .forms import AchievementForm, extract_entity_id
from .state import DialogOpen, Failed, Idle, Loading


class AchievementsView(ListView):
    """Achievements scoped to :attr:`selected_game`.

    The games list used to pick a game has its own small state
    (:attr:`games`, :attr:`games_loading`).  With no game selected the
    achievement list is empty and idle.
    """

    FETCH_ERROR = 'Failed to fetch achievements. Please try again.'
    GAMES_ERROR = 'Failed to fetch games. Please try again.'
    SEARCH_ERROR = 'Failed to search achievements. Please try again.'
    DELETE_ERROR = 'Failed to delete achievement. Please try again.'

    def __init__(self, session) -> None:
        super().__init__(session, 'tracker.views.achievements')
        self.state = Idle([])
        self.games: List[Dict] = []
        self.games_loading = False
        self.games_error: Optional[str] = None
        self.selected_game: Optional[str] = None
        self.search_term = ''

    def _api(self) -> AchievementsAPI:
        return AchievementsAPI(self._session.client)

    # ------------------------------------------------------------------
    # Game selection
    # ------------------------------------------------------------------

    def load_games(self) -> bool:
        """Fetch the games offered for selection."""
        self.games_loading = True
        try:
            self.games = GamesAPI(self._session.client).get_games() or []
            self.games_error = None
            return True
        except TrackerAPIError as exc:
            self.games_error = self.GAMES_ERROR
            self._log.error("%s %s", self.GAMES_ERROR, exc)
            if isinstance(exc, TrackerAuthError):
                self._session.handle_auth_failure()
            return False
        finally:
            self.games_loading = False

    def select_game(self, game_id: Optional[str]) -> bool:
        """Select *game_id* and fetch its achievements; ``None`` clears the list.

        Switching to another game drops the previous game's list first, so a
        failed fetch leaves nothing on screen rather than the wrong game's
        achievements.
        """
        game_id = game_id or None
        if game_id != self.selected_game:
            self.state = Loading()
        self.selected_game = game_id
        if not self.selected_game:
            self.search_term = ''
            self.state = Idle([])
            return True
        return self.load()

    def load(self) -> bool:
        """Fetch every achievement of the selected game and end any search."""
        self.search_term = ''
        game_id = self.selected_game
        if not game_id:
            self.state = Idle([])
            return True
        return self._fetch(lambda: self._api().get_achievements(game_id), self.FETCH_ERROR)

    def refresh(self) -> bool:
        """Re-run the active search, or :meth:`load` when there is none."""
        if self.search_term:
            return self.search(self.search_term)
        return self.load()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, keyword: str) -> bool:
        """Replace the list with the service's matches for *keyword*.

        Does nothing (and returns ``False``) without a selected game or with a
        blank keyword.
        """
        keyword = (keyword or '').strip()
        if not self.selected_game or not keyword:
            return False
        self.search_term = keyword
        game_id = self.selected_game
        return self._fetch(
            lambda: self._api().search_achievements(game_id, keyword), self.SEARCH_ERROR,
        )

    def clear_search(self) -> bool:
        return self.load()

    # ------------------------------------------------------------------
    # Dialog
    # ------------------------------------------------------------------

    def open_create(self) -> AchievementForm:
        form = AchievementForm(game=self.selected_game or '')
        self.dialog = DialogOpen('create', form)
        self.form_errors = {}
        return form

    def open_edit(self, achievement: Dict) -> AchievementForm:
        form = AchievementForm.from_achievement(achievement)
        self.dialog = DialogOpen('edit', form, extract_entity_id(achievement))
        self.form_errors = {}
        return form

    def submit(self) -> bool:
        """Create or update from the open dialog, then :meth:`refresh` the list."""
        if self.dialog.is_open and not self.selected_game:
            self.selected_game = self.dialog.form.game or None
        api = self._api()
        return self._submit_form(
            api.create_achievement, api.update_achievement, self.refresh,
        )

    def delete(self, achievement_id: str, confirm: Callable[[], bool]) -> bool:
        return self._confirmed_delete(
            achievement_id, confirm,
            lambda: self._api().delete_achievement(achievement_id), self.refresh,
        )

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.state, Failed):
            return self.state.message
        return self.games_error
