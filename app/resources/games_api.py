"""REST calls under ``/games``."""
from typing import Dict, List


class GamesAPI:
    """CRUD for the signed-in user's games.

    ``game_data`` dicts use the service's field names: ``name`` (required
    by the service), ``genre`` and ``platform``.  No client-side validation
    or caching happens here; see :mod:`app.views.forms` for that.
    """

    def __init__(self, client) -> None:
        self._client = client

    def get_games(self, **kwargs) -> List[Dict]:
        return self._client.get('/games', **kwargs)

    def get_game(self, game_id: str, **kwargs) -> Dict:
        return self._client.get(f'/games/{game_id}', **kwargs)

    def create_game(self, game_data: Dict, **kwargs) -> Dict:
        return self._client.post('/games', game_data, **kwargs)

    def update_game(self, game_id: str, game_data: Dict, **kwargs) -> Dict:
        return self._client.put(f'/games/{game_id}', game_data, **kwargs)

    def delete_game(self, game_id: str, **kwargs):
        return self._client.delete(f'/games/{game_id}', **kwargs)
