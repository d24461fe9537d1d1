"""REST calls under ``/achievements``."""
from typing import Dict, List


class AchievementsAPI:
    """CRUD and keyword search for achievements.

    Listing and searching are always scoped to one game.  How the keyword
    is matched (substring, case, fuzziness) is decided by the service.
    """

    def __init__(self, client) -> None:
        self._client = client

    def get_achievements(self, game_id: str, **kwargs) -> List[Dict]:
        """``GET /achievements/<game_id>``."""
        return self._client.get(f'/achievements/{game_id}', **kwargs)

    def get_achievement(self, achievement_id: str, **kwargs) -> Dict:
        """``GET /achievements/achievement/<id>``."""
        return self._client.get(f'/achievements/achievement/{achievement_id}', **kwargs)

    def create_achievement(self, achievement_data: Dict, **kwargs) -> Dict:
        """``POST /achievements`` with ``title``, ``description``, ``game``,
        ``dateAchieved``."""
        return self._client.post('/achievements', achievement_data, **kwargs)

    def update_achievement(self, achievement_id: str, achievement_data: Dict,
                           **kwargs) -> Dict:
        return self._client.put(f'/achievements/{achievement_id}', achievement_data, **kwargs)

    def delete_achievement(self, achievement_id: str, **kwargs):
        return self._client.delete(f'/achievements/{achievement_id}', **kwargs)

    def search_achievements(self, game_id: str, keyword: str, **kwargs) -> List[Dict]:
        """``GET /achievements/search/<game_id>?keyword=<keyword>``."""
        return self._client.get(
            f'/achievements/search/{game_id}', params={'keyword': keyword}, **kwargs
        )
