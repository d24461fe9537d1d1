"""Form models for the game and achievement dialogs."""
import datetime
from typing import Dict, Optional


def extract_entity_id(entity) -> Optional[str]:
    """Return the identifier of a service entity (``_id`` first, then ``id``).

    Plain strings are treated as ids already.
    """
    if isinstance(entity, dict):
        value = entity.get('_id') or entity.get('id')
        return str(value) if value else None
    if entity:
        return str(entity)
    return None


def today() -> str:
    return datetime.date.today().isoformat()


class GameForm:
    """Fields of the add/edit game dialog."""

    def __init__(self, name: str = '', genre: str = '', platform: str = '') -> None:
        self.name = name
        self.genre = genre
        self.platform = platform

    @classmethod
    def from_game(cls, game: Dict) -> 'GameForm':
        return cls(
            name=game.get('name') or '',
            genre=game.get('genre') or '',
            platform=game.get('platform') or '',
        )

    def validate(self) -> Dict[str, str]:
        """Return ``{field: message}`` for every invalid field (empty when valid)."""
        errors = {}
        if not (self.name or '').strip():
            errors['name'] = 'Name is required.'
        return errors

    def to_payload(self) -> Dict:
        return {
            'name': self.name.strip(),
            'genre': (self.genre or '').strip(),
            'platform': (self.platform or '').strip(),
        }


class AchievementForm:
    """Fields of the add/edit achievement dialog.

    ``date_achieved`` is kept as ``YYYY-MM-DD`` and defaults to today.
    """

    def __init__(self, title: str = '', description: str = '', game: str = '',
                 date_achieved: Optional[str] = None) -> None:
        self.title = title
        self.description = description
        self.game = game
        self.date_achieved = date_achieved or today()

    @classmethod
    def from_achievement(cls, achievement: Dict) -> 'AchievementForm':
        date = achievement.get('dateAchieved') or ''
        return cls(
            title=achievement.get('title') or '',
            description=achievement.get('description') or '',
            game=extract_entity_id(achievement.get('game')) or '',
            date_achieved=date.split('T')[0] or None,
        )

    def validate(self) -> Dict[str, str]:
        errors = {}
        if not (self.title or '').strip():
            errors['title'] = 'Title is required.'
        if not (self.game or '').strip():
            errors['game'] = 'Game is required.'
        try:
            datetime.date.fromisoformat(self.date_achieved)
        except (TypeError, ValueError):
            errors['dateAchieved'] = 'Date must be YYYY-MM-DD.'
        return errors

    def to_payload(self) -> Dict:
        return {
            'title': self.title.strip(),
            'description': (self.description or '').strip(),
            'game': self.game,
            'dateAchieved': self.date_achieved,
        }
