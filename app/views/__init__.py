"""View controllers: UI state for each screen, independent of rendering."""
from .state import (
    InvalidTransition, Loading, Idle, Submitting, Failed, DialogClosed, DialogOpen,
)
from .forms import GameForm, AchievementForm, extract_entity_id
from .games_view import GamesView
from .achievements_view import AchievementsView
from .chat_view import ChatView

__all__ = [
    'InvalidTransition',
    'Loading',
    'Idle',
    'Submitting',
    'Failed',
    'DialogClosed',
    'DialogOpen',
    'GameForm',
    'AchievementForm',
    'extract_entity_id',
    'GamesView',
    'AchievementsView',
    'ChatView',
]
