"""Resource API package: one class per REST resource, one method per call."""
from .auth_api import AuthAPI
from .games_api import GamesAPI
from .achievements_api import AchievementsAPI
from .chatbot_api import ChatbotAPI

__all__ = [
    'AuthAPI',
    'GamesAPI',
    'AchievementsAPI',
    'ChatbotAPI',
]
