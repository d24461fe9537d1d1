"""Repository package: expose all concrete repositories from one import."""
from .token_repository import TokenRepository

__all__ = [
    'TokenRepository',
]
