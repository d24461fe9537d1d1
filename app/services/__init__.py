"""Services package: expose all concrete services from one import."""
from .session_service import SessionStore, ANONYMOUS, AUTHENTICATING, AUTHENTICATED

__all__ = [
    'SessionStore',
    'ANONYMOUS',
    'AUTHENTICATING',
    'AUTHENTICATED',
]
