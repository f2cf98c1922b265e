from .activity import UserActivity
from .auth import CsrfResponse, ProviderOut, ServerSession, SessionUser

__all__ = ["CsrfResponse", "ProviderOut", "ServerSession", "SessionUser", "UserActivity"]
