"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from .session import UserSession
from .user import User

__all__ = ["User", "UserSession"]
