from .db_session import DbSessionMiddleware
from .user_context import UserContextMiddleware

__all__ = [
    "DbSessionMiddleware",
    "UserContextMiddleware",
]
