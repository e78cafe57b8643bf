"""Authentication and user records.

Provides:
- Bearer JWT validation and role checks for routes
- User model and persistence for enrollment bookkeeping
"""

from .models import AUTH_TABLES_CQL, User
from .permissions import UserRole
from .schemas import AuthenticatedUser
from .service import UserNotFoundError, UserService


__all__ = [
    "AUTH_TABLES_CQL",
    "AuthenticatedUser",
    "User",
    "UserNotFoundError",
    "UserRole",
    "UserService",
]
