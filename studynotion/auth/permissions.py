"""Account types used for access control.

StudyNotion roles are not hierarchical: payment endpoints are for students
only, instructors and admins manage courses elsewhere.
"""

from enum import Enum


class UserRole(str, Enum):
    """Account type stored on the user and carried in the access token."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


def parse_role(role: UserRole | str) -> UserRole | None:
    """Convert a role string to UserRole, None for unknown values."""
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role.lower())
    except ValueError:
        return None
