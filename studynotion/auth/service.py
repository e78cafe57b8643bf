# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""User persistence used by the enrollment flow."""

from typing import TYPE_CHECKING
from uuid import UUID

from studynotion.core.logging import get_logger

from .models import User


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


class UserNotFoundError(Exception):
    """User does not exist."""

    def __init__(self, message: str = "User not found"):
        self.message = message
        self.code = "user_not_found"
        super().__init__(message)


class UserService:
    """Read users and append to their enrollment sets."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_user = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.users WHERE id = ?
        """)

        self._add_course = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET courses = courses + ?
            WHERE id = ?
        """)

        self._add_course_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET course_progress = course_progress + ?
            WHERE id = ?
        """)

    async def get_user(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        result = await self.session.aexecute(self._get_user, [user_id])
        row = result.one()
        return User.from_row(row) if row else None

    async def add_course(self, user_id: UUID, course_id: UUID) -> None:
        """Append a course to the user's enrolled courses."""
        await self.session.aexecute(self._add_course, [{course_id}, user_id])

    async def add_course_progress(self, user_id: UUID, progress_id: UUID) -> None:
        """Link a progress record to the user."""
        await self.session.aexecute(
            self._add_course_progress, [{progress_id}, user_id]
        )
