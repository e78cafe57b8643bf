# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Course persistence used by the enrollment flow."""

from typing import TYPE_CHECKING
from uuid import UUID

from studynotion.core.logging import get_logger

from .models import Course


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


class CourseNotFoundError(Exception):
    """Course does not exist."""

    def __init__(self, message: str = "Could not find the course"):
        self.message = message
        self.code = "course_not_found"
        super().__init__(message)


class CourseService:
    """Read courses and record enrolled students."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)

        self._add_student = self.session.prepare(f"""
            UPDATE {self.keyspace}.courses
            SET students_enrolled = students_enrolled + ?
            WHERE id = ?
        """)

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def add_enrolled_student(self, course_id: UUID, user_id: UUID) -> Course:
        """Append a user to the course's enrolled students.

        The course is read first because a CQL UPDATE on a missing key would
        silently create a row.

        Returns:
            The course as stored after the update.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        course = await self.get_course(course_id)
        if course is None:
            raise CourseNotFoundError

        await self.session.aexecute(self._add_student, [{user_id}, course_id])
        course.students_enrolled.add(user_id)

        logger.debug(
            "course_student_added",
            course_id=str(course_id),
            user_id=str(user_id),
        )

        return course
