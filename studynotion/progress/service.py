# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Course progress persistence."""

from typing import TYPE_CHECKING
from uuid import UUID

from studynotion.core.logging import get_logger

from .models import CourseProgress


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


class ProgressService:
    """Service for course progress records."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_progress
            (id, user_id, course_id, completed_videos, created_at)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.course_progress WHERE id = ?
        """)

    async def create_course_progress(
        self,
        user_id: UUID,
        course_id: UUID,
    ) -> CourseProgress:
        """Create an empty progress record for a new enrollment.

        No existing record is looked up; callers decide whether an
        enrollment is a duplicate.
        """
        progress = CourseProgress(user_id=user_id, course_id=course_id)

        await self.session.aexecute(
            self._insert_progress,
            [
                progress.id,
                progress.user_id,
                progress.course_id,
                progress.completed_videos,
                progress.created_at,
            ],
        )

        logger.debug(
            "course_progress_created",
            progress_id=str(progress.id),
            user_id=str(user_id),
            course_id=str(course_id),
        )

        return progress

    async def get_course_progress(self, progress_id: UUID) -> CourseProgress | None:
        """Get progress record by ID."""
        result = await self.session.aexecute(self._get_progress, [progress_id])
        row = result.one()
        return CourseProgress.from_row(row) if row else None
