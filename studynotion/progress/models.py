"""Database model for course progress.

One record is created per (user, course) enrollment. Lesson completion is
tracked later by appending video IDs to ``completed_videos``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4


if TYPE_CHECKING:
    from cassandra.cluster import Row


COURSE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_progress (
    id UUID PRIMARY KEY,
    user_id UUID,
    course_id UUID,
    completed_videos SET<UUID>,
    created_at TIMESTAMP
)
"""

PROGRESS_TABLES_CQL = [
    COURSE_PROGRESS_TABLE_CQL,
]


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


@dataclass
class CourseProgress:
    """Progress of one user through one course."""

    user_id: UUID
    course_id: UUID
    id: UUID = field(default_factory=uuid4)
    completed_videos: set[UUID] = field(default_factory=set)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_row(cls, row: "Row") -> "CourseProgress":
        """Create instance from Cassandra row."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            course_id=row.course_id,
            completed_videos=set(row.completed_videos or ()),
            created_at=ensure_utc_aware(row.created_at) or datetime.now(UTC),
        )
