"""Database model for courses.

Only the columns the enrollment flow reads or writes are modelled here.
``students_enrolled`` is a CQL set so enrolling is a single
``SET students_enrolled = students_enrolled + ?`` append.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4


if TYPE_CHECKING:
    from cassandra.cluster import Row


COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    course_name TEXT,
    course_description TEXT,
    thumbnail TEXT,
    price DECIMAL,
    instructor_id UUID,
    students_enrolled SET<UUID>,
    created_at TIMESTAMP
)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
]


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


@dataclass
class Course:
    """A purchasable course."""

    course_name: str
    price: Decimal = Decimal("0")
    course_description: str = ""
    thumbnail: str | None = None
    instructor_id: UUID | None = None
    students_enrolled: set[UUID] = field(default_factory=set)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_row(cls, row: "Row") -> "Course":
        """Create instance from Cassandra row."""
        return cls(
            id=row.id,
            course_name=row.course_name or "",
            course_description=row.course_description or "",
            thumbnail=row.thumbnail,
            price=row.price if row.price is not None else Decimal("0"),
            instructor_id=row.instructor_id,
            # Empty CQL collections come back as None
            students_enrolled=set(row.students_enrolled or ()),
            created_at=ensure_utc_aware(row.created_at) or datetime.now(UTC),
        )

    def has_student(self, user_id: UUID) -> bool:
        """Check whether the user is already enrolled in this course."""
        return user_id in self.students_enrolled
