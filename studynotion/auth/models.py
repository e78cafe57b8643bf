"""Database model for users.

``courses`` and ``course_progress`` are CQL sets appended to on every
enrollment. They mirror ``courses.students_enrolled`` and are kept in step
by writing both sides, not by a transaction.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from studynotion.auth.permissions import UserRole


if TYPE_CHECKING:
    from cassandra.cluster import Row


USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    email TEXT,
    account_type TEXT,
    courses SET<UUID>,
    course_progress SET<UUID>,
    created_at TIMESTAMP
)
"""

USER_EMAIL_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS users_email_idx ON {keyspace}.users (email)
"""

AUTH_TABLES_CQL = [
    USER_TABLE_CQL,
    USER_EMAIL_INDEX_CQL,
]


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


@dataclass
class User:
    """Platform user.

    Attributes:
        id: Unique identifier
        first_name: Given name
        last_name: Family name
        email: Address enrollment and payment emails are sent to
        account_type: Role (student, instructor, admin)
        courses: IDs of courses the user is enrolled in
        course_progress: IDs of the user's progress records
        created_at: Account creation timestamp
    """

    email: str
    first_name: str = ""
    last_name: str = ""
    account_type: str = UserRole.STUDENT.value
    courses: set[UUID] = field(default_factory=set)
    course_progress: set[UUID] = field(default_factory=set)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_row(cls, row: "Row") -> "User":
        """Create instance from Cassandra row."""
        return cls(
            id=row.id,
            email=row.email or "",
            first_name=row.first_name or "",
            last_name=row.last_name or "",
            account_type=row.account_type or UserRole.STUDENT.value,
            courses=set(row.courses or ()),
            course_progress=set(row.course_progress or ()),
            created_at=ensure_utc_aware(row.created_at) or datetime.now(UTC),
        )
