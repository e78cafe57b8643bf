"""Shared test fixtures."""

import os
import tempfile
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest


# Settings are cached on first use, so the environment must be set before
# any studynotion module is imported.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="studynotion-logs-"))


# ==============================================================================
# Domain objects
# ==============================================================================


@pytest.fixture
def course_factory():
    """Factory for Course objects."""
    from studynotion.courses.models import Course

    def _create_course(
        price: str = "499.00",
        name: str | None = None,
        students: set | None = None,
    ) -> Course:
        course_id = uuid4()
        return Course(
            id=course_id,
            course_name=name or f"Course {course_id.hex[:6]}",
            course_description="Learn things",
            thumbnail="https://cdn.studynotion.com/thumb.png",
            price=Decimal(price),
            students_enrolled=students or set(),
        )

    return _create_course


@pytest.fixture
def student():
    """A student user record."""
    from studynotion.auth.models import User

    return User(
        id=uuid4(),
        email="student@test.com",
        first_name="Asha",
        last_name="Rao",
    )


# ==============================================================================
# Mocked services
# ==============================================================================


@pytest.fixture
def mock_course_service():
    """CourseService double backed by an in-memory dict of courses."""
    service = MagicMock()
    service.courses = {}

    async def get_course(course_id):
        return service.courses.get(course_id)

    async def add_enrolled_student(course_id, user_id):
        from studynotion.courses.service import CourseNotFoundError

        course = service.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        course.students_enrolled.add(user_id)
        return course

    service.get_course = AsyncMock(side_effect=get_course)
    service.add_enrolled_student = AsyncMock(side_effect=add_enrolled_student)
    return service


@pytest.fixture
def mock_user_service(student):
    """UserService double returning the student fixture."""
    service = MagicMock()
    service.get_user = AsyncMock(return_value=student)
    service.add_course = AsyncMock(return_value=None)
    service.add_course_progress = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_progress_service():
    """ProgressService double creating real CourseProgress objects."""
    from studynotion.progress.models import CourseProgress

    service = MagicMock()

    async def create_course_progress(user_id, course_id):
        return CourseProgress(user_id=user_id, course_id=course_id)

    service.create_course_progress = AsyncMock(side_effect=create_course_progress)
    return service


@pytest.fixture
def mock_email_service():
    """EmailService double whose sends always succeed."""
    from studynotion.email.schemas import SendEmailResponse

    service = MagicMock()
    service.send_course_enrollment_email = AsyncMock(
        return_value=SendEmailResponse(success=True, message_id="msg123")
    )
    service.send_payment_success_email = AsyncMock(
        return_value=SendEmailResponse(success=True, message_id="msg456")
    )
    return service


@pytest.fixture
def payment_service(
    mock_course_service,
    mock_user_service,
    mock_progress_service,
    mock_email_service,
):
    """PaymentService wired to the mocked collaborators."""
    from studynotion.config.settings import Settings
    from studynotion.payments.service import PaymentService

    return PaymentService(
        course_service=mock_course_service,
        user_service=mock_user_service,
        progress_service=mock_progress_service,
        email_service=mock_email_service,
        settings=Settings(),
    )


@pytest.fixture
def mock_session():
    """Cassandra session double with prepare() and aexecute()."""
    session = MagicMock()
    session.prepare = MagicMock(side_effect=lambda cql: MagicMock(query=cql))
    result = MagicMock()
    result.one.return_value = None
    session.aexecute = AsyncMock(return_value=result)
    return session


# ==============================================================================
# Tokens and clients
# ==============================================================================


def _token(role: str, user_id=None) -> str:
    from studynotion.auth.security import create_access_token

    return create_access_token(
        {
            "sub": str(user_id or uuid4()),
            "email": f"{role}@test.com",
            "role": role,
        }
    )


@pytest.fixture
def student_token(student) -> str:
    """JWT for the student fixture."""
    return _token("student", student.id)


@pytest.fixture
def instructor_token() -> str:
    """JWT for an instructor."""
    return _token("instructor")


@pytest.fixture
def client():
    """Test client without any service overrides."""
    from fastapi.testclient import TestClient

    from studynotion.main import app

    return TestClient(app)


@pytest.fixture
def mock_payment_service():
    """PaymentService double for endpoint tests."""
    service = MagicMock()
    service.capture_payment = AsyncMock(return_value=Decimal("998.00"))
    service.verify_signature = AsyncMock(return_value=MagicMock(count=1))
    service.send_payment_success_email = AsyncMock(return_value=Decimal("499.00"))
    return service


@pytest.fixture
def client_with_mock_service(mock_payment_service):
    """Test client with the payment service getter overridden."""
    from fastapi.testclient import TestClient

    from studynotion.main import app, get_payment_service
    from studynotion.payments.dependencies import set_payment_service_getter

    set_payment_service_getter(lambda: mock_payment_service)
    yield TestClient(app)
    set_payment_service_getter(get_payment_service)
