"""Tests for payment endpoints (POST /v1/payments/*)."""

from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from studynotion.auth.service import UserNotFoundError
from studynotion.courses.service import CourseNotFoundError
from studynotion.payments.service import (
    AlreadyEnrolledError,
    EmailDeliveryError,
    EnrollmentError,
    InvalidPaymentRequestError,
    PaymentError,
)


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestPaymentAuth:
    """Authentication and role checks on payment endpoints."""

    def test_missing_token(self, client_with_mock_service: TestClient) -> None:
        """Requests without a token are rejected."""
        response = client_with_mock_service.post(
            "/v1/payments/capturePayment", json={"courses": [str(uuid4())]}
        )

        assert response.status_code == 401
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Token is missing"

    def test_invalid_token(self, client_with_mock_service: TestClient) -> None:
        """A token that does not decode is rejected."""
        response = client_with_mock_service.post(
            "/v1/payments/verifyPayment",
            headers=_auth("not-a-jwt"),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Token is invalid"

    def test_instructor_forbidden(
        self,
        client_with_mock_service: TestClient,
        instructor_token: str,
        mock_payment_service,
    ) -> None:
        """Only students may buy courses."""
        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(instructor_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 403
        assert response.json()["message"] == "This is a protected route"
        mock_payment_service.capture_payment.assert_not_called()


class TestCapturePaymentEndpoint:
    """Tests for POST /v1/payments/capturePayment."""

    def test_success(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        student,
        mock_payment_service,
    ) -> None:
        """A successful capture returns the redirect target."""
        course_ids = [uuid4(), uuid4()]

        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(student_token),
            json={"courses": [str(c) for c in course_ids]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Payment successful (dummy transaction)",
            "redirectTo": "/enrollment-success",
        }
        mock_payment_service.capture_payment.assert_awaited_once_with(
            course_ids, student.id
        )

    def test_missing_courses(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """An empty cart is reported with status 200."""
        mock_payment_service.capture_payment.side_effect = InvalidPaymentRequestError(
            "Please provide valid course IDs", code="missing_courses"
        )

        response = client_with_mock_service.post(
            "/v1/payments/capturePayment", headers=_auth(student_token), json={}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "message": "Please provide valid course IDs",
        }

    def test_course_not_found(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Unknown courses are reported with status 200."""
        mock_payment_service.capture_payment.side_effect = CourseNotFoundError()

        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(student_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Could not find the course"
        assert response.json()["success"] is False

    def test_already_enrolled(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Owning a course is reported with status 200."""
        mock_payment_service.capture_payment.side_effect = AlreadyEnrolledError()

        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(student_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "message": "Student is already enrolled",
        }

    def test_store_failure(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Data store errors are returned with status 500 and their message."""
        mock_payment_service.capture_payment.side_effect = PaymentError(
            "Cassandra down"
        )

        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(student_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Cassandra down"}

    def test_invalid_course_id(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
    ) -> None:
        """Malformed IDs fail request validation."""
        response = client_with_mock_service.post(
            "/v1/payments/capturePayment",
            headers=_auth(student_token),
            json={"courses": ["not-a-uuid"]},
        )

        assert response.status_code == 422
        assert response.json()["success"] is False


class TestVerifyPaymentEndpoint:
    """Tests for POST /v1/payments/verifyPayment."""

    def test_success(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
    ) -> None:
        """Verification enrolls and returns the redirect target."""
        response = client_with_mock_service.post(
            "/v1/payments/verifyPayment",
            headers=_auth(student_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Payment signature verified (dummy transaction) and user enrolled",
            "redirectTo": "/enrollment-success",
        }

    def test_missing_courses_is_400(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Missing courses are a bad request."""
        mock_payment_service.verify_signature.side_effect = InvalidPaymentRequestError(
            "Please provide valid courses and user ID"
        )

        response = client_with_mock_service.post(
            "/v1/payments/verifyPayment", headers=_auth(student_token), json={}
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Please provide valid courses and user ID",
        }

    def test_enrollment_failure_is_500(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """An aborted enrollment surfaces the underlying message."""
        mock_payment_service.verify_signature.side_effect = EnrollmentError(
            "Could not find the course"
        )

        response = client_with_mock_service.post(
            "/v1/payments/verifyPayment",
            headers=_auth(student_token),
            json={"courses": [str(uuid4())]},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Could not find the course"


class TestSendPaymentSuccessEmailEndpoint:
    """Tests for POST /v1/payments/sendPaymentSuccessEmail."""

    def test_success(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        student,
        mock_payment_service,
    ) -> None:
        """camelCase fields are mapped to the service call."""
        response = client_with_mock_service.post(
            "/v1/payments/sendPaymentSuccessEmail",
            headers=_auth(student_token),
            json={"amount": 49900, "paymentId": "pay_123", "orderId": "order_456"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Payment success email sent",
        }
        mock_payment_service.send_payment_success_email.assert_awaited_once_with(
            amount=Decimal("49900"),
            payment_id="pay_123",
            order_id="order_456",
            user_id=student.id,
        )

    def test_missing_details_is_400(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Missing amount or payment ID is a bad request."""
        mock_payment_service.send_payment_success_email.side_effect = (
            InvalidPaymentRequestError("Please provide valid payment details")
        )

        response = client_with_mock_service.post(
            "/v1/payments/sendPaymentSuccessEmail",
            headers=_auth(student_token),
            json={"orderId": "order_456"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide valid payment details"

    def test_user_not_found_is_404(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """A deleted user is reported as not found."""
        mock_payment_service.send_payment_success_email.side_effect = (
            UserNotFoundError()
        )

        response = client_with_mock_service.post(
            "/v1/payments/sendPaymentSuccessEmail",
            headers=_auth(student_token),
            json={"amount": 100, "paymentId": "pay_1"},
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}

    def test_email_failure_is_500(
        self,
        client_with_mock_service: TestClient,
        student_token: str,
        mock_payment_service,
    ) -> None:
        """Email delivery problems are server errors."""
        mock_payment_service.send_payment_success_email.side_effect = (
            EmailDeliveryError("Gmail API error: quota")
        )

        response = client_with_mock_service.post(
            "/v1/payments/sendPaymentSuccessEmail",
            headers=_auth(student_token),
            json={"amount": 100, "paymentId": "pay_1"},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Gmail API error: quota"


class TestPaymentEmailWithStoredAddress:
    """sendPaymentSuccessEmail through the real EmailService."""

    @pytest.fixture
    def client_with_real_email(
        self,
        mock_course_service,
        mock_user_service,
        mock_progress_service,
    ):
        from studynotion.config.settings import Settings
        from studynotion.email.service import EmailService
        from studynotion.main import app, get_payment_service
        from studynotion.payments.dependencies import set_payment_service_getter
        from studynotion.payments.service import PaymentService

        with patch.object(EmailService, "_get_service"):
            email_service = EmailService(
                credentials_path="/fake/path.json",
                sender_address="noreply@studynotion.com",
            )
        service = PaymentService(
            course_service=mock_course_service,
            user_service=mock_user_service,
            progress_service=mock_progress_service,
            email_service=email_service,
            settings=Settings(),
        )

        set_payment_service_getter(lambda: service)
        yield TestClient(app)
        set_payment_service_getter(get_payment_service)

    def test_invalid_stored_email_keeps_envelope(
        self,
        client_with_real_email: TestClient,
        student_token: str,
        student,
    ) -> None:
        """A malformed user email is a 500 with the send error as message."""
        student.email = "not-an-email"

        response = client_with_real_email.post(
            "/v1/payments/sendPaymentSuccessEmail",
            headers=_auth(student_token),
            json={"amount": 49900, "paymentId": "pay_123", "orderId": "order_456"},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["message"].startswith("Invalid email request")
        assert "error" not in data
