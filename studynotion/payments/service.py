"""Payment and enrollment service.

No payment gateway is involved: "capturing" a payment validates the cart and
enrolls the student straight away (dummy transaction).

Enrollment writes the course, the user and a progress record one after the
other for each course. There is no transaction around them, so a failure
half way through leaves earlier courses enrolled and their emails sent.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from studynotion.auth.service import UserNotFoundError
from studynotion.config.settings import Settings, get_settings
from studynotion.core.logging import get_logger
from studynotion.courses.service import CourseNotFoundError


if TYPE_CHECKING:
    from studynotion.auth.models import User
    from studynotion.auth.service import UserService
    from studynotion.courses.models import Course
    from studynotion.courses.service import CourseService
    from studynotion.email.service import EmailService
    from studynotion.progress.service import ProgressService


logger = get_logger(__name__)


# ==============================================================================
# Exceptions
# ==============================================================================


class PaymentError(Exception):
    """Base payment error."""

    def __init__(self, message: str, code: str = "payment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidPaymentRequestError(PaymentError):
    """Required request fields are missing or empty."""

    def __init__(self, message: str, code: str = "invalid_request"):
        super().__init__(message, code)


class AlreadyEnrolledError(PaymentError):
    """Student already owns one of the requested courses."""

    def __init__(self, message: str = "Student is already enrolled"):
        super().__init__(message, "already_enrolled")


class EnrollmentError(PaymentError):
    """Enrollment loop aborted; carries the underlying message."""

    def __init__(self, message: str):
        super().__init__(message, "enrollment_failed")


class EmailDeliveryError(PaymentError):
    """Notification email could not be sent."""

    def __init__(self, message: str = "Could not send email"):
        super().__init__(message, "email_failed")


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


@dataclass
class EnrollmentResult:
    """Courses a user was enrolled in by one call."""

    user_id: UUID
    course_ids: list[UUID] = field(default_factory=list)
    progress_ids: list[UUID] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.course_ids)


# ==============================================================================
# Payment Service
# ==============================================================================


class PaymentService:
    """Capture (dummy) payments and enroll students in courses."""

    def __init__(
        self,
        course_service: "CourseService",
        user_service: "UserService",
        progress_service: "ProgressService",
        email_service: "EmailService | None" = None,
        settings: Settings | None = None,
    ):
        self.course_service = course_service
        self.user_service = user_service
        self.progress_service = progress_service
        self.email_service = email_service
        self.settings = settings or get_settings()

    async def _load_purchasable_courses(
        self,
        course_ids: list[UUID],
        user_id: UUID,
    ) -> list["Course"]:
        """Fetch every course and check the user does not own it yet.

        Raises:
            CourseNotFoundError: A course ID has no record
            AlreadyEnrolledError: The user is in a course's enrolled students
            PaymentError: The data store failed
        """
        courses = []
        for course_id in course_ids:
            try:
                course = await self.course_service.get_course(course_id)
            except Exception as e:
                logger.exception(
                    "course_lookup_failed",
                    course_id=str(course_id),
                    error=str(e),
                )
                raise PaymentError(str(e)) from e

            if course is None:
                logger.info("payment_course_not_found", course_id=str(course_id))
                raise CourseNotFoundError

            if course.has_student(user_id):
                logger.info(
                    "payment_student_already_enrolled",
                    course_id=str(course_id),
                    user_id=str(user_id),
                )
                raise AlreadyEnrolledError

            courses.append(course)

        return courses

    async def capture_payment(
        self,
        course_ids: list[UUID] | None,
        user_id: UUID,
    ) -> Decimal:
        """Validate the cart, total it and enroll the user.

        Returns:
            Total price of the courses. It is not charged anywhere.

        Raises:
            InvalidPaymentRequestError: No courses given (code "missing_courses")
            CourseNotFoundError: A course does not exist
            AlreadyEnrolledError: User already owns a course
            PaymentError: Data store failure while checking the cart
            EnrollmentError: Enrollment aborted
        """
        if not course_ids:
            raise InvalidPaymentRequestError(
                "Please provide valid course IDs", code="missing_courses"
            )

        courses = await self._load_purchasable_courses(course_ids, user_id)
        total_amount = sum((course.price for course in courses), Decimal("0"))

        logger.info(
            "payment_captured",
            user_id=str(user_id),
            course_count=len(courses),
            total_amount=str(total_amount),
        )

        await self.enroll_user_in_courses(course_ids, user_id)

        return total_amount

    async def enroll_user_in_courses(
        self,
        course_ids: list[UUID] | None,
        user_id: UUID | None,
    ) -> EnrollmentResult:
        """Enroll a user in each course, in order.

        For each course: record the student on the course, the course on the
        user, create a progress record and link it to the user, then email
        the user. Duplicate enrollments are not checked here.

        Raises:
            InvalidPaymentRequestError: Courses or user missing
            EnrollmentError: Any step failed; remaining courses are skipped
        """
        if not course_ids or not user_id:
            raise InvalidPaymentRequestError("Please provide valid courses and user ID")

        result = EnrollmentResult(user_id=user_id)

        for course_id in course_ids:
            try:
                course = await self.course_service.add_enrolled_student(
                    course_id, user_id
                )
                await self.user_service.add_course(user_id, course_id)

                progress = await self.progress_service.create_course_progress(
                    user_id, course_id
                )
                await self.user_service.add_course_progress(user_id, progress.id)

                user = await self.user_service.get_user(user_id)
                if user is None:
                    raise UserNotFoundError

                await self._send_enrollment_email(user, course)
            except Exception as e:
                logger.exception(
                    "course_enrollment_failed",
                    course_id=str(course_id),
                    user_id=str(user_id),
                    enrolled_so_far=result.count,
                    error=_error_message(e),
                )
                raise EnrollmentError(_error_message(e)) from e

            result.course_ids.append(course_id)
            result.progress_ids.append(progress.id)

            logger.info(
                "user_enrolled_in_course",
                course_id=str(course_id),
                user_id=str(user_id),
                progress_id=str(progress.id),
            )

        return result

    async def _send_enrollment_email(self, user: "User", course: "Course") -> None:
        if self.email_service is None:
            logger.warning(
                "enrollment_email_skipped",
                course_id=str(course.id),
                reason="email service not configured",
            )
            return

        response = await self.email_service.send_course_enrollment_email(
            to=user.email,
            user_name=user.full_name,
            course_name=course.course_name,
            course_description=course.course_description,
            thumbnail=course.thumbnail,
        )
        if not response.success:
            raise EmailDeliveryError(response.error or "Could not send email")

    async def verify_signature(
        self,
        course_ids: list[UUID] | None,
        user_id: UUID | None,
    ) -> EnrollmentResult:
        """Accept a (dummy) payment signature and enroll the user.

        No signature is checked. The cart is re-validated so that repeated
        calls cannot enroll the user in a course twice.

        Raises:
            InvalidPaymentRequestError: Courses or user missing
            CourseNotFoundError: A course does not exist
            AlreadyEnrolledError: User already owns a course
            EnrollmentError: Enrollment aborted
        """
        if not course_ids or not user_id:
            raise InvalidPaymentRequestError("Please provide valid courses and user ID")

        await self._load_purchasable_courses(course_ids, user_id)

        result = await self.enroll_user_in_courses(course_ids, user_id)

        logger.info(
            "payment_signature_verified",
            user_id=str(user_id),
            course_count=result.count,
        )

        return result

    async def send_payment_success_email(
        self,
        amount: Decimal | None,
        payment_id: str | None,
        order_id: str | None,
        user_id: UUID,
    ) -> Decimal:
        """Email the user a payment confirmation.

        Args:
            amount: Amount in currency subunits (paise)
            payment_id: Gateway payment ID
            order_id: Gateway order ID
            user_id: Recipient

        Returns:
            The amount in currency units, as shown in the email.

        Raises:
            InvalidPaymentRequestError: Amount or payment ID missing
            UserNotFoundError: User does not exist
            PaymentError: Data store failure
            EmailDeliveryError: Email could not be sent
        """
        if not amount or not payment_id:
            raise InvalidPaymentRequestError("Please provide valid payment details")

        try:
            user = await self.user_service.get_user(user_id)
        except Exception as e:
            logger.exception("user_lookup_failed", user_id=str(user_id), error=str(e))
            raise PaymentError(str(e)) from e

        if user is None:
            raise UserNotFoundError

        amount_in_units = Decimal(amount) / self.settings.payment_currency_subunits

        if self.email_service is None:
            raise EmailDeliveryError("Email service not configured")

        response = await self.email_service.send_payment_success_email(
            to=user.email,
            user_name=user.full_name,
            amount=amount_in_units,
            payment_id=payment_id,
            order_id=order_id,
            brand_name=self.settings.brand_name,
        )
        if not response.success:
            logger.error(
                "payment_success_email_failed",
                user_id=str(user_id),
                payment_id=payment_id,
                error=response.error,
            )
            raise EmailDeliveryError(response.error or "Could not send email")

        logger.info(
            "payment_success_email_sent",
            user_id=str(user_id),
            payment_id=payment_id,
            amount=str(amount_in_units),
        )

        return amount_in_units
