"""Payment API endpoints.

Provides routes for:
- Capturing a (dummy) payment for a cart of courses
- Verifying the payment and enrolling the student
- Sending the payment confirmation email

Every response uses the ``{success, message, redirectTo?}`` envelope.
"""

from fastapi import APIRouter, status
from fastapi.responses import ORJSONResponse

from studynotion.auth.dependencies import StudentUser
from studynotion.auth.service import UserNotFoundError
from studynotion.config.settings import get_settings
from studynotion.core.logging import get_logger
from studynotion.courses.service import CourseNotFoundError

from .dependencies import PaymentServiceDep, payment_error_status
from .schemas import (
    CapturePaymentRequest,
    PaymentResponse,
    PaymentSuccessEmailRequest,
    VerifyPaymentRequest,
)
from .service import PaymentError


logger = get_logger(__name__)

router = APIRouter(prefix="/v1/payments", tags=["payments"])

PAYMENT_FAILURES = (PaymentError, CourseNotFoundError, UserNotFoundError)


def _respond(
    success: bool,
    message: str,
    status_code: int = status.HTTP_200_OK,
    redirect_to: str | None = None,
) -> ORJSONResponse:
    body = PaymentResponse(success=success, message=message, redirect_to=redirect_to)
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _failure(
    error: PaymentError | CourseNotFoundError | UserNotFoundError,
    action: str,
) -> ORJSONResponse:
    status_code = payment_error_status(error.code)
    log = (
        logger.error
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        else logger.info
    )
    log(f"{action}_failed", code=error.code, error=error.message)
    return _respond(False, error.message, status_code)


@router.post("/capturePayment", response_model=PaymentResponse)
async def capture_payment(
    data: CapturePaymentRequest,
    user: StudentUser,
    service: PaymentServiceDep,
) -> ORJSONResponse:
    """Validate the cart and enroll the student (no charge is made)."""
    try:
        await service.capture_payment(data.courses, user.id)
    except PAYMENT_FAILURES as e:
        return _failure(e, "capture_payment")

    return _respond(
        True,
        "Payment successful (dummy transaction)",
        redirect_to=get_settings().payment_success_redirect,
    )


@router.post("/verifyPayment", response_model=PaymentResponse)
async def verify_payment(
    data: VerifyPaymentRequest,
    user: StudentUser,
    service: PaymentServiceDep,
) -> ORJSONResponse:
    """Accept the payment signature and enroll the student."""
    try:
        await service.verify_signature(data.courses, user.id)
    except PAYMENT_FAILURES as e:
        return _failure(e, "verify_payment")

    return _respond(
        True,
        "Payment signature verified (dummy transaction) and user enrolled",
        redirect_to=get_settings().payment_success_redirect,
    )


@router.post("/sendPaymentSuccessEmail", response_model=PaymentResponse)
async def send_payment_success_email(
    data: PaymentSuccessEmailRequest,
    user: StudentUser,
    service: PaymentServiceDep,
) -> ORJSONResponse:
    """Email the student a confirmation of their payment."""
    try:
        await service.send_payment_success_email(
            amount=data.amount,
            payment_id=data.payment_id,
            order_id=data.order_id,
            user_id=user.id,
        )
    except PAYMENT_FAILURES as e:
        return _failure(e, "send_payment_success_email")

    return _respond(True, "Payment success email sent")
