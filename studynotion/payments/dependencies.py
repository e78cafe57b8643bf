"""FastAPI dependencies for payments.

Provides dependency injection for:
- Payment service
- Error to status code mapping
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, status

from .service import PaymentService


# Module-level reference to be overridden by main.py
_payment_service_getter: Callable[[], PaymentService] | None = None


def set_payment_service_getter(getter: Callable[[], PaymentService]) -> None:
    """Set the payment service getter function.

    Called by main.py during app initialization.
    """
    global _payment_service_getter  # noqa: PLW0603 - Required for DI pattern
    _payment_service_getter = getter


def get_payment_service() -> PaymentService:
    """Get PaymentService instance.

    Uses the getter function set by main.py at startup.
    """
    if _payment_service_getter is None:
        raise RuntimeError(
            "PaymentService not configured - call set_payment_service_getter first"
        )
    return _payment_service_getter()


PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]


# Cart problems are reported with 200 and success=false
PAYMENT_ERROR_STATUS = {
    "missing_courses": status.HTTP_200_OK,
    "course_not_found": status.HTTP_200_OK,
    "already_enrolled": status.HTTP_200_OK,
    "invalid_request": status.HTTP_400_BAD_REQUEST,
    "user_not_found": status.HTTP_404_NOT_FOUND,
}


def payment_error_status(code: str) -> int:
    """Status code for a payment error code (500 when unknown)."""
    return PAYMENT_ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
