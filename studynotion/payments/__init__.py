"""Payments module.

Dummy-transaction checkout: cart validation, enrollment in the purchased
courses and the payment confirmation email.
"""

from .router import router
from .service import (
    AlreadyEnrolledError,
    EmailDeliveryError,
    EnrollmentError,
    EnrollmentResult,
    InvalidPaymentRequestError,
    PaymentError,
    PaymentService,
)


__all__ = [
    "AlreadyEnrolledError",
    "EmailDeliveryError",
    "EnrollmentError",
    "EnrollmentResult",
    "InvalidPaymentRequestError",
    "PaymentError",
    "PaymentService",
    "router",
]
