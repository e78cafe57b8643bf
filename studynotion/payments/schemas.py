"""Pydantic schemas for payment endpoints.

Field names on the wire follow the frontend's camelCase (``paymentId``,
``redirectTo``); Python attributes stay snake_case.
"""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CapturePaymentRequest(BaseModel):
    """Courses the student wants to buy."""

    courses: list[UUID] | None = Field(None, description="Course IDs to purchase")


class VerifyPaymentRequest(BaseModel):
    """Courses to enroll in after the (dummy) payment is verified."""

    courses: list[UUID] | None = Field(None, description="Course IDs to enroll in")


class PaymentSuccessEmailRequest(BaseModel):
    """Payment details for the confirmation email."""

    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal | None = Field(
        None, description="Amount paid, in currency subunits (paise)"
    )
    payment_id: str | None = Field(None, alias="paymentId")
    order_id: str | None = Field(None, alias="orderId")


class PaymentResponse(BaseModel):
    """Envelope returned by every payment endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    redirect_to: str | None = Field(None, alias="redirectTo")
