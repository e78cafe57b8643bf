"""Email service using Gmail API with Service Account.

Uses domain-wide delegation to send emails on behalf of a Google Workspace user.
The service account must have domain-wide delegation enabled in Google Admin
Console with scope https://www.googleapis.com/auth/gmail.send.
"""

import base64
from decimal import Decimal
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import TYPE_CHECKING

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pydantic import ValidationError

from studynotion.core.logging import get_logger

from .schemas import EmailRecipient, SendEmailRequest, SendEmailResponse
from .templates import render_course_enrollment, render_payment_success


if TYPE_CHECKING:
    from googleapiclient._apis.gmail.v1 import GmailResource


logger = get_logger(__name__)

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]


class EmailService:
    """Service for sending emails via Gmail API.

    Never raises on delivery problems: every failure is logged and reported
    through ``SendEmailResponse.success``.
    """

    def __init__(
        self,
        credentials_path: str,
        sender_address: str,
        sender_name: str = "StudyNotion",
    ):
        """Initialize Gmail API service.

        Args:
            credentials_path: Path to service account JSON file
            sender_address: Email address to send from (must be in Google Workspace)
            sender_name: Display name for sender
        """
        self.credentials_path = credentials_path
        self.sender_address = sender_address
        self.sender_name = sender_name
        self._service: GmailResource | None = None

        if not Path(credentials_path).exists():
            logger.warning(
                "email_credentials_not_found",
                path=credentials_path,
                message="Gmail API will not be available",
            )

    def _get_service(self) -> "GmailResource":
        """Get or lazily create the Gmail API resource.

        Raises:
            FileNotFoundError: If credentials file doesn't exist
        """
        if self._service is not None:
            return self._service

        credentials_file = Path(self.credentials_path)
        if not credentials_file.exists():
            msg = f"Credentials file not found: {self.credentials_path}"
            raise FileNotFoundError(msg)

        credentials = service_account.Credentials.from_service_account_file(
            str(credentials_file),
            scopes=GMAIL_SCOPES,
        )
        delegated_credentials = credentials.with_subject(self.sender_address)

        self._service = build(
            "gmail",
            "v1",
            credentials=delegated_credentials,
            cache_discovery=False,
        )

        logger.info("gmail_service_initialized", sender=self.sender_address)

        return self._service

    def _format_address(self, recipient: EmailRecipient) -> str:
        """Format address as "Name <email>" when a name is known."""
        if recipient.name:
            return f"{recipient.name} <{recipient.email}>"
        return recipient.email

    def _create_message(self, request: SendEmailRequest) -> dict:
        """Build the Gmail API payload.

        Returns:
            Dict with 'raw' key containing base64url encoded message
        """
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.sender_name} <{self.sender_address}>"
        message["To"] = ", ".join(self._format_address(r) for r in request.to)
        message["Subject"] = request.subject

        if request.reply_to:
            message["Reply-To"] = request.reply_to

        # Plain text first, then HTML (email clients prefer the last part)
        if request.body_text:
            message.attach(MIMEText(request.body_text, "plain", "utf-8"))
        message.attach(MIMEText(request.body_html, "html", "utf-8"))

        raw_message = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")
        return {"raw": raw_message}

    async def send_email(self, request: SendEmailRequest) -> SendEmailResponse:
        """Send an email via Gmail API."""
        recipients = [r.email for r in request.to]
        try:
            service = self._get_service()
            message = self._create_message(request)

            # "me" refers to the delegated sender
            result = (
                service.users().messages().send(userId="me", body=message).execute()
            )

            logger.info(
                "email_sent",
                message_id=result.get("id"),
                to=recipients,
                subject=request.subject[:50],
            )

            return SendEmailResponse(
                success=True,
                message_id=result.get("id"),
                thread_id=result.get("threadId"),
            )

        except HttpError as e:
            logger.exception(
                "email_send_failed",
                error=str(e),
                to=recipients,
                subject=request.subject[:50],
            )
            return SendEmailResponse(success=False, error=f"Gmail API error: {e}")

        except FileNotFoundError as e:
            logger.error("email_credentials_missing", error=str(e))
            return SendEmailResponse(
                success=False,
                error="Email service not configured: credentials file missing",
            )

        except Exception as e:
            logger.exception("email_send_unexpected_error", error=str(e))
            return SendEmailResponse(success=False, error=f"Unexpected error: {e!s}")

    async def send_simple_email(
        self,
        to: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
        to_name: str | None = None,
    ) -> SendEmailResponse:
        """Send an email to a single recipient.

        A malformed address (e.g. a bad email stored on the user) is reported
        as a failed send.
        """
        try:
            request = SendEmailRequest(
                to=[EmailRecipient(email=to, name=to_name)],
                subject=subject,
                body_html=body_html,
                body_text=body_text,
            )
        except ValidationError as e:
            reason = e.errors()[0].get("msg", "invalid value")
            logger.warning("email_request_invalid", to=to, reason=reason)
            return SendEmailResponse(
                success=False, error=f"Invalid email request: {reason}"
            )
        return await self.send_email(request)

    async def send_course_enrollment_email(
        self,
        to: str,
        user_name: str,
        course_name: str,
        course_description: str = "",
        thumbnail: str | None = None,
    ) -> SendEmailResponse:
        """Send the "you have enrolled" email for one course."""
        body_html, body_text = render_course_enrollment(
            course_name=course_name,
            user_name=user_name,
            course_description=course_description,
            thumbnail=thumbnail,
        )

        return await self.send_simple_email(
            to=to,
            subject=f"You have successfully enrolled for {course_name}",
            body_html=body_html,
            body_text=body_text,
            to_name=user_name,
        )

    async def send_payment_success_email(
        self,
        to: str,
        user_name: str,
        amount: Decimal,
        payment_id: str,
        order_id: str | None,
        brand_name: str = "Study Notion",
    ) -> SendEmailResponse:
        """Send the payment confirmation email.

        Args:
            to: Student email address
            user_name: Student's full name
            amount: Amount in currency units
            payment_id: Gateway payment identifier
            order_id: Gateway order identifier
            brand_name: Brand shown in the subject line
        """
        body_html, body_text = render_payment_success(
            amount=amount,
            payment_id=payment_id,
            order_id=order_id,
            user_name=user_name,
        )

        return await self.send_simple_email(
            to=to,
            subject=f"{brand_name} Payment successful",
            body_html=body_html,
            body_text=body_text,
            to_name=user_name,
        )
