"""Email templates for StudyNotion.

HTML templates following the StudyNotion visual identity:
- Accent yellow: #FFD60A
- Dark background: #000814
- Text: #333333
- Muted: #999999

Every ``render_*`` function returns ``(html, plain_text)``. Values coming
from users or course authors are HTML-escaped before being placed in the
HTML body.
"""

from datetime import datetime
from decimal import Decimal
from html import escape


# ==============================================================================
# Base Template
# ==============================================================================

BASE_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - StudyNotion</title>
</head>
<body style="margin: 0; padding: 0; background-color: #FFFFFF; font-family: Arial, sans-serif; font-size: 16px; line-height: 1.4; color: #333333;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
    <tr>
      <td align="center" style="padding: 20px;">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="max-width: 600px; text-align: center;">
          <tr>
            <td style="padding-bottom: 20px;">
              <h1 style="margin: 0; font-size: 26px; font-weight: 700; color: #000814;">
                Study<span style="color: #FFD60A;">Notion</span>
              </h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 0 10px;">
              {content}
            </td>
          </tr>
          <tr>
            <td style="padding-top: 24px; font-size: 14px; color: #999999;">
              If you have any questions or need assistance, please feel free to reach
              out to us at <a href="mailto:{support_email}">{support_email}</a>.
              We are here to help!<br>
              &copy; {year} StudyNotion
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""

SUPPORT_EMAIL = "info@studynotion.com"

DEFAULT_DASHBOARD_URL = "https://studynotion.com/dashboard/enrolled-courses"


def _wrap(title: str, content: str) -> str:
    return BASE_TEMPLATE.format(
        title=title,
        content=content,
        support_email=SUPPORT_EMAIL,
        year=datetime.now().year,
    )


# ==============================================================================
# Template: Course Enrollment
# ==============================================================================

COURSE_ENROLLMENT_CONTENT = """
<h2 style="margin: 0 0 20px; font-size: 20px; font-weight: bold;">
  Course Registration Confirmation
</h2>
{thumbnail_block}
<p style="margin: 0 0 16px; text-align: left;">Dear {user_name},</p>
<p style="margin: 0 0 16px; text-align: left;">
  You have successfully registered for the course <strong>"{course_name}"</strong>.
  We are excited to have you as a participant!
</p>
<p style="margin: 0 0 16px; text-align: left; color: #555555;">{course_description}</p>
<p style="margin: 0 0 16px; text-align: left;">
  Please log in to your learning dashboard to access the course materials and
  start your learning journey.
</p>
<a href="{dashboard_url}" style="display: inline-block; padding: 10px 20px; background-color: #FFD60A; color: #000000; text-decoration: none; border-radius: 5px; font-weight: bold;">
  Go to Dashboard
</a>
"""

THUMBNAIL_BLOCK = """
<img src="{thumbnail}" alt="{course_name}" width="560" style="max-width: 100%; border-radius: 8px; margin-bottom: 20px;">
"""


def render_course_enrollment(
    course_name: str,
    user_name: str,
    course_description: str = "",
    thumbnail: str | None = None,
    dashboard_url: str = DEFAULT_DASHBOARD_URL,
) -> tuple[str, str]:
    """Render the email sent after enrolling in a course.

    Args:
        course_name: Course title
        user_name: Student's full name
        course_description: Short course description (optional)
        thumbnail: Course thumbnail URL (optional)
        dashboard_url: Link for the call-to-action button

    Returns:
        Tuple of (html_content, plain_text_content)
    """
    thumbnail_block = ""
    if thumbnail:
        thumbnail_block = THUMBNAIL_BLOCK.format(
            thumbnail=escape(thumbnail),
            course_name=escape(course_name),
        )

    content = COURSE_ENROLLMENT_CONTENT.format(
        thumbnail_block=thumbnail_block,
        user_name=escape(user_name),
        course_name=escape(course_name),
        course_description=escape(course_description),
        dashboard_url=escape(dashboard_url),
    )
    html = _wrap("Course Registration Confirmation", content)

    plain_text = f"""
Course Registration Confirmation - StudyNotion

Dear {user_name},

You have successfully registered for the course "{course_name}".
We are excited to have you as a participant!

{course_description}

Go to your dashboard to start learning: {dashboard_url}
"""

    return html, plain_text.strip()


# ==============================================================================
# Template: Payment Success
# ==============================================================================

PAYMENT_SUCCESS_CONTENT = """
<h2 style="margin: 0 0 20px; font-size: 20px; font-weight: bold;">
  Course Payment Confirmation
</h2>
<p style="margin: 0 0 16px; text-align: left;">Dear {user_name},</p>
<p style="margin: 0 0 16px; text-align: left;">
  We have received a payment of <strong>{currency}{amount}</strong>.
</p>
<p style="margin: 0 0 8px; text-align: left;">Your Payment ID is <strong>{payment_id}</strong></p>
<p style="margin: 0 0 16px; text-align: left;">Your Order ID is <strong>{order_id}</strong></p>
"""


def format_amount(amount: Decimal) -> str:
    """Format a money amount with two decimal places."""
    return f"{amount:.2f}"


def render_payment_success(
    amount: Decimal,
    payment_id: str,
    order_id: str | None,
    user_name: str,
    currency: str = "₹",
) -> tuple[str, str]:
    """Render the payment confirmation email.

    Args:
        amount: Amount in currency units (already converted from subunits)
        payment_id: Gateway payment identifier
        order_id: Gateway order identifier (may be missing)
        user_name: Student's full name
        currency: Currency symbol shown before the amount

    Returns:
        Tuple of (html_content, plain_text_content)
    """
    formatted = format_amount(amount)
    order = order_id or "-"

    content = PAYMENT_SUCCESS_CONTENT.format(
        user_name=escape(user_name),
        currency=escape(currency),
        amount=formatted,
        payment_id=escape(payment_id),
        order_id=escape(order),
    )
    html = _wrap("Payment Confirmation", content)

    plain_text = f"""
Course Payment Confirmation - StudyNotion

Dear {user_name},

We have received a payment of {currency}{formatted}.

Payment ID: {payment_id}
Order ID: {order}
"""

    return html, plain_text.strip()
