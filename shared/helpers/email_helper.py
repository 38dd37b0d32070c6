import logging
import re
from typing import List

from ..utils.email_client import EmailClient
from ..core.config import settings

logger = logging.getLogger(__name__)

TEMPLATES = {
    "account_created": (
        "Your parking account is ready",
        "<p>Hello {first_name},</p>"
        "<p>An administrator created a parking reservation account for you.</p>"
        "<p>Username: <b>{username}</b><br>Temporary password: <b>{password}</b></p>"
        "<p>Please change your password after the first login.</p>"
    ),
    "password_reset": (
        "Your parking account password was reset",
        "<p>Hello {first_name},</p>"
        "<p>Your new temporary password is <b>{password}</b>.</p>"
    ),
    "reservation_status": (
        "Parking reservation {status}",
        "<p>Hello {first_name},</p>"
        "<p>Your reservation for {space_id} from {start_date} to {end_date} "
        "({shift_type}) is now <b>{status}</b>.</p><p>{reason}</p>"
    ),
}


class EmailHelper:
    """Sends the templated notification mails.

    Mail is best-effort: a missing SMTP configuration or a delivery failure
    is logged and reported as ``False``, never raised to the request.
    """

    def __init__(self):
        self.mailer = None
        if settings.SMTP_HOST:
            self.mailer = EmailClient(
                smtp_host=settings.SMTP_HOST,
                smtp_port=settings.SMTP_PORT,
                username=settings.SMTP_USERNAME,
                password=settings.SMTP_PASSWORD,
                use_ssl=settings.SMTP_USE_SSL,
            )

    def send_email(
        self,
        template_code: str,
        recipients: List[str],
        context: dict
    ) -> bool:
        if self.mailer is None:
            logger.info(
                f"SMTP not configured, skipping '{template_code}' mail to {recipients}")
            return False

        try:
            subject_template, html_template = TEMPLATES[template_code]
            subject = subject_template.format(**context)
            html_body = html_template.format(**context)
        except KeyError as e:
            logger.error(
                f"Cannot render email template '{template_code}': missing {e}")
            return False

        return self.mailer.send_email(
            sender=settings.EMAIL_SENDER,
            recipients=recipients,
            subject=subject,
            text_body=self._strip_html_tags(html_body),
            html_body=html_body,
        )

    @staticmethod
    def _strip_html_tags(html: str) -> str:
        """Basic HTML to plain text converter."""
        return re.sub("<.*?>", "", html or "")
