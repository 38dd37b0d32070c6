import smtplib
import logging
from typing import List, Optional
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class EmailClient:
    """SMTP email client. One attempt per message; failures are logged."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: Optional[str],
        password: Optional[str],
        use_ssl: bool = False,
        timeout: int = 10
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout

    @contextmanager
    def _connection(self):
        """Context-managed SMTP connection."""
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(
                    self.smtp_host, self.smtp_port, timeout=self.timeout)
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning(f"Error closing SMTP connection: {e}")

    def _build_message(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject

        msg.attach(MIMEText(text_body or "", "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))
        return msg

    def send_email(
        self,
        sender: str,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None
    ) -> bool:
        msg = self._build_message(
            sender, recipients, subject, text_body, html_body)

        try:
            with self._connection() as server:
                server.sendmail(sender, recipients, msg.as_string())
            logger.info(f"Email sent to {', '.join(recipients)}")
            return True
        except smtplib.SMTPAuthenticationError:
            logger.error(
                "SMTP authentication failed, check username/password.")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {', '.join(recipients)} failed: {e}")
        return False
