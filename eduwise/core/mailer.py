"""Outgoing email over SMTP. Routes receive a Mailer through the get_mailer dependency."""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from eduwise.core.config import Settings, settings
from eduwise.core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, config: Settings) -> None:
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config.smtp_host)

    async def send(self, to_email: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        """
        Deliver one message. Returns False when SMTP is not configured;
        raises MailDeliveryError when the server rejects or cannot be reached.
        """
        if not self.enabled:
            logger.warning("SMTP_HOST not set; not sending %r to %s", subject, to_email)
            return False
        message = self._build_message(to_email, subject, text, html)
        await run_in_threadpool(self._deliver, to_email, message)
        logger.info("Sent %r to %s", subject, to_email)
        return True

    def _build_message(self, to_email: str, subject: str, text: str, html: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.config.mail_from
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(text, "plain"))
        if html:
            msg.attach(MIMEText(html, "html"))
        return msg

    def _deliver(self, to_email: str, message: MIMEMultipart) -> None:
        try:
            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=15) as server:
                if self.config.smtp_use_tls:
                    server.starttls()
                if self.config.smtp_username:
                    server.login(self.config.smtp_username, self.config.smtp_password or "")
                server.sendmail(self.config.mail_from, [to_email], message.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Could not deliver mail to {to_email}: {exc}") from exc


def get_mailer() -> Mailer:
    return Mailer(settings)
