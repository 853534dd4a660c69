"""Outbound email over SMTP."""

import smtplib
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool
from structlog import get_logger

from auth_api.config import Settings, settings

logger = get_logger(__name__)


class Mailer:
    """Sends HTML email through the configured SMTP relay.

    ``send`` raises on any transport error; callers decide how to react.
    """

    def __init__(self, config: Settings = settings):
        self.config = config

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.config.mail_from
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _dispatch_smtp(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout,
        ) as server:
            if self.config.smtp_use_tls:
                server.starttls()
            if self.config.smtp_username and self.config.smtp_password:
                server.login(self.config.smtp_username, self.config.smtp_password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send an HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Raises:
            smtplib.SMTPException, OSError: On transport failure
        """
        msg = self._build_message(to, subject, html)
        logger.info("email_send_attempt", subject=subject)

        try:
            await run_in_threadpool(self._dispatch_smtp, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_send_failed", subject=subject, error=str(e))
            raise

        logger.info("email_sent", subject=subject)
