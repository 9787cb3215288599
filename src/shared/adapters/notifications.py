"""Notification adapter - delivers e-mail to users."""

import abc
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import config

logger = logging.getLogger(__name__)


class AbstractNotifier(abc.ABC):
    """Abstract base class for notification dispatchers."""

    @abc.abstractmethod
    def send(self, to: str, subject: str, html: str) -> None:
        """
        Deliver a message.

        Args:
            to: Recipient address
            subject: Message subject
            html: HTML body

        Raises:
            NotificationError: If the message could not be delivered
        """
        raise NotImplementedError


class SmtpNotifier(AbstractNotifier):
    """Sends HTML e-mail through an SMTP relay."""

    def __init__(self, smtp_config: Optional[dict] = None, timeout: int = 30):
        self.smtp_config = smtp_config or config.get_smtp_config()
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.smtp_config["sender"]
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send(self, to: str, subject: str, html: str) -> None:
        host = self.smtp_config["host"]
        port = self.smtp_config["port"]
        msg = self._build_message(to, subject, html)

        logger.info(f"Sending '{subject}' to {to} via {host}:{port}")

        try:
            with smtplib.SMTP(host, port, timeout=self.timeout) as server:
                if self.smtp_config.get("use_tls"):
                    server.starttls()
                if self.smtp_config.get("user"):
                    server.login(self.smtp_config["user"], self.smtp_config["password"])
                refused = server.send_message(msg)

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send mail to {to}: {e}")
            raise NotificationError(f"Mail delivery failed: {e}") from e

        if refused:
            logger.error(f"Recipient refused by relay: {refused}")
            raise NotificationError(f"Recipient refused: {to}")

        logger.info(f"Mail delivered to {to}")


class NotificationError(Exception):
    """Exception raised when a notification cannot be delivered."""
    pass
