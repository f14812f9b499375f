"""Outbound email delivery."""

import asyncio
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Sequence

from ..core.config import Settings
from ..core.exceptions import NotificationDeliveryError
from ..core.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MailMessage:
    """A fully rendered message ready for delivery."""

    role: str
    recipient: str
    subject: str
    html: str
    sender: str | None = None


class MailSender(ABC):
    """Mail transport capability."""

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver one message or raise."""


class SmtpMailSender(MailSender):
    """
    Deliver messages through an SMTP relay (Gmail by default).

    smtplib is blocking, so every delivery runs in a worker thread and the
    event loop keeps serving other requests meanwhile.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(self, message: MailMessage) -> None:
        if not self.settings.mail_configured:
            raise NotificationDeliveryError(
                failed=[message.role],
                detail="Mail transport credentials are not configured",
            )
        await asyncio.to_thread(self._deliver, self._build(message))

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = message.sender or self.settings.email_user
        email["To"] = message.recipient
        email["Subject"] = message.subject
        email.set_content("This message requires an HTML capable mail client.")
        email.add_alternative(message.html, subtype="html")
        return email

    def _deliver(self, email: EmailMessage) -> None:
        timeout = self.settings.mail_timeout_seconds
        context = ssl.create_default_context()
        if self.settings.smtp_use_ssl:
            with smtplib.SMTP_SSL(self.settings.smtp_host, self.settings.smtp_port,
                                  timeout=timeout, context=context) as client:
                client.login(self.settings.email_user, self.settings.email_password)
                client.send_message(email)
        else:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=timeout) as client:
                client.starttls(context=context)
                client.login(self.settings.email_user, self.settings.email_password)
                client.send_message(email)


class NotificationDispatcher:
    """Send a batch of messages concurrently with a per-message time limit."""

    def __init__(self, sender: MailSender, timeout_seconds: float = 15.0):
        self.sender = sender
        self.timeout_seconds = timeout_seconds

    async def _send_one(self, message: MailMessage) -> None:
        await asyncio.wait_for(self.sender.send(message), timeout=self.timeout_seconds)

    async def dispatch(self, messages: Sequence[MailMessage], operation: str) -> None:
        """
        Attempt every message, then fail if any of them failed.

        Args:
            messages: Rendered messages to deliver
            operation: Name of the business operation, used for logging

        Raises:
            NotificationDeliveryError: If at least one message was not delivered
        """
        results = await asyncio.gather(
            *(self._send_one(message) for message in messages),
            return_exceptions=True,
        )

        failed = []
        for message, result in zip(messages, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                failed.append(message.role)
                # Causes are logged here and never returned to the client
                logger.error(
                    "Notification delivery failed",
                    operation=operation,
                    role=message.role,
                    error_type=type(result).__name__,
                    error=str(result) or "timed out",
                )
            else:
                logger.info("Notification delivered", operation=operation, role=message.role)

        if failed:
            raise NotificationDeliveryError(failed=failed)
