"""Email and web-push senders for expiry alerts."""

from __future__ import annotations

import asyncio
import json
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage

from pywebpush import WebPushException, webpush

from .notifications_errors import DispatchError
from .notifications_models import EmailTarget, ExpiryAlert, NotificationTarget, PushTarget

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    """Deliver one alert to one target."""

    @abstractmethod
    async def send(self, target: NotificationTarget, alert: ExpiryAlert) -> None:
        """Deliver ``alert`` or raise ``DispatchError``."""


@dataclass(slots=True)
class EmailSender(NotificationSender):
    """Send alerts over SMTP with STARTTLS and login."""

    user: str
    password: str
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    timeout_seconds: float = 30.0
    log: logging.Logger = field(default_factory=lambda: logger)

    async def send(self, target: NotificationTarget, alert: ExpiryAlert) -> None:
        if not isinstance(target, EmailTarget):
            raise DispatchError(f"EmailSender cannot deliver to {target.kind} targets")
        if not self.user or not self.password:
            raise DispatchError("EMAIL_USER/EMAIL_PASS are not configured")
        message = self.build_message(target, alert)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DispatchError(f"SMTP delivery to {target.address} failed: {exc}") from exc
        self.log.info(
            "notify.email.sent",
            extra={"product_name": alert.product_name, "target": target.address},
        )

    def build_message(self, target: EmailTarget, alert: ExpiryAlert) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = alert.title
        message["From"] = self.user
        message["To"] = target.address
        message.set_content(alert.body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as smtp:
            smtp.starttls()
            smtp.login(self.user, self.password)
            smtp.send_message(message)


@dataclass(slots=True)
class PushSender(NotificationSender):
    """Send alerts as encrypted web-push messages signed with VAPID keys."""

    private_key: str
    contact: str = "mailto:admin@example.com"
    timeout_seconds: float = 30.0
    log: logging.Logger = field(default_factory=lambda: logger)

    async def send(self, target: NotificationTarget, alert: ExpiryAlert) -> None:
        if not isinstance(target, PushTarget):
            raise DispatchError(f"PushSender cannot deliver to {target.kind} targets")
        if not self.private_key:
            raise DispatchError("PUSH_PRIVATE_KEY is not configured")
        payload = json.dumps(
            {
                "title": alert.title,
                "body": alert.body,
                "productName": alert.product_name,
                "expiryDate": alert.expiry_date.isoformat(),
            }
        )
        try:
            await asyncio.to_thread(self._deliver, target, payload)
        except (WebPushException, OSError) as exc:
            raise DispatchError(f"Push delivery to {target.endpoint} failed: {exc}") from exc
        self.log.info(
            "notify.push.sent",
            extra={"product_name": alert.product_name, "target": target.endpoint},
        )

    def _deliver(self, target: PushTarget, payload: str) -> None:
        # webpush adds aud/exp to the claims dict, so each call gets its own.
        webpush(
            subscription_info=target.subscription_info(),
            data=payload,
            vapid_private_key=self.private_key,
            vapid_claims={"sub": self.contact},
            timeout=self.timeout_seconds,
        )
