"""Notification helpers for announcing newly detected offers."""

from __future__ import annotations

import datetime as dt
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence, TextIO

import requests

from .config import EmailSettings, Settings
from .models import NotifyResult, Offer

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"
MESSAGE_HEADER = "Neue Wohnungsangebote gefunden ({timestamp}):"
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"


class Notifier(Protocol):
    """Protocol defining the notifier contract."""

    channel: str

    def send(self, message: str) -> NotifyResult:
        ...


@dataclass
class TelegramNotifier:
    """Send messages through the Telegram Bot API."""

    bot_token: Optional[str] = field(default=None, repr=False)
    chat_id: Optional[str] = None
    timeout: int = 10
    channel: str = "telegram"

    def send(self, message: str) -> NotifyResult:
        if not self.bot_token or not self.chat_id:
            reason = ("Telegram selected but TELEGRAM_BOT_TOKEN or "
                      "TELEGRAM_CHAT_ID is missing")
            logger.error(reason)
            return NotifyResult(self.channel, delivered=False, reason=reason)
        response = requests.post(
            f"{TELEGRAM_API}/bot{self.bot_token}/sendMessage",
            json={
                "chat_id": self.chat_id,
                "text": message,
                "disable_web_page_preview": False,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info("Sent Telegram notification")
        return NotifyResult(self.channel, delivered=True)


@dataclass
class WebhookNotifier:
    """Post ``{"content": message}`` to a generic chat webhook (Discord style)."""

    webhook_url: Optional[str] = None
    timeout: int = 10
    channel: str = "webhook"

    def send(self, message: str) -> NotifyResult:
        if not self.webhook_url:
            reason = "Webhook selected but WEBHOOK_URL is missing"
            logger.error(reason)
            return NotifyResult(self.channel, delivered=False, reason=reason)
        response = requests.post(
            self.webhook_url,
            json={"content": message},
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info("Sent webhook notification")
        return NotifyResult(self.channel, delivered=True)


@dataclass
class EmailNotifier:
    """Placeholder channel: logs the message that would have been mailed."""

    settings: EmailSettings = field(default_factory=EmailSettings)
    channel: str = "email"

    def send(self, message: str) -> NotifyResult:
        logger.warning(
            "Email notify selected but email sending is not implemented "
            "(recipient: %s). Message would be:\n%s",
            self.settings.recipient or "unset",
            message,
        )
        return NotifyResult(self.channel,
                            delivered=False,
                            reason="email delivery not implemented")


@dataclass
class ConsoleNotifier:
    """Write messages to standard output."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    channel: str = "console"

    def send(self, message: str) -> NotifyResult:
        print(message, file=self.stream, flush=True)
        return NotifyResult(self.channel, delivered=True)


def build_notifier(settings: Settings) -> Notifier:
    """Construct the single channel selected by ``settings.notify_method``."""
    method = settings.notify_method
    if method == "telegram":
        return TelegramNotifier(bot_token=settings.telegram_bot_token,
                                chat_id=settings.telegram_chat_id)
    if method == "webhook":
        return WebhookNotifier(webhook_url=settings.webhook_url)
    if method == "email":
        return EmailNotifier(settings=settings.email)
    return ConsoleNotifier()


def format_offer_message(
    offers: Sequence[Offer],
    now: Callable[[], dt.datetime] = dt.datetime.now,
) -> str:
    """Render one consolidated announcement for ``offers``."""
    lines = [MESSAGE_HEADER.format(timestamp=now().strftime(TIMESTAMP_FORMAT))]
    lines.extend(f"• {offer.title} — {offer.url}" for offer in offers)
    return "\n".join(lines)


def deliver(notifier: Notifier, message: str) -> NotifyResult:
    """Send ``message`` and report the outcome; channel errors never propagate."""
    channel = getattr(notifier, "channel", type(notifier).__name__)
    try:
        return notifier.send(message)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to deliver notification via %s", channel)
        return NotifyResult(channel, delivered=False, reason=str(exc))


__all__ = [
    "ConsoleNotifier",
    "EmailNotifier",
    "Notifier",
    "TelegramNotifier",
    "WebhookNotifier",
    "build_notifier",
    "deliver",
    "format_offer_message",
]
