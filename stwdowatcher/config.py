"""Runtime configuration assembled once from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_MONITOR_URL = (
    "https://www.stwdo.de/wohnen/aktuelle-wohnangebote#residential-offer-list"
)
DEFAULT_POLL_INTERVAL = 120
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_USER_AGENT = "stwdo-offer-monitor/1.0 (+https://github.com)"
NOTIFY_METHODS = ("telegram", "webhook", "email", "console")

SEEN_FILENAME = "stwdo-last.json"
META_FILENAME = "stwdo-meta.json"


@dataclass(frozen=True)
class EmailSettings:
    """SMTP parameters; accepted for completeness, no mail is sent."""

    smtp_host: Optional[str] = None
    smtp_port: Optional[str] = None
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = field(default=None, repr=False)
    recipient: Optional[str] = None
    sender: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Immutable configuration threaded into every component."""

    monitor_url: str = DEFAULT_MONITOR_URL
    poll_interval: int = DEFAULT_POLL_INTERVAL
    notify_method: str = "console"
    telegram_bot_token: Optional[str] = field(default=None, repr=False)
    telegram_chat_id: Optional[str] = None
    webhook_url: Optional[str] = None
    email: EmailSettings = field(default_factory=EmailSettings)
    state_dir: Path = field(default_factory=Path.cwd)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def seen_path(self) -> Path:
        return self.state_dir / SEEN_FILENAME

    @property
    def meta_path(self) -> Path:
        return self.state_dir / META_FILENAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = (env.get(name) or "").strip()
            return value or None

        state_dir = get("STATE_DIR")
        return cls(
            monitor_url=get("MONITOR_URL") or DEFAULT_MONITOR_URL,
            poll_interval=_positive_number(
                get("POLL_INTERVAL_SECONDS"),
                DEFAULT_POLL_INTERVAL,
                "POLL_INTERVAL_SECONDS",
                int,
            ),
            notify_method=normalize_notify_method(get("NOTIFY_METHOD")),
            telegram_bot_token=get("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=get("TELEGRAM_CHAT_ID"),
            webhook_url=get("WEBHOOK_URL"),
            email=EmailSettings(
                smtp_host=get("EMAIL_SMTP_HOST"),
                smtp_port=get("EMAIL_SMTP_PORT"),
                smtp_user=get("EMAIL_SMTP_USER"),
                smtp_password=get("EMAIL_SMTP_PASS"),
                recipient=get("EMAIL_TO"),
                sender=get("EMAIL_FROM"),
            ),
            state_dir=Path(state_dir).expanduser() if state_dir else Path.cwd(),
            request_timeout=_positive_number(
                get("REQUEST_TIMEOUT_SECONDS"),
                DEFAULT_REQUEST_TIMEOUT,
                "REQUEST_TIMEOUT_SECONDS",
                float,
            ),
            user_agent=get("USER_AGENT") or DEFAULT_USER_AGENT,
        )


def normalize_notify_method(value: Optional[str]) -> str:
    """Lower-case the method name, falling back to console for unknown values."""
    method = (value or "console").strip().lower()
    if method not in NOTIFY_METHODS:
        logger.warning(
            "Unknown NOTIFY_METHOD %r; falling back to console", value
        )
        return "console"
    return method


def _positive_number(raw: Optional[str], default, name: str, cast):
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Non-positive %s=%r; using default %s", name, raw, default)
        return default
    return value


__all__ = [
    "EmailSettings",
    "Settings",
    "normalize_notify_method",
]
