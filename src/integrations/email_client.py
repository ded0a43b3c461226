"""SMTP notification channel used for firm, client and transcript emails."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from config.settings import Settings
from reception.errors import NotificationError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    host: str | None
    port: int
    username: str | None
    password: str | None
    use_tls: bool
    timeout: float


def get_smtp_config(settings: Settings) -> SmtpConfig:
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout_seconds,
    )


class EmailNotifier:
    """Sends plain-text emails over SMTP.

    One instance is shared by every call; each ``send`` opens its own SMTP
    connection in a worker thread, so concurrent calls never share state.
    """

    def __init__(self, config: SmtpConfig) -> None:
        self._config = config

    @property
    def sender(self) -> str | None:
        return self._config.username

    async def send(self, *, to: str | None, subject: str, body: str) -> bool:
        """Deliver one email. Returns False when sending was skipped.

        Raises ``NotificationError`` when the SMTP exchange fails.
        """

        if not to:
            LOGGER.debug("No recipient configured; skipping email %r", subject)
            return False
        if not self._config.host:
            LOGGER.warning("SMTP host not configured; skipping email %r to %s", subject, to)
            return False

        message = EmailMessage()
        message["Subject"] = subject
        if self.sender:
            message["From"] = self.sender
        message["To"] = to
        message.set_content(body)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Sending {subject!r} to {to} failed: {exc}") from exc

        LOGGER.info("Email %r sent to %s", subject, to)
        return True

    def _deliver(self, message: EmailMessage) -> None:
        cfg = self._config
        with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as smtp:
            if cfg.use_tls:
                smtp.starttls()
            if cfg.username and cfg.password:
                smtp.login(cfg.username, cfg.password)
            smtp.send_message(message)


def build_email_notifier(settings: Settings) -> EmailNotifier:
    return EmailNotifier(get_smtp_config(settings))
