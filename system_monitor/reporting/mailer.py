"""SMTP delivery for the e-mail report."""

from __future__ import annotations

import logging
import re
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.utils import formataddr

from system_monitor.core.config import APP_NAME, SmtpConfig

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(address: str) -> bool:
    return bool(_EMAIL_PATTERN.match(address or ""))


@dataclass(frozen=True, slots=True)
class MailMessage:
    to: str
    subject: str
    body: str


class SmtpMailer:
    """Send HTML messages through the configured SMTP relay."""

    def __init__(self, config: SmtpConfig | None = None) -> None:
        self.config = config or SmtpConfig.from_env()

    def send(self, message: MailMessage) -> bool:
        config = self.config
        msg = MIMEText(message.body, "html", "utf-8")
        msg["Subject"] = message.subject
        msg["From"] = formataddr((APP_NAME, config.sender))
        msg["To"] = message.to

        try:
            if config.use_ssl:
                server: smtplib.SMTP = smtplib.SMTP_SSL(config.host, config.port, timeout=30)
            else:
                server = smtplib.SMTP(config.host, config.port, timeout=30)
            with server:
                if config.user and config.password:
                    if not config.use_ssl:
                        server.starttls()
                    server.login(config.user, config.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Envío de correo a %s falló: %s", message.to, exc)
            return False

        logger.info("Reporte enviado a %s", message.to)
        return True
