"""Global configuration values for the System Monitor application."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class UpdateIntervals:
    """Polling intervals (in milliseconds) used by the dashboard."""

    dashboard_poll_ms: int = 2000


@dataclass(frozen=True)
class SamplerConfig:
    """Timing knobs for the metrics sampler."""

    cpu_sample_interval: float = 0.1  # seconds between the two /proc/stat reads
    command_timeout: float = 5.0  # seconds allowed for top/wmic


@dataclass(frozen=True)
class SecurityConfig:
    """Security-related defaults for the System Monitor web server."""

    allowed_origins: tuple[str, ...] = ("http://127.0.0.1:8080", "http://localhost:8080")
    allow_credentials: bool = False
    enable_rate_limit: bool = True
    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60


@dataclass(frozen=True)
class SmtpConfig:
    """Outgoing mail settings for the e-mail report."""

    host: str = "smtp.gmail.com"
    port: int = 587
    user: str | None = None
    password: str | None = None
    sender: str = "system-monitor@localhost"

    @property
    def use_ssl(self) -> bool:
        return self.port == 465

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SmtpConfig":
        env = os.environ if environ is None else environ
        port_text = env.get("SMTP_PORT", "")
        try:
            port = int(port_text) if port_text else cls.port
        except ValueError:
            port = cls.port
        user = env.get("SMTP_USER") or None
        return cls(
            host=env.get("SMTP_HOST") or cls.host,
            port=port,
            user=user,
            password=env.get("SMTP_PASSWORD") or None,
            sender=env.get("SMTP_SENDER") or user or cls.sender,
        )


APP_NAME = "System Monitor"
INTERVALS = UpdateIntervals()
SAMPLER = SamplerConfig()
SECURITY = SecurityConfig()
