"""Core utilities for System Monitor."""

from __future__ import annotations

from .config import APP_NAME, INTERVALS, SAMPLER, SECURITY, SamplerConfig, SmtpConfig

__all__ = [
    "APP_NAME",
    "INTERVALS",
    "SAMPLER",
    "SECURITY",
    "SamplerConfig",
    "SmtpConfig",
]
