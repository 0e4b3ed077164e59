"""Report rendering and delivery."""

from .mailer import MailMessage, SmtpMailer, is_valid_email
from .report import REPORT_SUBJECT, Report, render_report

__all__ = [
    "MailMessage",
    "REPORT_SUBJECT",
    "Report",
    "SmtpMailer",
    "is_valid_email",
    "render_report",
]
