#
# mailer.py
# Duplicacy Backup Runner
#
# Sends the accumulated run log as a plain-text summary mail over SMTP.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""SMTP delivery of run summaries."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formatdate
from typing import Optional, Sequence

from .config import MailSettings
from .errors import MailError

SUBJECT_PREFIX = "duplicacy-runner: Backup results for configuration"

TEST_MESSAGES = (
    (f"{SUBJECT_PREFIX} test (success)", ["This is a test E-Mail message for a successful backup job"]),
    (f"{SUBJECT_PREFIX} test (FAILURE)", ["This is a test E-Mail message for a failed backup job"]),
)


def result_subject(config_name: str, succeeded: bool) -> str:
    return f"{SUBJECT_PREFIX} {config_name} ({'success' if succeeded else 'FAILURE'})"


class SmtpMailer:
    def __init__(self, settings: MailSettings, timeout: float = 60.0):
        self.settings = settings
        self.timeout = timeout

    def build_message(self, subject: str, lines: Sequence[str]) -> EmailMessage:
        s = self.settings
        msg = EmailMessage()
        msg["From"] = s.from_address
        msg["To"] = ", ".join(s.to_addresses)
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=True)
        msg.set_content("\n".join(lines) + "\n")
        return msg

    def send(self, subject: str, lines: Sequence[str]):
        s = self.settings
        msg = self.build_message(subject, lines)
        try:
            with smtplib.SMTP(s.server_hostname, s.server_port, timeout=self.timeout) as server:
                if s.use_tls:
                    server.starttls()
                if s.username:
                    server.login(s.username, s.password or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"cannot send mail via {s.server_hostname}:{s.server_port}: {e}")


def send_test_messages(mailer, logger: Optional[logging.Logger] = None) -> int:
    """Send the canned success/failure messages; return how many failed."""
    log = logger or logging.getLogger("duplicacy_runner")
    failures = 0
    for subject, body in TEST_MESSAGES:
        try:
            mailer.send(subject, body)
        except MailError as e:
            log.error("Error sending E-Mail message: %s", e)
            failures += 1
    return failures


__all__ = ["SUBJECT_PREFIX", "TEST_MESSAGES", "result_subject", "SmtpMailer", "send_test_messages"]
