# services/notifications.py
from __future__ import annotations

import logging
import re
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Protocol

from config import Settings, get_settings
from errors import DispatchError

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)


class Notifier(Protocol):
    """Delivers one message. Raises DispatchError on failure; callers log and move on."""

    def send(self, recipient: str, subject: str, body: str) -> None: ...


class SmtpNotifier:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _build(self, recipient: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.mail_from
        msg["To"] = recipient
        msg["Subject"] = subject
        if _HTML_TAG.search(body):
            plain = re.sub(r"<br\s*/?>", "\n", body, flags=re.IGNORECASE)
            plain = re.sub(r"<[^>]*>", "", plain).replace("&nbsp;", " ")
            msg.set_content(plain)
            msg.add_alternative(body, subtype="html")
        else:
            msg.set_content(body)
            msg.add_alternative(body.replace("\n", "<br>"), subtype="html")
        return msg

    def send(self, recipient: str, subject: str, body: str) -> None:
        s = self.settings
        msg = self._build(recipient, subject, body)
        try:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.store_timeout_seconds) as smtp:
                if s.smtp_use_tls:
                    smtp.starttls()
                if s.smtp_user and s.smtp_password:
                    smtp.login(s.smtp_user, s.smtp_password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(recipient, str(e)) from e
        logger.info("Email sent to %s: %s", recipient, subject)


def safe_send(notifier: Notifier, recipient: str, subject: str, body: str) -> bool:
    """Send and swallow the failure after logging it. True when delivered."""
    try:
        notifier.send(recipient, subject, body)
        return True
    except Exception:
        logger.exception("Error sending email to %s (%s)", recipient, subject)
        return False


# ---- message templates ----
def completion_message(project_name: str) -> tuple[str, str]:
    return (
        "Project Completed!",
        f'All tasks for project "{project_name}" are done. The project has been marked as Completed!',
    )


def assignment_message(title: str, project_name: str, *, description: str = "", due_date: str = "",
                       status: str = "", attachments: Optional[List[str]] = None,
                       reassigned: bool = False, new_task: bool = False) -> tuple[str, str]:
    if reassigned:
        subject = f"Task Reassigned: {title}"
        intro = "A task has been reassigned to you:"
    elif new_task:
        subject = f"New Task Assigned: {title}"
        intro = "You have been assigned a new task:"
    else:
        subject = f"Task Assigned: {title}"
        intro = "You have been assigned a task:"

    lines = ["Hello,", "", intro, "", f"Task: {title}", f"Project: {project_name}"]
    if description:
        lines.append(f"Description: {description}")
    if due_date:
        lines.append(f"Due Date: {due_date}")
    lines.append(f"Status: {status}")
    if attachments:
        lines += ["", f"Attachments ({len(attachments)} file(s)):"]
        lines += [f"{i}. {url}" for i, url in enumerate(attachments, start=1)]
    lines += ["", "Please check your dashboard for more details.", "", "Best regards,",
              "Project Management System"]
    return subject, "\n".join(lines)
