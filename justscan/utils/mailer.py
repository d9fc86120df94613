"""
justscan/utils/mailer.py
-----------------
Plain-text SMTP mail for return reminders and feedback.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from flask import current_app

logger = logging.getLogger(__name__)


def is_configured():
    cfg = current_app.config
    return bool(cfg.get("MAIL_HOST") and cfg.get("MAIL_USER") and cfg.get("MAIL_PASSWORD"))


def send_mail(to_email, subject, body, reply_to=None):
    """
    Send one plain-text email. Returns False when mail is not configured;
    SMTP failures propagate to the caller.
    """
    if not is_configured():
        logger.warning("[MAIL] Mail not configured, skipping message to %s", to_email)
        return False

    cfg = current_app.config
    message = MIMEText(body, "plain", "utf-8")
    message["Subject"] = subject
    message["From"] = cfg["MAIL_FROM"]
    message["To"] = to_email
    if reply_to:
        message["Reply-To"] = reply_to

    port = int(cfg.get("MAIL_PORT") or 587)
    if port == 465:
        server = smtplib.SMTP_SSL(cfg["MAIL_HOST"], port, timeout=15)
    else:
        server = smtplib.SMTP(cfg["MAIL_HOST"], port, timeout=15)
    with server:
        if port != 465:
            server.starttls()
        server.login(cfg["MAIL_USER"], cfg["MAIL_PASSWORD"])
        server.sendmail(cfg["MAIL_USER"], [to_email], message.as_string())

    logger.info("[MAIL] Sent '%s' to %s", subject, to_email)
    return True


def reminder_body(student_name, organization_name, leaving_time):
    left_at = leaving_time.strftime("%d %b %Y, %H:%M UTC") if leaving_time else "today"
    return (
        f"Hello {student_name},\n\n"
        f"Our records at {organization_name} show that you checked out at {left_at} "
        f"and have not checked back in yet.\n"
        f"Please scan your ID card at the gate when you return.\n\n"
        f"- JustScan"
    )
