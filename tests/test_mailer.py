from datetime import datetime
from unittest.mock import patch

from justscan.utils.mailer import reminder_body, send_mail


def test_not_configured_returns_false(app):
    with app.app_context():
        assert send_mail("a@b.com", "subject", "body") is False


def test_sends_with_starttls(app):
    app.config.update(MAIL_HOST="smtp.campus.edu", MAIL_PORT=587, MAIL_USER="bot", MAIL_PASSWORD="pw")
    with app.app_context(), patch("justscan.utils.mailer.smtplib.SMTP") as smtp:
        assert send_mail("student@campus.edu", "Reminder", "Please return", reply_to="desk@campus.edu")

    server = smtp.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("bot", "pw")
    sender, recipients, raw = server.sendmail.call_args[0]
    assert recipients == ["student@campus.edu"]
    assert "Reply-To: desk@campus.edu" in raw


def test_reminder_body_mentions_time():
    body = reminder_body("Asha", "Hill Campus", datetime(2024, 3, 1, 14, 30))
    assert "Hello Asha" in body
    assert "01 Mar 2024, 14:30 UTC" in body
