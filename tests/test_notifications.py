"""
Tests for notification messages and the mail relay notifier.
"""

import logging

import pytest
import requests

from schedly.adapters import mail_notifier
from schedly.adapters.mail_notifier import HttpMailNotifier, LoggingNotifier
from schedly.domain.exceptions import NotificationError
from schedly.services.notifications import (
    Notification,
    build_booking_confirmation,
    build_owner_notification,
)

from conftest import make_booking


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")


class TestMessages:
    """Tests for the owner and confirmation message builders."""

    def test_owner_notification(self, calendar):
        booking = make_booking(10, 11, name="Jane Doe", email="jane@example.com", notes="Quarterly review")

        notification = build_owner_notification(booking, calendar)

        assert notification.recipient == "alex@example.com"
        assert notification.subject == "New Booking: Consulting"
        assert "Hello Alex Owner," in notification.body
        assert "Date: Monday, November 25, 2024" in notification.body
        assert "Time: 10:00 - 11:00" in notification.body
        assert "Booked by: Jane Doe" in notification.body
        assert "Notes: Quarterly review" in notification.body

    def test_confirmation(self, calendar):
        booking = make_booking(9.5, 10.25, name="Jane Doe", email="jane@example.com")

        notification = build_booking_confirmation(booking, calendar)

        assert notification.recipient == "jane@example.com"
        assert notification.subject == "Booking Confirmation: Consulting"
        assert "Hello Jane Doe," in notification.body
        assert "Calendar: Consulting" in notification.body
        assert "Time: 09:30 - 10:15" in notification.body
        assert "Notes" not in notification.body


class TestHttpMailNotifier:
    """Tests for HttpMailNotifier with requests.post patched out."""

    NOTIFICATION = Notification(recipient="jane@example.com", subject="Hi", body="Body")

    def test_posts_payload(self, monkeypatch):
        calls = []

        def fake_post(url, **kwargs):
            calls.append((url, kwargs))
            return FakeResponse()

        monkeypatch.setattr(mail_notifier.requests, "post", fake_post)
        notifier = HttpMailNotifier("https://relay.example.com/send", api_key="secret", timeout_seconds=3)

        notifier.send(self.NOTIFICATION)

        url, kwargs = calls[0]
        assert url == "https://relay.example.com/send"
        assert kwargs["json"] == {
            "from": "Schedly App <noreply@schedly.com>",
            "to": "jane@example.com",
            "subject": "Hi",
            "text": "Body",
        }
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 3

    def test_no_auth_header_without_key(self):
        notifier = HttpMailNotifier("https://relay.example.com/send")

        assert "Authorization" not in notifier.headers

    def test_http_error_becomes_notification_error(self, monkeypatch):
        monkeypatch.setattr(mail_notifier.requests, "post", lambda url, **kwargs: FakeResponse(502))
        notifier = HttpMailNotifier("https://relay.example.com/send")

        with pytest.raises(NotificationError, match="jane@example.com"):
            notifier.send(self.NOTIFICATION)

    def test_connection_error_becomes_notification_error(self, monkeypatch):
        def fake_post(url, **kwargs):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(mail_notifier.requests, "post", fake_post)
        notifier = HttpMailNotifier("https://relay.example.com/send")

        with pytest.raises(NotificationError):
            notifier.send(self.NOTIFICATION)


class TestLoggingNotifier:
    def test_records_and_logs(self, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level(logging.INFO, logger="schedly.adapters.mail_notifier"):
            notifier.send(TestHttpMailNotifier.NOTIFICATION)

        assert notifier.sent == [TestHttpMailNotifier.NOTIFICATION]
        assert "jane@example.com" in caplog.text
