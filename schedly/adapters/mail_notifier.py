"""
Notification delivery through an HTTP mail relay.
"""

import logging
from typing import Any, Dict

import requests

from ..domain.exceptions import NotificationError
from ..services.notifications import Notification

logger = logging.getLogger(__name__)


class HttpMailNotifier:
    """
    Posts notifications as JSON to a mail relay endpoint.

    Request body:
    {
        "from": "Schedly App <noreply@schedly.com>",
        "to": "jane@example.com",
        "subject": "Booking Confirmation: Consulting",
        "text": "..."
    }
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        sender: str = "Schedly App <noreply@schedly.com>",
        timeout_seconds: float = 10.0
    ):
        """
        Initialize the notifier.

        Args:
            endpoint: URL of the relay's send endpoint
            api_key: Optional bearer token for the relay
            sender: From header used for every message
            timeout_seconds: Request timeout
        """
        self.endpoint = endpoint
        self.sender = sender
        self.timeout_seconds = timeout_seconds
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    def build_payload(self, notification: Notification) -> Dict[str, Any]:
        return {
            "from": self.sender,
            "to": notification.recipient,
            "subject": notification.subject,
            "text": notification.body,
        }

    def send(self, notification: Notification) -> None:
        """
        Deliver a notification.

        Raises:
            NotificationError: If the relay cannot be reached or refuses the message
        """
        try:
            response = requests.post(
                self.endpoint,
                headers=self.headers,
                json=self.build_payload(notification),
                timeout=self.timeout_seconds
            )
            response.raise_for_status()

        except requests.exceptions.RequestException as e:
            raise NotificationError(f"Failed to send notification to {notification.recipient}: {e}") from e

        logger.debug("Sent '%s' to %s", notification.subject, notification.recipient)


class LoggingNotifier:
    """
    Notifier that only logs messages.

    Useful for local runs without a mail relay.
    """

    def __init__(self):
        self.sent = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)
        logger.info(
            "Notification to %s: %s\n%s",
            notification.recipient, notification.subject, notification.body
        )
