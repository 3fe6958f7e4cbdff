# SPDX-License-Identifier: Apache-2.0

"""
Notification client for resident profile status changes.

Each status transition that informs the resident is delivered as a POST to
the email service at ``{base_url}/api/email/{kind}``. Delivery is best
effort from the caller's point of view: this client raises
NotificationError and the lifecycle service decides what to do with it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from models.enums import NotificationKind


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Payload key carrying the reason text, per notification kind
REASON_KEYS: Dict[NotificationKind, str] = {
    NotificationKind.REJECTION: "rejectionReason",
    NotificationKind.UPDATE_REJECTION: "rejectionReason",
    NotificationKind.UPDATE_REQUEST: "updateReason",
    NotificationKind.UPDATE_PROFILING: "updateReason",
}


class NotificationError(Exception):
    """Raised when a notification could not be delivered."""
    pass


@dataclass
class NotificationConfig:
    """Notification service settings."""
    base_url: str
    timeout_seconds: float = 10.0


class NotificationClient:
    """HTTP client for the resident email notification endpoints."""

    def __init__(self, config: NotificationConfig):
        self.config = config

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip('/')

    def endpoint_url(self, kind: NotificationKind) -> str:
        """Full URL for a notification kind."""
        return f"{self.base_url}/api/email/{NotificationKind(kind).value}"

    def build_payload(
        self,
        kind: NotificationKind,
        user_id: Optional[str],
        reason: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the JSON body for a notification.

        Kinds that carry a reason always include their reason key, even when
        the reason is empty; other kinds send the user ID only.
        """
        payload: Dict[str, Any] = {"userId": user_id}
        reason_key = REASON_KEYS.get(NotificationKind(kind))
        if reason_key:
            payload[reason_key] = reason
        return payload

    def send(
        self,
        kind: NotificationKind,
        user_id: Optional[str],
        reason: Optional[str] = None
    ) -> None:
        """
        Deliver one notification.

        Args:
            kind: Notification kind (endpoint)
            user_id: Resident's user ID
            reason: Reason text for kinds that carry one

        Raises:
            NotificationError: On transport failure or a non-2xx response
        """
        kind = NotificationKind(kind)
        url = self.endpoint_url(kind)
        payload = self.build_payload(kind, user_id, reason)

        with tracer.start_as_current_span("notification.send") as span:
            span.set_attributes({
                "notification.kind": kind.value,
                "notification.user_id": str(user_id),
                "http.url": url
            })

            try:
                response = requests.post(url, json=payload, timeout=self.config.timeout_seconds)
                response.raise_for_status()
            except requests.RequestException as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.warning(
                    f"Failed to send {kind.value} notification",
                    extra={
                        "extra_fields": {
                            "kind": kind.value,
                            "user_id": user_id,
                            "error": str(e)
                        }
                    }
                )
                raise NotificationError(f"Failed to send {kind.value} notification: {e}") from e

            span.set_attribute("http.status_code", response.status_code)
            span.set_status(Status(StatusCode.OK))
            logger.info(
                f"Sent {kind.value} notification",
                extra={"extra_fields": {"kind": kind.value, "user_id": user_id}}
            )


def create_notification_client() -> NotificationClient:
    """
    Factory function to create a notification client with configuration from environment.

    Returns:
        NotificationClient: Configured client instance
    """
    config = NotificationConfig(
        base_url=os.getenv('NOTIFICATION_BASE_URL', 'http://localhost:5000'),
        timeout_seconds=float(os.getenv('NOTIFICATION_TIMEOUT_SECONDS', '10'))
    )
    return NotificationClient(config)
