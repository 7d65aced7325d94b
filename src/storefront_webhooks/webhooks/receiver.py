"""
Receiver-side helpers for endpoints that accept webhook deliveries.

A receiver that knows the subscription's secret must reject any
delivery whose signature is missing or wrong. An unsigned delivery is
acceptable only when the receiver knows the subscription has no secret.
"""

import json
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ValidationError
from .events import (
    HEADER_DELIVERY_ID,
    HEADER_EVENT,
    HEADER_RESOURCE,
    HEADER_SIGNATURE,
    HEADER_TOPIC,
    HEADER_WEBHOOK_ID,
    WebhookEvent,
)
from .signing import verify


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


@dataclass
class WebhookRequest:
    """An inbound delivery: raw body plus the parsed webhook headers."""

    body: bytes
    topic: Optional[str] = None
    resource: Optional[str] = None
    event: Optional[str] = None
    signature: Optional[str] = None
    webhook_id: Optional[str] = None
    delivery_id: Optional[str] = None

    @classmethod
    def from_headers(cls, body: bytes, headers: Mapping[str, str]) -> "WebhookRequest":
        """Parse webhook headers case-insensitively."""
        return cls(
            body=body,
            topic=_header(headers, HEADER_TOPIC),
            resource=_header(headers, HEADER_RESOURCE),
            event=_header(headers, HEADER_EVENT),
            signature=_header(headers, HEADER_SIGNATURE) or None,
            webhook_id=_header(headers, HEADER_WEBHOOK_ID),
            delivery_id=_header(headers, HEADER_DELIVERY_ID),
        )

    def is_authentic(self, secret: str) -> bool:
        if not secret:
            return self.signature is None
        return verify(self.body, secret, self.signature)

    def parse_event(self) -> WebhookEvent:
        """
        Decode the body into a ``WebhookEvent``.

        Raises:
            ValidationError: If the body is not a JSON object
        """
        try:
            data = json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValidationError(f"Invalid webhook body: {e}")
        if not isinstance(data, dict):
            raise ValidationError("Webhook body must be a JSON object")
        return WebhookEvent.from_dict(data)


def verify_request(body: bytes, headers: Mapping[str, str], secret: str) -> bool:
    """Verify an inbound delivery against the subscription's secret."""
    return WebhookRequest.from_headers(body, headers).is_authentic(secret)
