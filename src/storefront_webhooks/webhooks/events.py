"""
Webhook event payloads and wire headers.

The body of every delivery is the JSON encoding of a ``WebhookEvent``;
``to_bytes`` produces the exact bytes that get signed and transmitted.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .models import utc_now_iso

HEADER_TOPIC = "X-Webhook-Topic"
HEADER_RESOURCE = "X-Webhook-Resource"
HEADER_EVENT = "X-Webhook-Event"
HEADER_SIGNATURE = "X-Webhook-Signature"
HEADER_WEBHOOK_ID = "X-Webhook-Id"
HEADER_DELIVERY_ID = "X-Webhook-Delivery-Id"

TEST_RESOURCE = "test"
TEST_EVENT = "test"


@dataclass
class WebhookEvent:
    """Event body delivered to a subscription's endpoint."""

    id: str
    topic: str
    resource: str
    event: str
    event_id: int = 0
    created_at: str = field(default_factory=utc_now_iso)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "event": self.event,
            "created_at": self.created_at,
            "resource": self.resource,
            "event_id": self.event_id,
            "topic": self.topic,
            "payload": self.payload,
        }

    def to_bytes(self) -> bytes:
        """Serialize to the exact bytes sent on the wire."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebhookEvent":
        return cls(
            id=str(data.get("id", "")),
            topic=data.get("topic", ""),
            resource=data.get("resource", ""),
            event=data.get("event", ""),
            event_id=int(data.get("event_id") or 0),
            created_at=data.get("created_at") or utc_now_iso(),
            payload=data.get("payload") or {},
        )


def create_test_event(topic: str, delivery_id: Optional[str] = None) -> WebhookEvent:
    """Create a synthetic test event for a topic."""
    return WebhookEvent(
        id=delivery_id or str(uuid.uuid4()),
        topic=topic,
        resource=TEST_RESOURCE,
        event=TEST_EVENT,
        event_id=0,
        payload={"test": True},
    )
