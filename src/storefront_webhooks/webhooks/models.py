"""
Data model for webhook subscriptions, delivery log entries and stats.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a subscription."""

    ACTIVE = "active"
    PAUSED = "paused"
    DISABLED = "disabled"


class DeliveryStatus(str, Enum):
    """Outcome of a single delivery attempt."""

    SUCCESS = "success"
    FAILED = "failed"
    # Only for deliveries reported asynchronously by the storefront
    PENDING = "pending"


@dataclass
class Subscription:
    """A durable binding of one topic to one delivery URL."""

    name: str
    topic: str
    delivery_url: str
    secret: str = ""
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    id: Optional[str] = None
    date_created: Optional[str] = None
    date_modified: Optional[str] = None

    @property
    def has_secret(self) -> bool:
        return bool(self.secret)

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE

    def to_dict(self, include_secret: bool = True) -> Dict[str, Any]:
        """Convert to the storefront's JSON representation."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "topic": self.topic,
            "delivery_url": self.delivery_url,
            "date_created": self.date_created,
            "date_modified": self.date_modified,
        }
        if include_secret:
            data["secret"] = self.secret
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        """Build a subscription from storefront JSON."""
        raw_id = data.get("id")
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            name=data.get("name") or "",
            topic=data.get("topic") or "",
            delivery_url=data.get("delivery_url") or "",
            secret=data.get("secret") or "",
            status=SubscriptionStatus(data.get("status") or SubscriptionStatus.ACTIVE.value),
            date_created=data.get("date_created"),
            date_modified=data.get("date_modified"),
        )


@dataclass(frozen=True)
class DeliveryLogEntry:
    """Immutable record of one delivery attempt."""

    id: str
    subscription_id: Optional[str]
    topic: str
    resource: str
    event: str
    delivery_id: str
    delivery_url: str
    status: DeliveryStatus
    created_at: str = field(default_factory=utc_now_iso)
    response_code: Optional[int] = None
    response_message: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_successful(self) -> bool:
        return self.status == DeliveryStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted representation."""
        return {
            "id": self.id,
            "subscription_id": self.subscription_id,
            "topic": self.topic,
            "resource": self.resource,
            "event": self.event,
            "delivery_id": self.delivery_id,
            "delivery_url": self.delivery_url,
            "created_at": self.created_at,
            "status": self.status.value,
            "response_code": self.response_code,
            "response_message": self.response_message,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeliveryLogEntry":
        subscription_id = data.get("subscription_id")
        return cls(
            id=str(data["id"]),
            subscription_id=str(subscription_id) if subscription_id is not None else None,
            topic=data["topic"],
            resource=data.get("resource", ""),
            event=data.get("event", ""),
            delivery_id=data.get("delivery_id", ""),
            delivery_url=data.get("delivery_url", ""),
            created_at=data.get("created_at") or utc_now_iso(),
            status=DeliveryStatus(data["status"]),
            response_code=data.get("response_code"),
            response_message=data.get("response_message"),
            payload=data.get("payload") or {},
        )


@dataclass
class WebhookStats:
    """Summary counters derived from the registry and the delivery log."""

    total_subscriptions: int = 0
    active_subscriptions: int = 0
    total_deliveries: int = 0
    successful_deliveries: int = 0
    failed_deliveries: int = 0
    pending_deliveries: int = 0
    success_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_subscriptions": self.total_subscriptions,
            "active_subscriptions": self.active_subscriptions,
            "total_deliveries": self.total_deliveries,
            "successful_deliveries": self.successful_deliveries,
            "failed_deliveries": self.failed_deliveries,
            "pending_deliveries": self.pending_deliveries,
            "success_rate": self.success_rate,
        }
