"""
Webhook subscription and delivery-verification core.

Manages webhook subscriptions held by the storefront, signs and sends
test deliveries, keeps a bounded delivery log and derives stats.
"""

from .delivery import DeliveryTestHarness
from .errors import (
    NotFoundError,
    StoreUnavailableError,
    TransportError,
    ValidationError,
    WebhookError,
)
from .events import WebhookEvent
from .log_store import DeliveryLogStore
from .models import (
    DeliveryLogEntry,
    DeliveryStatus,
    Subscription,
    SubscriptionStatus,
    WebhookStats,
)
from .receiver import WebhookRequest, verify_request
from .registry import SubscriptionRegistry
from .service import WebhookService
from .stats import StatsAggregator
from .store import InMemorySubscriptionStore, SubscriptionStore
from .topics import Topic, TopicInfo, list_topics
from .transport import AiohttpTransport, DeliveryTransport, TransportResponse

__all__ = [
    "WebhookService",
    "SubscriptionRegistry",
    "DeliveryTestHarness",
    "DeliveryLogStore",
    "StatsAggregator",
    "SubscriptionStore",
    "InMemorySubscriptionStore",
    "DeliveryTransport",
    "AiohttpTransport",
    "TransportResponse",
    "Subscription",
    "SubscriptionStatus",
    "DeliveryLogEntry",
    "DeliveryStatus",
    "WebhookStats",
    "WebhookEvent",
    "WebhookRequest",
    "verify_request",
    "Topic",
    "TopicInfo",
    "list_topics",
    "WebhookError",
    "ValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "TransportError",
]
