"""
Storefront Webhooks

Manage a storefront's webhook subscriptions, send signed test deliveries,
and keep a bounded delivery log with aggregate health statistics.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.settings import Config, load_config
from .webhooks import (
    DeliveryLogStore,
    NotFoundError,
    StoreUnavailableError,
    Subscription,
    SubscriptionStatus,
    ValidationError,
    WebhookService,
)

__all__ = [
    "WebhookService",
    "DeliveryLogStore",
    "Subscription",
    "SubscriptionStatus",
    "ValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "Config",
    "load_config",
    "__version__",
    "__license__",
]
