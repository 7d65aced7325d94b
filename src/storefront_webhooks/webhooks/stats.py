"""
Aggregate statistics over subscriptions and delivery history.
"""

import structlog

from .log_store import DeliveryLogStore
from .models import DeliveryStatus, WebhookStats
from .registry import SubscriptionRegistry

logger = structlog.get_logger(__name__)


class StatsAggregator:
    """Computes fresh stats from the registry and log on every call."""

    def __init__(self, registry: SubscriptionRegistry, log_store: DeliveryLogStore):
        self.registry = registry
        self.log_store = log_store

    async def compute_stats(self) -> WebhookStats:
        """
        Summarize current registry and log state.

        Pending deliveries count toward the total but are neither
        successful nor failed.

        Raises:
            StoreUnavailableError: If subscriptions cannot be listed
        """
        subscriptions = await self.registry.list()
        entries = self.log_store.list()

        total = len(entries)
        successful = sum(1 for e in entries if e.status == DeliveryStatus.SUCCESS)
        failed = sum(1 for e in entries if e.status == DeliveryStatus.FAILED)

        stats = WebhookStats(
            total_subscriptions=len(subscriptions),
            active_subscriptions=sum(1 for sub in subscriptions if sub.is_active),
            total_deliveries=total,
            successful_deliveries=successful,
            failed_deliveries=failed,
            pending_deliveries=total - successful - failed,
            success_rate=(successful / total * 100) if total > 0 else 0.0,
        )

        logger.debug("Webhook stats computed", **stats.to_dict())
        return stats
