"""
Webhook management service.

Single entry point for callers (CLI, UI backends): wires the registry,
test harness, delivery log and stats aggregator together. Construct one
instance per process and pass it to whatever owns the process lifecycle.
"""

from typing import Any, Dict, List, Optional, Union

import structlog

from ..config.settings import Config
from .delivery import DeliveryTestHarness
from .errors import ValidationError
from .log_store import DeliveryLogStore
from .models import DeliveryLogEntry, DeliveryStatus, Subscription, SubscriptionStatus, WebhookStats
from .registry import SubscriptionRegistry
from .stats import StatsAggregator
from .store import SubscriptionStore
from .topics import TopicInfo, get_topic, list_topics
from .transport import DeliveryTransport

logger = structlog.get_logger(__name__)


class WebhookService:
    """Management surface over subscriptions, test deliveries, the log and stats."""

    def __init__(
        self,
        store: SubscriptionStore,
        log_store: DeliveryLogStore,
        transport: Optional[DeliveryTransport] = None,
        delivery_timeout_seconds: float = 10.0,
        response_message_limit: int = 500,
        user_agent: Optional[str] = None,
    ):
        self.store = store
        self.log_store = log_store
        self.registry = SubscriptionRegistry(store)

        harness_options: Dict[str, Any] = {
            "timeout_seconds": delivery_timeout_seconds,
            "response_message_limit": response_message_limit,
        }
        if user_agent:
            harness_options["user_agent"] = user_agent
        self.harness = DeliveryTestHarness(log_store, transport, **harness_options)
        self.aggregator = StatsAggregator(self.registry, log_store)

    @classmethod
    def from_config(
        cls, config: Config, transport: Optional[DeliveryTransport] = None
    ) -> "WebhookService":
        """Build a service backed by the configured storefront."""
        from ..client.storefront_client import StorefrontClient

        return cls(
            store=StorefrontClient(config.store),
            log_store=DeliveryLogStore(
                path=config.delivery_log.path,
                max_entries=config.delivery_log.max_entries,
            ),
            transport=transport,
            delivery_timeout_seconds=config.delivery.timeout_seconds,
            response_message_limit=config.delivery.response_message_limit,
            user_agent=config.delivery.user_agent,
        )

    async def close(self) -> None:
        await self.store.close()

    async def __aenter__(self) -> "WebhookService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # Topics

    def list_topics(self) -> List[TopicInfo]:
        return list_topics()

    # Subscriptions

    async def list_subscriptions(self) -> List[Subscription]:
        return await self.registry.list()

    async def get_subscription(self, subscription_id: str) -> Subscription:
        return await self.registry.get(subscription_id)

    async def create_subscription(
        self,
        name: str,
        topic: str,
        delivery_url: str,
        secret: str = "",
        status: Union[SubscriptionStatus, str] = SubscriptionStatus.ACTIVE,
    ) -> Subscription:
        return await self.registry.create(
            Subscription(
                name=name,
                topic=topic,
                delivery_url=delivery_url,
                secret=secret,
                status=status,
            )
        )

    async def update_subscription(
        self, subscription_id: str, patch: Dict[str, Any]
    ) -> Subscription:
        return await self.registry.update(subscription_id, patch)

    async def delete_subscription(self, subscription_id: str) -> None:
        await self.registry.delete(subscription_id)

    async def set_status(
        self, subscription_id: str, status: Union[SubscriptionStatus, str]
    ) -> Subscription:
        return await self.registry.set_status(subscription_id, status)

    async def toggle_subscription(self, subscription_id: str) -> Subscription:
        return await self.registry.toggle(subscription_id)

    # Deliveries

    async def test_subscription(self, subscription_id: str) -> DeliveryLogEntry:
        """Send a test delivery to a stored subscription."""
        subscription = await self.registry.get(subscription_id)
        return await self.harness.test(subscription)

    def list_deliveries(self, subscription_id: Optional[str] = None) -> List[DeliveryLogEntry]:
        return self.log_store.list(subscription_id)

    def clear_deliveries(self) -> int:
        return self.log_store.clear()

    def record_delivery(
        self,
        topic: str,
        resource: str,
        event: str,
        delivery_id: str,
        delivery_url: str,
        status: Union[DeliveryStatus, str],
        subscription_id: Optional[str] = None,
        response_code: Optional[int] = None,
        response_message: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> DeliveryLogEntry:
        """
        Record a delivery reported by the storefront itself.

        Unlike test deliveries these may still be ``pending``.

        Raises:
            ValidationError: If the topic, status or payload is invalid
            StoreUnavailableError: If the entry could not be persisted
        """
        get_topic(topic)
        try:
            delivery_status = DeliveryStatus(status)
        except ValueError:
            raise ValidationError(
                f"Invalid delivery status: {status}",
                details={"allowed": [s.value for s in DeliveryStatus]},
            )

        entry = DeliveryLogEntry(
            id=self.log_store.new_entry_id(),
            subscription_id=str(subscription_id) if subscription_id is not None else None,
            topic=topic,
            resource=resource,
            event=event,
            delivery_id=delivery_id,
            delivery_url=delivery_url,
            status=delivery_status,
            response_code=response_code,
            response_message=response_message,
            payload=payload or {},
        )
        self.log_store.append(entry)

        logger.info(
            "Delivery recorded",
            subscription_id=entry.subscription_id,
            delivery_id=delivery_id,
            status=delivery_status.value,
        )
        return entry

    # Stats

    async def compute_stats(self) -> WebhookStats:
        return await self.aggregator.compute_stats()
