"""
Subscription store interface.

The registry never owns subscription state; it delegates to a store
that is the source of truth. ``StorefrontClient`` implements this
against the storefront REST API; ``InMemorySubscriptionStore`` keeps
subscriptions in process for tests and offline use.
"""

import asyncio
import dataclasses
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import structlog

from .errors import NotFoundError
from .models import Subscription, SubscriptionStatus, utc_now_iso

logger = structlog.get_logger(__name__)


class SubscriptionStore(ABC):
    """Durable storage for webhook subscriptions."""

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """Persist a new subscription and return it with its assigned id."""

    @abstractmethod
    async def get(self, subscription_id: str) -> Subscription:
        """
        Fetch a subscription.

        Raises:
            NotFoundError: If the id is unknown
        """

    @abstractmethod
    async def update(self, subscription_id: str, patch: Dict[str, Any]) -> Subscription:
        """
        Apply a partial update.

        Raises:
            NotFoundError: If the id is unknown
        """

    @abstractmethod
    async def delete(self, subscription_id: str) -> None:
        """
        Delete a subscription.

        Raises:
            NotFoundError: If the id is unknown
        """

    @abstractmethod
    async def list(self) -> List[Subscription]:
        """Return all subscriptions in store order."""

    async def close(self) -> None:
        """Release any resources held by the store."""


class InMemorySubscriptionStore(SubscriptionStore):
    """Process-local subscription store with sequential ids."""

    def __init__(self) -> None:
        self._subscriptions: Dict[str, Subscription] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def create(self, subscription: Subscription) -> Subscription:
        async with self._lock:
            now = utc_now_iso()
            stored = dataclasses.replace(
                subscription,
                id=str(self._next_id),
                date_created=now,
                date_modified=now,
            )
            self._next_id += 1
            self._subscriptions[stored.id] = stored

            logger.debug("Subscription stored", subscription_id=stored.id, topic=stored.topic)
            return dataclasses.replace(stored)

    async def get(self, subscription_id: str) -> Subscription:
        subscription = self._subscriptions.get(str(subscription_id))
        if subscription is None:
            raise NotFoundError(
                f"Subscription {subscription_id} not found",
                details={"subscription_id": subscription_id},
            )
        return dataclasses.replace(subscription)

    async def update(self, subscription_id: str, patch: Dict[str, Any]) -> Subscription:
        async with self._lock:
            current = await self.get(subscription_id)

            changes = dict(patch)
            if "status" in changes:
                changes["status"] = SubscriptionStatus(changes["status"])

            updated = dataclasses.replace(current, date_modified=utc_now_iso(), **changes)
            self._subscriptions[updated.id] = updated
            return dataclasses.replace(updated)

    async def delete(self, subscription_id: str) -> None:
        async with self._lock:
            if self._subscriptions.pop(str(subscription_id), None) is None:
                raise NotFoundError(
                    f"Subscription {subscription_id} not found",
                    details={"subscription_id": subscription_id},
                )

    async def list(self) -> List[Subscription]:
        return [dataclasses.replace(sub) for sub in self._subscriptions.values()]
