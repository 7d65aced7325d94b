"""
Subscription registry.

Validates subscriptions locally and delegates persistence to a
``SubscriptionStore``. Several subscriptions may be active for the
same topic at once; webhooks fan out, so there is no single-active
exclusivity here.
"""

import dataclasses
from typing import Any, Dict, List, Union
from urllib.parse import urlparse

import structlog

from .errors import ValidationError
from .models import Subscription, SubscriptionStatus
from .store import SubscriptionStore
from .topics import get_topic

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("name", "topic", "delivery_url", "secret", "status")


def validate_delivery_url(url: str) -> str:
    """
    Check that a delivery URL is an absolute http(s) URL.

    Raises:
        ValidationError: If the URL is malformed
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("Delivery URL is required", details={"delivery_url": url})
    if url != url.strip():
        raise ValidationError(
            "Delivery URL must not have surrounding whitespace",
            details={"delivery_url": url},
        )

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"Invalid delivery URL: {e}", details={"delivery_url": url})
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(
            "Invalid delivery URL - must be an absolute http:// or https:// URL",
            details={"delivery_url": url},
        )
    return url


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Subscription name must be a non-empty string", details={"name": name})
    return name


def _validate_status(status: Any) -> SubscriptionStatus:
    try:
        return SubscriptionStatus(status)
    except ValueError:
        raise ValidationError(
            f"Invalid status: {status}",
            details={"status": status, "allowed": [s.value for s in SubscriptionStatus]},
        )


def _validate_secret(secret: Any) -> str:
    if secret is None:
        return ""
    if not isinstance(secret, str):
        raise ValidationError("Secret must be a string")
    return secret


class SubscriptionRegistry:
    """CRUD facade over webhook subscriptions."""

    def __init__(self, store: SubscriptionStore):
        self.store = store

    async def create(self, subscription: Subscription) -> Subscription:
        """
        Validate and persist a new subscription.

        Args:
            subscription: Subscription to create; its id is ignored

        Returns:
            The persisted subscription with its store-assigned id

        Raises:
            ValidationError: If name, topic, URL or status is invalid
            StoreUnavailableError: If the store cannot be reached
        """
        candidate = dataclasses.replace(
            subscription,
            id=None,
            name=_validate_name(subscription.name),
            topic=get_topic(subscription.topic).id,
            delivery_url=validate_delivery_url(subscription.delivery_url),
            secret=_validate_secret(subscription.secret),
            status=_validate_status(subscription.status or SubscriptionStatus.ACTIVE),
        )

        created = await self.store.create(candidate)

        logger.info(
            "Subscription created",
            subscription_id=created.id,
            topic=created.topic,
            delivery_url=created.delivery_url,
            signed=created.has_secret,
        )
        return created

    async def get(self, subscription_id: str) -> Subscription:
        return await self.store.get(str(subscription_id))

    async def update(self, subscription_id: str, patch: Dict[str, Any]) -> Subscription:
        """
        Apply a partial update. Only the fields present in ``patch`` are
        validated.

        Raises:
            ValidationError: If the patch is empty or has invalid fields
            NotFoundError: If the subscription does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        if not patch:
            raise ValidationError("At least one field must be provided for update")

        unknown = sorted(set(patch) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(
                f"Unknown subscription fields: {', '.join(unknown)}",
                details={"unknown_fields": unknown, "allowed": list(UPDATABLE_FIELDS)},
            )

        changes: Dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = _validate_name(patch["name"])
        if "topic" in patch:
            changes["topic"] = get_topic(patch["topic"]).id
        if "delivery_url" in patch:
            changes["delivery_url"] = validate_delivery_url(patch["delivery_url"])
        if "secret" in patch:
            changes["secret"] = _validate_secret(patch["secret"])
        if "status" in patch:
            changes["status"] = _validate_status(patch["status"]).value

        updated = await self.store.update(str(subscription_id), changes)

        logger.info(
            "Subscription updated",
            subscription_id=updated.id,
            updated_fields=sorted(changes),
            status=updated.status.value,
        )
        return updated

    async def delete(self, subscription_id: str) -> None:
        """
        Delete a subscription. Deleting an absent id raises ``NotFoundError``.

        Historical delivery log entries are kept.
        """
        await self.store.delete(str(subscription_id))
        logger.info("Subscription deleted", subscription_id=subscription_id)

    async def list(self) -> List[Subscription]:
        return await self.store.list()

    async def set_status(
        self, subscription_id: str, status: Union[SubscriptionStatus, str]
    ) -> Subscription:
        """Change one subscription's status without touching any other."""
        return await self.update(subscription_id, {"status": _validate_status(status).value})

    async def toggle(self, subscription_id: str) -> Subscription:
        """Pause an active subscription, otherwise activate it."""
        current = await self.get(subscription_id)
        new_status = (
            SubscriptionStatus.PAUSED if current.is_active else SubscriptionStatus.ACTIVE
        )
        return await self.set_status(subscription_id, new_status)
