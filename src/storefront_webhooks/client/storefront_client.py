"""
Storefront REST client for webhook subscriptions.

Implements ``SubscriptionStore`` against a WooCommerce-compatible
``/wp-json/wc/<version>/webhooks`` API, authenticating with the
consumer key pair as HTTP Basic credentials.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from ..config.settings import StoreConfig
from ..webhooks.errors import NotFoundError, StoreUnavailableError, ValidationError
from ..webhooks.models import Subscription
from ..webhooks.store import SubscriptionStore

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100


class StorefrontClient(SubscriptionStore):
    """
    Subscription store backed by the storefront's REST API.

    Keeps one persistent aiohttp session, created on first use.
    """

    def __init__(self, config: StoreConfig):
        """
        Initialize storefront client.

        Args:
            config: Store connection settings
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None
        self._connection_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def base_url(self) -> str:
        return f"{self.config.store_url}/wp-json/wc/{self.config.api_version}"

    async def connect(self) -> None:
        """Open the HTTP session."""
        async with self._connection_lock:
            if self._session is not None and not self._session.closed:
                return

            if not self.is_configured:
                raise StoreUnavailableError("Storefront is not configured")

            self._session = aiohttp.ClientSession(
                auth=aiohttp.BasicAuth(self.config.consumer_key, self.config.consumer_secret),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                headers={"Content-Type": "application/json"},
            )
            logger.info("Connected to storefront API", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        async with self._connection_lock:
            if self._session is not None:
                try:
                    await self._session.close()
                    logger.info("Disconnected from storefront API")
                finally:
                    self._session = None

    async def close(self) -> None:
        await self.disconnect()

    async def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue a request and translate failures into webhook errors.

        Raises:
            NotFoundError: On HTTP 404
            ValidationError: On HTTP 400
            StoreUnavailableError: On any other failure
        """
        await self.connect()
        url = f"{self.base_url}/{endpoint}"

        try:
            async with self._session.request(method, url, json=payload, params=params) as resp:
                if 200 <= resp.status < 300:
                    try:
                        return await resp.json(content_type=None)
                    except ValueError as e:
                        logger.error(
                            "Storefront returned invalid JSON", method=method, endpoint=endpoint
                        )
                        raise StoreUnavailableError(
                            "Storefront returned invalid JSON",
                            original_error=e,
                            details={"status": resp.status, "endpoint": endpoint},
                        )

                message = await self._error_message(resp)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Storefront request failed", method=method, endpoint=endpoint, error=str(e))
            raise StoreUnavailableError(
                f"Storefront request failed: {str(e) or type(e).__name__}", original_error=e
            )

        details = {"status": resp.status, "endpoint": endpoint}
        if resp.status == 404:
            raise NotFoundError(message, details=details)
        if resp.status == 400:
            raise ValidationError(message, details=details)

        logger.error(
            "Storefront API error",
            method=method,
            endpoint=endpoint,
            status=resp.status,
            message=message,
        )
        raise StoreUnavailableError(
            f"Storefront API error: {resp.status} - {message}", details=details
        )

    @staticmethod
    async def _error_message(resp: aiohttp.ClientResponse) -> str:
        try:
            data = await resp.json(content_type=None)
        except (ValueError, aiohttp.ClientError):
            return "Unknown error"
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return "Unknown error"

    @staticmethod
    def _to_subscription(data: Any) -> Subscription:
        try:
            return Subscription.from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise StoreUnavailableError(
                f"Storefront returned an invalid webhook: {e}", original_error=e
            )

    async def create(self, subscription: Subscription) -> Subscription:
        payload = subscription.to_dict()
        for read_only in ("id", "date_created", "date_modified"):
            payload.pop(read_only)

        data = await self._request("POST", "webhooks", payload)
        return self._to_subscription(data)

    async def get(self, subscription_id: str) -> Subscription:
        data = await self._request("GET", f"webhooks/{subscription_id}")
        return self._to_subscription(data)

    async def update(self, subscription_id: str, patch: Dict[str, Any]) -> Subscription:
        data = await self._request("PUT", f"webhooks/{subscription_id}", patch)
        return self._to_subscription(data)

    async def delete(self, subscription_id: str) -> None:
        # Storefront webhooks cannot be trashed, only force-deleted
        await self._request("DELETE", f"webhooks/{subscription_id}", params={"force": "true"})

    async def list(self) -> List[Subscription]:
        subscriptions: List[Subscription] = []
        page = 1
        while True:
            data = await self._request(
                "GET", "webhooks", params={"per_page": str(PAGE_SIZE), "page": str(page)}
            )
            if not isinstance(data, list):
                raise StoreUnavailableError(
                    "Storefront returned an unexpected webhook list",
                    details={"endpoint": "webhooks", "page": page},
                )
            subscriptions.extend(self._to_subscription(item) for item in data)
            if len(data) < PAGE_SIZE:
                break
            page += 1

        logger.debug("Subscriptions listed", count=len(subscriptions))
        return subscriptions

    async def list_deliveries(self, subscription_id: str) -> List[Dict[str, Any]]:
        """Delivery records the storefront keeps for a subscription."""
        return await self._request("GET", f"webhooks/{subscription_id}/deliveries")
