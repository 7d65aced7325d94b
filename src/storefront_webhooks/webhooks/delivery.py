"""
Test delivery harness.

Builds a synthetic event for a subscription, signs the exact bytes it
will send, POSTs them to the subscription's endpoint and records the
outcome in the delivery log. A test is a single attempt: there are no
retries, and a failed delivery is reported through the log entry's
status rather than an exception.
"""

import time
import uuid
from typing import Dict, Optional

import structlog

from .errors import TransportError, ValidationError
from .events import (
    HEADER_DELIVERY_ID,
    HEADER_EVENT,
    HEADER_RESOURCE,
    HEADER_SIGNATURE,
    HEADER_TOPIC,
    HEADER_WEBHOOK_ID,
    WebhookEvent,
    create_test_event,
)
from .log_store import DeliveryLogStore
from .models import DeliveryLogEntry, DeliveryStatus, Subscription
from .signing import sign
from .transport import AiohttpTransport, DeliveryTransport, TransportResponse

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "Storefront-Webhooks/0.1"


def summarize_response(response: TransportResponse, limit: int) -> Optional[str]:
    """First non-empty line of the response body, else the HTTP reason."""
    for line in response.body.splitlines():
        if line.strip():
            return line.strip()[:limit]
    if response.reason:
        return response.reason[:limit]
    return None


class DeliveryTestHarness:
    """
    Drives one-off test deliveries against subscription endpoints.

    Args:
        log_store: Delivery log that receives one entry per test
        transport: HTTP transport (aiohttp by default)
        timeout_seconds: Upper bound on a single delivery attempt
        response_message_limit: Max characters of response text kept in the log
        user_agent: User-Agent header sent with deliveries
    """

    def __init__(
        self,
        log_store: DeliveryLogStore,
        transport: Optional[DeliveryTransport] = None,
        timeout_seconds: float = 10.0,
        response_message_limit: int = 500,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.log_store = log_store
        self.transport = transport or AiohttpTransport()
        self.timeout_seconds = timeout_seconds
        self.response_message_limit = response_message_limit
        self.user_agent = user_agent

    async def test(self, subscription: Subscription) -> DeliveryLogEntry:
        """
        Send a test event to a subscription's endpoint.

        Returns:
            The delivery log entry recorded for the attempt

        Raises:
            ValidationError: If the subscription has no delivery URL
            StoreUnavailableError: If the log entry could not be persisted
        """
        if not subscription.delivery_url:
            raise ValidationError(
                "Subscription has no delivery URL",
                details={"subscription_id": subscription.id},
            )

        delivery_id = str(uuid.uuid4())
        event = create_test_event(subscription.topic, delivery_id=delivery_id)
        body = event.to_bytes()
        headers = self._prepare_headers(subscription, event, body)

        logger.info(
            "Starting webhook test delivery",
            subscription_id=subscription.id,
            delivery_id=delivery_id,
            topic=subscription.topic,
            url=subscription.delivery_url,
            signed=HEADER_SIGNATURE in headers,
        )

        start_time = time.time()
        response_code: Optional[int] = None
        try:
            response = await self.transport.post(
                subscription.delivery_url,
                body,
                headers,
                timeout=self.timeout_seconds,
            )
            response_code = response.status_code
            response_message = summarize_response(response, self.response_message_limit)
            status = DeliveryStatus.SUCCESS if response.is_success else DeliveryStatus.FAILED

        except TransportError as e:
            response_message = e.message[: self.response_message_limit]
            status = DeliveryStatus.FAILED

        duration_ms = (time.time() - start_time) * 1000

        entry = self.log_store.append(
            DeliveryLogEntry(
                id=self.log_store.new_entry_id(),
                subscription_id=subscription.id,
                topic=subscription.topic,
                resource=event.resource,
                event=event.event,
                delivery_id=delivery_id,
                delivery_url=subscription.delivery_url,
                created_at=event.created_at,
                status=status,
                response_code=response_code,
                response_message=response_message,
                payload=event.to_dict(),
            )
        )

        log = logger.info if status == DeliveryStatus.SUCCESS else logger.warning
        log(
            "Webhook test delivery completed",
            subscription_id=subscription.id,
            delivery_id=delivery_id,
            status=status.value,
            response_code=response_code,
            duration_ms=round(duration_ms, 2),
        )
        return entry

    def _prepare_headers(
        self, subscription: Subscription, event: WebhookEvent, body: bytes
    ) -> Dict[str, str]:
        """Prepare HTTP headers for a delivery of ``body``."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
            HEADER_TOPIC: event.topic,
            HEADER_RESOURCE: event.resource,
            HEADER_EVENT: event.event,
            HEADER_DELIVERY_ID: event.id,
        }

        signature = sign(body, subscription.secret)
        if signature:
            headers[HEADER_SIGNATURE] = signature

        if subscription.id is not None:
            headers[HEADER_WEBHOOK_ID] = str(subscription.id)

        return headers
