"""
Pytest configuration and fixtures for Storefront Webhooks tests.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from storefront_webhooks.config.settings import Config, DeliveryLogConfig, StoreConfig
from storefront_webhooks.webhooks.errors import TransportError
from storefront_webhooks.webhooks.log_store import DeliveryLogStore
from storefront_webhooks.webhooks.models import Subscription
from storefront_webhooks.webhooks.registry import SubscriptionRegistry
from storefront_webhooks.webhooks.service import WebhookService
from storefront_webhooks.webhooks.store import InMemorySubscriptionStore
from storefront_webhooks.webhooks.transport import DeliveryTransport, TransportResponse


class FakeTransport(DeliveryTransport):
    """Transport that records requests and replays a canned outcome."""

    def __init__(self, response: Optional[TransportResponse] = None, error: Optional[str] = None):
        self.response = response or TransportResponse(status_code=200, body="OK", reason="OK")
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    async def post(self, url, body, headers, timeout):
        self.requests.append({"url": url, "body": body, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise TransportError(self.error)
        return self.response


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration."""
    return Config(
        version="0.1.0-test",
        store=StoreConfig(
            store_url="http://localhost:8080",
            consumer_key="ck_test",
            consumer_secret="cs_test",
            timeout_seconds=2.0,
        ),
        delivery_log=DeliveryLogConfig(path=str(tmp_path / "deliveries.json"), max_entries=1000),
    )


@pytest.fixture
def subscription_store():
    return InMemorySubscriptionStore()


@pytest.fixture
def registry(subscription_store):
    return SubscriptionRegistry(subscription_store)


@pytest.fixture
def log_store(tmp_path):
    return DeliveryLogStore(path=tmp_path / "deliveries.json")


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def service(subscription_store, log_store, fake_transport):
    return WebhookService(subscription_store, log_store, transport=fake_transport)


@pytest.fixture
def order_subscription():
    return Subscription(
        name="Order Hook",
        topic="order.created",
        delivery_url="https://example.com/hook",
        secret="s3cr3t",
    )


@pytest.fixture
async def webhook_receiver():
    """
    Local HTTP endpoint that records deliveries.

    Set ``receiver["status"]`` to change the response code and
    ``receiver["delay"]`` to hold the response for that many seconds.
    """
    state: Dict[str, Any] = {"status": 200, "delay": 0, "requests": []}

    async def handler(request: web.Request) -> web.Response:
        state["requests"].append({"headers": dict(request.headers), "body": await request.read()})
        if state["delay"]:
            await asyncio.sleep(state["delay"])
        return web.Response(status=state["status"], text="received\nsecond line")

    app = web.Application()
    app.router.add_post("/hook", handler)

    server = TestServer(app)
    await server.start_server()
    state["url"] = str(server.make_url("/hook"))
    try:
        yield state
    finally:
        await server.close()


@pytest.fixture
def make_transport():
    """Factory for transports with a canned response or error."""
    return FakeTransport
