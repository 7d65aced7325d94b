"""
Unit tests for the storefront REST subscription store.
"""

import base64

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as HTTPTestServer

from storefront_webhooks.client.storefront_client import StorefrontClient
from storefront_webhooks.config.settings import StoreConfig
from storefront_webhooks.webhooks.errors import (
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from storefront_webhooks.webhooks.models import Subscription, SubscriptionStatus
from storefront_webhooks.webhooks.registry import SubscriptionRegistry

EXPECTED_AUTH = "Basic " + base64.b64encode(b"ck_test:cs_test").decode()


def make_storefront_app(state):
    """Minimal storefront webhooks API."""

    @web.middleware
    async def auth(request, handler):
        if request.headers.get("Authorization") != EXPECTED_AUTH:
            return web.json_response({"message": "Invalid signature"}, status=401)
        if state.get("fail"):
            return web.json_response({"message": "Maintenance"}, status=503)
        if "raw_body" in state:
            return web.Response(
                text=state["raw_body"], content_type=state.get("raw_type", "text/html")
            )
        return await handler(request)

    def find(request):
        webhook = state["webhooks"].get(request.match_info["id"])
        if webhook is None:
            raise web.HTTPNotFound(
                text='{"message": "Invalid ID."}', content_type="application/json"
            )
        return webhook

    async def list_webhooks(request):
        per_page = int(request.query.get("per_page", 10))
        page = int(request.query.get("page", 1))
        items = list(state["webhooks"].values())
        return web.json_response(items[(page - 1) * per_page : page * per_page])

    async def create_webhook(request):
        data = await request.json()
        if data.get("topic") == "bogus":
            return web.json_response({"message": "Invalid topic"}, status=400)
        state["next_id"] += 1
        webhook = {
            **data,
            "id": state["next_id"],
            "date_created": "2024-01-01T00:00:00",
            "date_modified": "2024-01-01T00:00:00",
        }
        state["webhooks"][str(webhook["id"])] = webhook
        return web.json_response(webhook, status=201)

    async def get_webhook(request):
        return web.json_response(find(request))

    async def update_webhook(request):
        webhook = find(request)
        webhook.update(await request.json())
        return web.json_response(webhook)

    async def delete_webhook(request):
        webhook = find(request)
        state["delete_params"].append(dict(request.query))
        del state["webhooks"][str(webhook["id"])]
        return web.json_response(webhook)

    async def list_deliveries(request):
        find(request)
        return web.json_response([{"id": 1, "response_code": "200"}])

    app = web.Application(middlewares=[auth])
    app.router.add_get("/wp-json/wc/v3/webhooks", list_webhooks)
    app.router.add_post("/wp-json/wc/v3/webhooks", create_webhook)
    app.router.add_get("/wp-json/wc/v3/webhooks/{id}", get_webhook)
    app.router.add_put("/wp-json/wc/v3/webhooks/{id}", update_webhook)
    app.router.add_delete("/wp-json/wc/v3/webhooks/{id}", delete_webhook)
    app.router.add_get("/wp-json/wc/v3/webhooks/{id}/deliveries", list_deliveries)
    return app


@pytest.fixture
async def storefront():
    state = {"webhooks": {}, "next_id": 0, "delete_params": []}
    server = HTTPTestServer(make_storefront_app(state))
    await server.start_server()
    state["url"] = str(server.make_url("")).rstrip("/")
    try:
        yield state
    finally:
        await server.close()


@pytest.fixture
async def client(storefront):
    client = StorefrontClient(
        StoreConfig(
            store_url=storefront["url"],
            consumer_key="ck_test",
            consumer_secret="cs_test",
        )
    )
    try:
        yield client
    finally:
        await client.disconnect()


@pytest.fixture
def new_subscription():
    return Subscription(
        name="Order Hook",
        topic="order.created",
        delivery_url="https://example.com/hook",
        secret="s3cr3t",
    )


class TestStorefrontClient:
    """Test REST CRUD and error mapping."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, client, new_subscription):
        created = await client.create(new_subscription)
        fetched = await client.get(created.id)

        assert created.id == "1"
        assert fetched.name == "Order Hook"
        assert fetched.secret == "s3cr3t"
        assert fetched.status == SubscriptionStatus.ACTIVE
        assert fetched.date_created == "2024-01-01T00:00:00"

    @pytest.mark.asyncio
    async def test_update(self, client, new_subscription):
        created = await client.create(new_subscription)

        updated = await client.update(created.id, {"status": "paused"})

        assert updated.status == SubscriptionStatus.PAUSED
        assert updated.name == "Order Hook"

    @pytest.mark.asyncio
    async def test_delete_forces_and_reports_missing(self, client, storefront, new_subscription):
        created = await client.create(new_subscription)

        await client.delete(created.id)

        assert storefront["delete_params"] == [{"force": "true"}]
        with pytest.raises(NotFoundError):
            await client.delete(created.id)

    @pytest.mark.asyncio
    async def test_list_pages_through_results(self, client, storefront, new_subscription):
        for n in range(1, 106):
            storefront["webhooks"][str(n)] = {**new_subscription.to_dict(), "id": n}

        subscriptions = await client.list()

        assert len(subscriptions) == 105
        assert [s.id for s in subscriptions[:3]] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_list_deliveries(self, client, new_subscription):
        created = await client.create(new_subscription)
        assert await client.list_deliveries(created.id) == [{"id": 1, "response_code": "200"}]

    @pytest.mark.asyncio
    async def test_get_missing(self, client):
        with pytest.raises(NotFoundError):
            await client.get("42")

    @pytest.mark.asyncio
    async def test_bad_request_is_validation_error(self, client, new_subscription):
        new_subscription.topic = "bogus"
        with pytest.raises(ValidationError):
            await client.create(new_subscription)

    @pytest.mark.asyncio
    async def test_server_error_is_store_unavailable(self, client, storefront):
        storefront["fail"] = True

        with pytest.raises(StoreUnavailableError) as exc_info:
            await client.list()

        assert "503" in exc_info.value.message
        assert "Maintenance" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_json_success_is_store_unavailable(self, client, storefront):
        storefront["raw_body"] = "<html>maintenance</html>"

        with pytest.raises(StoreUnavailableError) as exc_info:
            await client.list()

        assert exc_info.value.message == "Storefront returned invalid JSON"

    @pytest.mark.asyncio
    async def test_unexpected_list_shape_is_store_unavailable(self, client, storefront):
        storefront["raw_body"] = '{"webhooks": []}'
        storefront["raw_type"] = "application/json"

        with pytest.raises(StoreUnavailableError):
            await client.list()

    @pytest.mark.asyncio
    async def test_unknown_status_is_store_unavailable(
        self, client, storefront, new_subscription
    ):
        storefront["webhooks"]["7"] = {**new_subscription.to_dict(), "id": 7, "status": "archived"}

        with pytest.raises(StoreUnavailableError):
            await client.get("7")

    @pytest.mark.asyncio
    async def test_wrong_credentials_is_store_unavailable(self, storefront):
        client = StorefrontClient(
            StoreConfig(store_url=storefront["url"], consumer_key="ck", consumer_secret="cs")
        )
        try:
            with pytest.raises(StoreUnavailableError):
                await client.list()
        finally:
            await client.disconnect()

    @pytest.mark.asyncio
    async def test_unreachable_store(self):
        client = StorefrontClient(
            StoreConfig(
                store_url="http://127.0.0.1:1",
                consumer_key="ck",
                consumer_secret="cs",
                timeout_seconds=2,
            )
        )
        try:
            with pytest.raises(StoreUnavailableError):
                await client.list()
        finally:
            await client.disconnect()

    @pytest.mark.asyncio
    async def test_not_configured(self, monkeypatch):
        for var in ("STOREFRONT_URL", "STOREFRONT_CONSUMER_KEY", "STOREFRONT_CONSUMER_SECRET"):
            monkeypatch.delenv(var, raising=False)
        client = StorefrontClient(StoreConfig())

        assert not client.is_configured
        with pytest.raises(StoreUnavailableError):
            await client.list()


@pytest.mark.asyncio
async def test_registry_over_storefront(client, new_subscription):
    registry = SubscriptionRegistry(client)

    created = await registry.create(new_subscription)
    paused = await registry.toggle(created.id)

    assert paused.status == SubscriptionStatus.PAUSED
    assert [s.id for s in await registry.list()] == [created.id]
