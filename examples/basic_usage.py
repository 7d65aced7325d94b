#!/usr/bin/env python3
"""
Basic usage example for Storefront Webhooks.

Runs a local receiver, registers a signed subscription in an in-memory
store and sends it a test delivery, without needing a real storefront.
"""

import asyncio
import json

from aiohttp import web

from storefront_webhooks import DeliveryLogStore, WebhookService
from storefront_webhooks.webhooks import InMemorySubscriptionStore, signing
from storefront_webhooks.webhooks.receiver import WebhookRequest

SECRET = signing.generate_secret()


async def receive(request: web.Request) -> web.Response:
    """Receiver side: reject anything not signed with our secret."""
    body = await request.read()
    webhook = WebhookRequest.from_headers(body, request.headers)
    if not webhook.is_authentic(SECRET):
        return web.Response(status=401, text="bad signature")

    event = webhook.parse_event()
    print(f"📬 Received {event.topic} (delivery {webhook.delivery_id})")
    return web.Response(text="ok")


async def main():
    """Run a test delivery against a local endpoint."""
    print("🚀 Starting Storefront Webhooks example")

    app = web.Application()
    app.router.add_post("/hook", receive)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 8765)
    await site.start()

    service = WebhookService(InMemorySubscriptionStore(), DeliveryLogStore())

    try:
        subscription = await service.create_subscription(
            name="Order Hook",
            topic="order.created",
            delivery_url="http://127.0.0.1:8765/hook",
            secret=SECRET,
        )
        print(f"✅ Created subscription {subscription.id}")

        entry = await service.test_subscription(subscription.id)
        print(f"📋 Delivery {entry.status.value}: {entry.response_code} {entry.response_message}")

        stats = await service.compute_stats()
        print("\n📊 Stats:")
        print(json.dumps(stats.to_dict(), indent=2))

    finally:
        await service.close()
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
