"""
Command-line interface for Storefront Webhooks.

Manages subscriptions on the configured storefront, sends test
deliveries and inspects the local delivery log.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click
import structlog

from .config.settings import Config, create_default_config, load_config
from .utils.logging import setup_logging
from .webhooks import signing
from .webhooks.errors import WebhookError
from .webhooks.models import SubscriptionStatus
from .webhooks.service import WebhookService
from .webhooks.topics import Topic, list_topics

logger = structlog.get_logger(__name__)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def _run(ctx: click.Context, operation: Callable[[WebhookService], Awaitable[Any]]) -> Any:
    """Run an operation against a service built from the CLI config."""
    config: Config = ctx.obj["config"]

    async def runner() -> Any:
        async with WebhookService.from_config(config) as service:
            return await operation(service)

    try:
        return asyncio.run(runner())
    except WebhookError as e:
        logger.error("Command failed", error_code=e.code, error=e.message)
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
@click.version_option(package_name="storefront-webhooks")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path] = None, log_level: Optional[str] = None):
    """Storefront Webhooks - manage and test storefront webhook subscriptions."""
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand == "init":
        return

    config = load_config(config_path=config_path)
    if log_level:
        config.logging.log_level = log_level.upper()

    setup_logging(config.logging.log_level, json_output=config.logging.json_output)
    ctx.obj["config"] = config


@cli.command(name="init")
@click.option(
    "--path",
    "-p",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to save configuration file",
)
def init_config(config_path: Optional[Path] = None) -> None:
    """Initialize a configuration file with default settings."""
    config_path = config_path or Path("config.json")

    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}")
        if not click.confirm("Overwrite?"):
            return

    try:
        create_default_config(config_path)
    except OSError as e:
        click.echo(f"Failed to create configuration file: {e}", err=True)
        sys.exit(1)

    click.echo(f"Created configuration file: {config_path}")
    click.echo("\nNext steps:")
    click.echo("1. Set environment variables:")
    click.echo("   export STOREFRONT_URL='https://shop.example.com'")
    click.echo("   export STOREFRONT_CONSUMER_KEY='ck_...'")
    click.echo("   export STOREFRONT_CONSUMER_SECRET='cs_...'")
    click.echo(f"2. Run: storefront-webhooks -c {config_path} list")


@cli.command()
def topics() -> None:
    """List supported webhook topics."""
    _echo_json([info.to_dict() for info in list_topics()])


@cli.command(name="list")
@click.pass_context
def list_subscriptions(ctx: click.Context) -> None:
    """List subscriptions held by the storefront."""

    async def operation(service: WebhookService) -> Any:
        return await service.list_subscriptions()

    subscriptions = _run(ctx, operation)
    _echo_json([sub.to_dict(include_secret=False) for sub in subscriptions])


@cli.command()
@click.option("--name", required=True, help="Display name")
@click.option(
    "--topic",
    required=True,
    type=click.Choice([t.value for t in Topic]),
    help="Event topic",
)
@click.option("--url", "delivery_url", required=True, help="Delivery URL")
@click.option("--secret", default="", help="Signing secret (empty for unsigned)")
@click.option(
    "--generate-secret", "generate", is_flag=True, help="Generate a random signing secret"
)
@click.option(
    "--status",
    type=click.Choice([s.value for s in SubscriptionStatus]),
    default=SubscriptionStatus.ACTIVE.value,
    show_default=True,
)
@click.pass_context
def create(
    ctx: click.Context,
    name: str,
    topic: str,
    delivery_url: str,
    secret: str,
    generate: bool,
    status: str,
) -> None:
    """Create a subscription."""
    if generate:
        secret = signing.generate_secret()

    async def operation(service: WebhookService) -> Any:
        return await service.create_subscription(
            name=name, topic=topic, delivery_url=delivery_url, secret=secret, status=status
        )

    _echo_json(_run(ctx, operation).to_dict())


@cli.command()
@click.argument("subscription_id")
@click.option("--name", help="Display name")
@click.option("--topic", type=click.Choice([t.value for t in Topic]), help="Event topic")
@click.option("--url", "delivery_url", help="Delivery URL")
@click.option("--secret", help="Signing secret (empty string removes it)")
@click.pass_context
def update(
    ctx: click.Context,
    subscription_id: str,
    name: Optional[str],
    topic: Optional[str],
    delivery_url: Optional[str],
    secret: Optional[str],
) -> None:
    """Update fields of a subscription."""
    patch = {
        key: value
        for key, value in {
            "name": name,
            "topic": topic,
            "delivery_url": delivery_url,
            "secret": secret,
        }.items()
        if value is not None
    }

    async def operation(service: WebhookService) -> Any:
        return await service.update_subscription(subscription_id, patch)

    _echo_json(_run(ctx, operation).to_dict(include_secret=False))


@cli.command()
@click.argument("subscription_id")
@click.confirmation_option(prompt="Delete this subscription?")
@click.pass_context
def delete(ctx: click.Context, subscription_id: str) -> None:
    """Delete a subscription. Its delivery log entries are kept."""

    async def operation(service: WebhookService) -> Any:
        await service.delete_subscription(subscription_id)

    _run(ctx, operation)
    click.echo(f"Deleted subscription {subscription_id}")


def _status_command(status: SubscriptionStatus, help_text: str) -> click.Command:
    @click.argument("subscription_id")
    @click.pass_context
    def command(ctx: click.Context, subscription_id: str) -> None:
        async def operation(service: WebhookService) -> Any:
            return await service.set_status(subscription_id, status)

        _echo_json(_run(ctx, operation).to_dict(include_secret=False))

    command.__doc__ = help_text
    return click.command()(command)


cli.add_command(_status_command(SubscriptionStatus.PAUSED, "Pause a subscription."), "pause")
cli.add_command(_status_command(SubscriptionStatus.ACTIVE, "Activate a subscription."), "resume")
cli.add_command(
    _status_command(SubscriptionStatus.DISABLED, "Disable a subscription."), "disable"
)


@cli.command(name="test")
@click.argument("subscription_id")
@click.pass_context
def test_subscription(ctx: click.Context, subscription_id: str) -> None:
    """Send a signed test delivery to a subscription's endpoint."""

    async def operation(service: WebhookService) -> Any:
        return await service.test_subscription(subscription_id)

    entry = _run(ctx, operation)
    _echo_json(entry.to_dict())
    if not entry.is_successful:
        sys.exit(2)


@cli.command()
@click.option("--subscription", "subscription_id", help="Only show one subscription's entries")
@click.option("--limit", type=int, default=50, show_default=True)
@click.pass_context
def logs(ctx: click.Context, subscription_id: Optional[str], limit: int) -> None:
    """Show recent delivery log entries, newest first."""

    async def operation(service: WebhookService) -> Any:
        return service.list_deliveries(subscription_id)

    entries = _run(ctx, operation)
    _echo_json([entry.to_dict() for entry in entries[:limit]])


@cli.command(name="clear-logs")
@click.confirmation_option(prompt="Permanently clear the delivery log?")
@click.pass_context
def clear_logs(ctx: click.Context) -> None:
    """Clear the delivery log."""

    async def operation(service: WebhookService) -> Any:
        return service.clear_deliveries()

    removed = _run(ctx, operation)
    click.echo(f"Removed {removed} log entries")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show subscription and delivery statistics."""

    async def operation(service: WebhookService) -> Any:
        return await service.compute_stats()

    _echo_json(_run(ctx, operation).to_dict())


if __name__ == "__main__":
    cli()
