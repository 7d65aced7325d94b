"""Storefront API client."""

from .storefront_client import StorefrontClient

__all__ = ["StorefrontClient"]
