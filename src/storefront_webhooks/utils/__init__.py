"""Utility modules for Storefront Webhooks."""

from .logging import setup_logging

__all__ = ["setup_logging"]
