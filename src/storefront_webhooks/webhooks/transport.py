"""
HTTP transport for webhook deliveries.

The delivery harness only needs to POST raw bytes with arbitrary
headers and observe the status and body, so the transport is a
narrow interface with one aiohttp implementation.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
import structlog

from .errors import TransportError

logger = structlog.get_logger(__name__)


@dataclass
class TransportResponse:
    """Status and body observed for a delivery request."""

    status_code: int
    body: str = ""
    reason: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class DeliveryTransport(ABC):
    """Issues HTTP POST requests to subscription endpoints."""

    @abstractmethod
    async def post(
        self,
        url: str,
        body: bytes,
        headers: Dict[str, str],
        timeout: float,
    ) -> TransportResponse:
        """
        POST ``body`` to ``url``.

        Raises:
            TransportError: If no HTTP response was obtained (timeout,
                refused connection, TLS failure, malformed response)
        """


class AiohttpTransport(DeliveryTransport):
    """Delivery transport backed by a short-lived aiohttp session per request."""

    def __init__(self, max_body_chars: int = 1000):
        self.max_body_chars = max_body_chars

    async def post(
        self,
        url: str,
        body: bytes,
        headers: Dict[str, str],
        timeout: float,
    ) -> TransportResponse:
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as session:
                async with session.post(url, data=body, headers=headers) as response:
                    response_body = await response.text(errors="replace")
                    return TransportResponse(
                        status_code=response.status,
                        body=response_body[: self.max_body_chars],
                        reason=response.reason,
                    )

        except asyncio.TimeoutError as e:
            logger.warning("Webhook request timed out", url=url, timeout_seconds=timeout)
            raise TransportError(f"Request timeout after {timeout:g}s", original_error=e)

        except aiohttp.ClientError as e:
            logger.warning("Webhook request failed", url=url, error=str(e))
            raise TransportError(str(e) or type(e).__name__, original_error=e)
