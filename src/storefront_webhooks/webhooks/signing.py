"""
HMAC-SHA256 signatures for webhook deliveries.

Signatures are computed over the exact bytes placed on the wire and
base64-encoded for the ``X-Webhook-Signature`` header, which is what
storefront-style receivers recompute on their side.
"""

import base64
import hashlib
import hmac
import secrets
from typing import Optional


def sign(payload: bytes, secret: str) -> Optional[str]:
    """
    Compute the delivery signature for a payload.

    Args:
        payload: Exact body bytes that will be transmitted
        secret: Shared subscription secret

    Returns:
        Base64 HMAC-SHA256 tag, or None when the secret is empty
        (the signature header is then omitted)
    """
    if not secret:
        return None

    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify(payload: bytes, secret: str, signature: Optional[str]) -> bool:
    """
    Check a candidate signature in constant time.

    An empty or missing signature never verifies, and neither does any
    signature checked against an empty secret.
    """
    if not secret or not signature:
        return False

    expected = sign(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def generate_secret(nbytes: int = 32) -> str:
    """Generate a random URL-safe secret for a new subscription."""
    return secrets.token_urlsafe(nbytes)
