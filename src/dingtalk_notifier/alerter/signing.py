"""Timestamp signature for secured DingTalk robots.

See https://open.dingtalk.com/document/group/customize-robot-security-settings
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
from urllib.parse import quote_plus

from dingtalk_notifier.alerter.errors import SigningError

logger = logging.getLogger(__name__)


def current_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def sign(secret: str, timestamp_millis: int) -> str:
    """Compute the URL-encoded signature for a secured robot request.

    HMAC-SHA256 of ``"{timestamp}\\n{secret}"`` keyed with the secret,
    base64-encoded, then percent-encoded so it can be embedded in a query
    string as-is.

    Args:
        secret: Shared robot secret.
        timestamp_millis: Epoch milliseconds sent alongside the signature.

    Returns:
        The percent-encoded signature.

    Raises:
        SigningError: If the key is empty or cannot be encoded.
    """
    if not secret:
        raise SigningError("Signing secret must not be empty")
    try:
        key = secret.encode("utf-8")
        string_to_sign = f"{timestamp_millis}\n{secret}".encode("utf-8")
    except UnicodeEncodeError as e:
        raise SigningError(f"Signing secret is not valid UTF-8: {e}") from e

    digest = hmac.new(key, string_to_sign, hashlib.sha256).digest()
    signature = quote_plus(base64.b64encode(digest).decode("ascii"))
    logger.debug(f"Calculated robot signature for timestamp {timestamp_millis}")
    return signature
