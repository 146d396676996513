"""Webhook URL construction for DingTalk robots."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote

from dingtalk_notifier.alerter.models import TOKEN_PARAM
from dingtalk_notifier.alerter.signing import current_millis, sign

if TYPE_CHECKING:
    from dingtalk_notifier.alerter.models import AlertDestinationConfig

logger = logging.getLogger(__name__)

DINGTALK_WEBHOOK_BASE = f"https://oapi.dingtalk.com/robot/send?{TOKEN_PARAM}"

_SECRET_PARAMS = re.compile(r"\b(access_token|sign)=[^&]*")


def redact_webhook_url(url: str) -> str:
    """Mask the access token and signature in a webhook URL for logging."""
    return _SECRET_PARAMS.sub(r"\1=***", url)


def resolve_webhook(
    config: AlertDestinationConfig,
    *,
    timestamp_millis: int | None = None,
) -> str:
    """Build the destination URL for one dispatch.

    The base (default or ``config.webhook_url``) ends right before the
    access token value. In secured mode ``timestamp`` and ``sign`` follow,
    in that order.

    Args:
        config: Destination configuration.
        timestamp_millis: Signing timestamp; defaults to the current time.

    Returns:
        The fully resolved webhook URL.

    Raises:
        SigningError: If secured mode is on and signing fails.
    """
    base = config.webhook_url or DINGTALK_WEBHOOK_BASE
    url = f"{base}{quote(config.token, safe='')}"

    if config.secret_enabled:
        timestamp = current_millis() if timestamp_millis is None else timestamp_millis
        signature = sign(config.secret or "", timestamp)
        url = f"{url}&timestamp={timestamp}&sign={signature}"

    logger.debug(f"Resolved DingTalk robot url: {redact_webhook_url(url)}")
    return url
