"""Alert dispatcher for DingTalk robot delivery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from dingtalk_notifier.alerter.channels.dingtalk import DingTalkChannel
from dingtalk_notifier.alerter.errors import AlertDeliveryError
from dingtalk_notifier.alerter.models import DispatchResult
from dingtalk_notifier.alerter.webhook import redact_webhook_url, resolve_webhook

if TYPE_CHECKING:
    from dingtalk_notifier.alerter.formatter import AlertFormatter
    from dingtalk_notifier.alerter.models import AlertContent, AlertDestinationConfig

logger = logging.getLogger(__name__)


class AlertNotifier(Protocol):
    """Protocol for alert notifiers."""

    name: str

    async def notify(
        self, config: AlertDestinationConfig, content: AlertContent
    ) -> bool:
        """Deliver an alert. Returns True on success."""
        ...


class NotificationDispatcher:
    """Composes, signs and delivers alerts to a DingTalk robot.

    Each call is independent: one payload, one resolved URL, one HTTP
    attempt. No error crosses the dispatch boundary; callers only see
    whether the alert was delivered.
    """

    def __init__(
        self,
        formatter: AlertFormatter,
        channel: DingTalkChannel | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            formatter: Builds payloads from alert content.
            channel: Channel performing the HTTP call.
        """
        self.formatter = formatter
        self.channel = channel or DingTalkChannel()
        self.name = "dingtalk"

    async def deliver(
        self,
        config: AlertDestinationConfig,
        content: AlertContent,
        *,
        timestamp_millis: int | None = None,
    ) -> DispatchResult:
        """Deliver an alert and report the outcome with its failure category.

        Args:
            config: Destination configuration.
            content: Alert to send.
            timestamp_millis: Signing timestamp override for secured robots.

        Returns:
            DispatchResult describing success or the error that stopped it.
        """
        safe_url: str | None = None
        try:
            payload = self.formatter.compose(config, content)
            url = resolve_webhook(config, timestamp_millis=timestamp_millis)
            safe_url = redact_webhook_url(url)
            response = await self.channel.send(url, payload)
        except AlertDeliveryError as e:
            logger.error(
                f"Failed to send DingTalk alert ({type(e).__name__}), "
                f"url: {safe_url}: {e}"
            )
            return DispatchResult(delivered=False, url=safe_url, error=e)
        except Exception as e:
            logger.exception(f"Unexpected error sending DingTalk alert, url: {safe_url}")
            return DispatchResult(
                delivered=False, url=safe_url, error=AlertDeliveryError(str(e))
            )

        logger.info(f"DingTalk alert delivered: {content.title}")
        return DispatchResult(delivered=True, url=safe_url, response=response)

    async def dispatch(
        self, config: AlertDestinationConfig, content: AlertContent
    ) -> bool:
        """Deliver an alert.

        Returns:
            True if the robot accepted the message, False otherwise.
        """
        result = await self.deliver(config, content)
        return result.delivered

    async def notify(
        self, config: AlertDestinationConfig, content: AlertContent
    ) -> bool:
        """AlertNotifier entry point; same as dispatch()."""
        return await self.dispatch(config, content)
