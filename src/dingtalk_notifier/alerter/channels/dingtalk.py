"""DingTalk custom robot channel implementation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from dingtalk_notifier.alerter.errors import (
    EmptyResponseError,
    ProviderError,
    TransportError,
)
from dingtalk_notifier.alerter.models import RemoteResponse
from dingtalk_notifier.alerter.webhook import redact_webhook_url

if TYPE_CHECKING:
    from dingtalk_notifier.alerter.models import OutboundPayload

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
JSON_HEADERS = {"Content-Type": "application/json"}


class DingTalkChannel:
    """Posts markdown payloads to a DingTalk robot webhook.

    Exactly one HTTP attempt is made per call. Failures are raised as
    AlertDeliveryError subclasses for the dispatcher to classify.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize DingTalk channel.

        Args:
            timeout: HTTP request timeout in seconds.
            client: Shared client to post with. When omitted a short-lived
                client is opened per request.
        """
        self.timeout = timeout
        self.name = "dingtalk"
        self._client = client

    async def _post(self, url: str, body: dict[str, object]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=body, headers=JSON_HEADERS)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=body, headers=JSON_HEADERS)

    async def send(self, url: str, payload: OutboundPayload) -> RemoteResponse:
        """Send a payload to the robot and check its reply.

        Args:
            url: Resolved webhook URL, including token and signature.
            payload: Message to deliver.

        Returns:
            The provider's response when ``errcode`` is 0.

        Raises:
            TransportError: On connection errors, timeouts, non-2xx status
                or an unparseable body.
            EmptyResponseError: If the provider returned no body.
            ProviderError: If the provider returned a non-zero errcode.
        """
        safe_url = redact_webhook_url(url)

        try:
            response = await self._post(url, payload.to_dict())
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportError(
                f"DingTalk robot request timed out, url: {safe_url}", url=safe_url
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"DingTalk robot request failed, url: {safe_url}: {e}", url=safe_url
            ) from e

        if not response.content:
            raise EmptyResponseError(safe_url)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"DingTalk robot returned invalid JSON, url: {safe_url}", url=safe_url
            ) from e

        if data is None:
            raise EmptyResponseError(safe_url)

        try:
            result = RemoteResponse.from_dict(data)
        except ValueError as e:
            raise TransportError(
                f"Unexpected DingTalk robot response, url: {safe_url}: {e}", url=safe_url
            ) from e

        if not result.ok:
            raise ProviderError(result.errcode, result.errmsg, url=safe_url)

        return result
