"""Alerting layer - DingTalk robot notification delivery."""

from dingtalk_notifier.alerter.channels.dingtalk import DingTalkChannel
from dingtalk_notifier.alerter.dispatcher import AlertNotifier, NotificationDispatcher
from dingtalk_notifier.alerter.errors import (
    AlertDeliveryError,
    EmptyResponseError,
    ProviderError,
    RenderError,
    SigningError,
    TemplateLoadError,
    TransportError,
)
from dingtalk_notifier.alerter.formatter import AlertFormatter
from dingtalk_notifier.alerter.models import (
    AlertContent,
    AlertDestinationConfig,
    DispatchResult,
    OutboundPayload,
    RemoteResponse,
)
from dingtalk_notifier.alerter.renderer import TemplateRenderer
from dingtalk_notifier.alerter.signing import sign
from dingtalk_notifier.alerter.webhook import redact_webhook_url, resolve_webhook

__all__ = [
    "AlertContent",
    "AlertDeliveryError",
    "AlertDestinationConfig",
    "AlertFormatter",
    "AlertNotifier",
    "DingTalkChannel",
    "DispatchResult",
    "EmptyResponseError",
    "NotificationDispatcher",
    "OutboundPayload",
    "ProviderError",
    "RemoteResponse",
    "RenderError",
    "SigningError",
    "TemplateLoadError",
    "TemplateRenderer",
    "TransportError",
    "redact_webhook_url",
    "resolve_webhook",
    "sign",
]
