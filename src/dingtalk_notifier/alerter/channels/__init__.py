"""Alert channel implementations."""

from dingtalk_notifier.alerter.channels.dingtalk import DingTalkChannel

__all__ = [
    "DingTalkChannel",
]
