"""Exceptions raised while building and delivering an alert.

Every delivery failure derives from AlertDeliveryError so the dispatcher
can catch the whole family at its boundary and turn it into a boolean.
"""

from __future__ import annotations


class AlertDeliveryError(Exception):
    """Base class for failures of a single alert delivery."""


class RenderError(AlertDeliveryError):
    """Template rendering failed (missing template or malformed data)."""


class SigningError(AlertDeliveryError):
    """The webhook signature could not be computed."""


class TransportError(AlertDeliveryError):
    """The provider could not be reached or its reply could not be parsed."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class EmptyResponseError(AlertDeliveryError):
    """The provider answered without a body."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Empty response from DingTalk robot, url: {url}")
        self.url = url


class ProviderError(AlertDeliveryError):
    """The provider explicitly rejected the message."""

    def __init__(self, errcode: int, errmsg: str | None, *, url: str) -> None:
        super().__init__(
            f"DingTalk robot rejected alert, url: {url}, "
            f"errcode: {errcode}, errmsg: {errmsg}"
        )
        self.errcode = errcode
        self.errmsg = errmsg
        self.url = url


class TemplateLoadError(Exception):
    """A message template could not be loaded at start-up.

    Not a delivery error: the process must not serve dispatch calls
    without a valid template.
    """
