"""Data models for the alerter module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dingtalk_notifier.alerter.errors import AlertDeliveryError

MSGTYPE_MARKDOWN = "markdown"
TOKEN_PARAM = "access_token="


def split_contacts(contacts: str | None) -> list[str]:
    """Split a comma-separated contact string into trimmed identifiers.

    An empty or absent string yields an empty list, never ``[""]``.
    """
    if not contacts:
        return []
    return [c.strip() for c in contacts.split(",") if c.strip()]


@dataclass(frozen=True)
class AlertDestinationConfig:
    """Configuration of one DingTalk robot destination.

    Attributes:
        token: Robot access token.
        webhook_url: Optional base URL override, ending where the token goes
            (e.g. ``https://host/robot/send?access_token=``).
        secret_enabled: Whether requests must carry a timestamp signature.
        secret: Shared signing secret, required in secured mode.
        contacts: Comma-separated contact identifiers (mobile numbers).
        is_at_all: Mention everybody in the group. ``None`` means False.
    """

    token: str
    webhook_url: str | None = None
    secret_enabled: bool = False
    secret: str | None = None
    contacts: str | None = None
    is_at_all: bool | None = None

    def __post_init__(self) -> None:
        if self.secret_enabled and not self.secret:
            raise ValueError("secret is required when secret_enabled is set")
        if self.webhook_url and not self.webhook_url.endswith(TOKEN_PARAM):
            raise ValueError(f"webhook_url must end with {TOKEN_PARAM!r}")

    @property
    def contact_list(self) -> list[str]:
        """Contact identifiers to mention."""
        return split_contacts(self.contacts)

    @property
    def at_all(self) -> bool:
        return bool(self.is_at_all)


@dataclass(frozen=True)
class AlertContent:
    """Alert data rendered into the message body.

    Produced by the caller; read-only here. ``extra`` holds free-form
    fields that custom templates may reference.
    """

    title: str
    subject: str | None = None
    job_name: str | None = None
    status: str | None = None
    severity: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: str | None = None
    link: str | None = None
    message: str | None = None
    restart_index: int | None = None
    total_restart: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OutboundPayload:
    """Markdown message sent to the robot webhook."""

    title: str
    text: str
    at_mobiles: tuple[str, ...] = ()
    is_at_all: bool = False
    msgtype: str = MSGTYPE_MARKDOWN

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the robot's JSON wire format."""
        return {
            "msgtype": self.msgtype,
            "markdown": {
                "title": self.title,
                "text": self.text,
            },
            "at": {
                "atMobiles": list(self.at_mobiles),
                "isAtAll": self.is_at_all,
            },
        }


@dataclass(frozen=True)
class RemoteResponse:
    """Parsed reply of the robot endpoint. ``errcode == 0`` means success."""

    errcode: int
    errmsg: str | None = None

    @property
    def ok(self) -> bool:
        return self.errcode == 0

    @classmethod
    def from_dict(cls, data: Any) -> RemoteResponse:
        """Create a RemoteResponse from a decoded JSON body.

        Raises:
            ValueError: If the body is not an object with an integer errcode.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected JSON object, got {type(data).__name__}")
        errcode = data.get("errcode")
        if isinstance(errcode, bool) or not isinstance(errcode, int):
            raise ValueError(f"Missing or non-integer errcode: {errcode!r}")
        errmsg = data.get("errmsg")
        return cls(
            errcode=errcode,
            errmsg=str(errmsg) if errmsg is not None else None,
        )


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch call.

    The dispatcher's public contract is a bare boolean; this keeps the
    failure category around for logs and tests.
    """

    delivered: bool
    url: str | None = None
    error: AlertDeliveryError | None = None
    response: RemoteResponse | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def error_type(self) -> str | None:
        """Name of the failure category, or None on success."""
        return type(self.error).__name__ if self.error is not None else None
