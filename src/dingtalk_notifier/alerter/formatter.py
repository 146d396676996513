"""Builds the outbound DingTalk markdown message.

This module turns an AlertContent into the robot payload: the rendered
markdown body, a title carrying the mention suffix, and the mention block.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dingtalk_notifier.alerter.models import OutboundPayload
from dingtalk_notifier.alerter.renderer import DINGTALK_TEMPLATE

if TYPE_CHECKING:
    from dingtalk_notifier.alerter.models import AlertContent, AlertDestinationConfig
    from dingtalk_notifier.alerter.renderer import TemplateRenderer


def mention_title(title: str, contacts: list[str]) -> str:
    """Append ``@contact`` mentions to a title.

    >>> mention_title("DB Down", ["alice", "bob"])
    'DB Down @alice,@bob'
    """
    if not contacts:
        return title
    return f"{title} " + ",".join(f"@{c}" for c in contacts)


class AlertFormatter:
    """Composes robot payloads from alert content.

    The renderer is shared and read-only, so one formatter may serve
    concurrent dispatches.
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        template_name: str = DINGTALK_TEMPLATE,
    ) -> None:
        """Initialize the formatter.

        Args:
            renderer: Renderer holding the loaded message template.
            template_name: Template used for the markdown body.
        """
        self.renderer = renderer
        self.template_name = template_name

    def compose(
        self,
        config: AlertDestinationConfig,
        content: AlertContent,
    ) -> OutboundPayload:
        """Build the payload for one destination.

        Args:
            config: Destination holding contacts and the at-all flag.
            content: Alert data for the title and template.

        Returns:
            OutboundPayload ready for serialization.

        Raises:
            RenderError: If the markdown body cannot be rendered.
        """
        contacts = config.contact_list
        title = mention_title(content.title, contacts)
        text = self.renderer.render(self.template_name, content)

        return OutboundPayload(
            title=title,
            text=text,
            at_mobiles=tuple(contacts),
            is_at_all=config.at_all,
        )
