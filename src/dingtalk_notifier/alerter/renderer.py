"""Message template loading and rendering.

Templates are loaded once when the renderer is built and are read-only
afterwards, so a single renderer can be shared by concurrent dispatches.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    Template,
    TemplateError,
)

from dingtalk_notifier.alerter.errors import RenderError, TemplateLoadError

logger = logging.getLogger(__name__)

DINGTALK_TEMPLATE = "alert-dingtalk.md.j2"


def format_datetime(value: Any, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Jinja filter formatting datetimes, passing other values through."""
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return str(value.strftime(fmt))
    return str(value)


class TemplateRenderer:
    """Renders named markdown templates against alert data."""

    def __init__(
        self,
        template_names: tuple[str, ...] = (DINGTALK_TEMPLATE,),
        *,
        search_path: str | Path | None = None,
    ) -> None:
        """Load the given templates.

        Args:
            template_names: Templates to load up front.
            search_path: Directory to load templates from instead of the
                templates bundled with the package.

        Raises:
            TemplateLoadError: If any template is missing or does not parse.
        """
        loader = (
            FileSystemLoader(str(search_path))
            if search_path is not None
            else PackageLoader("dingtalk_notifier.alerter", "templates")
        )
        self._env = Environment(
            loader=loader,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self._env.filters["datetime"] = format_datetime

        self._templates: dict[str, Template] = {}
        for name in template_names:
            try:
                self._templates[name] = self._env.get_template(name)
            except TemplateError as e:
                raise TemplateLoadError(f"Failed to load template {name!r}: {e}") from e
            logger.debug(f"Loaded template {name}")

    @property
    def template_names(self) -> list[str]:
        return sorted(self._templates)

    def render(self, template_name: str, data: Any) -> str:
        """Render a loaded template with ``data`` bound as ``alert``.

        Raises:
            RenderError: If the template was not loaded or rendering fails.
        """
        template = self._templates.get(template_name)
        if template is None:
            raise RenderError(f"Template {template_name!r} is not loaded")
        try:
            return template.render(alert=data)
        except (TemplateError, TypeError, ValueError) as e:
            raise RenderError(f"Failed to render template {template_name!r}: {e}") from e
