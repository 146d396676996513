"""CLI entry point for the DingTalk notifier.

This module provides the main entry point for sending an alert to a
DingTalk robot from the command line.

Usage:
    python -m dingtalk_notifier [options]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import NoReturn

from pydantic import ValidationError

from dingtalk_notifier import __version__
from dingtalk_notifier.alerter.channels.dingtalk import DingTalkChannel
from dingtalk_notifier.alerter.dispatcher import NotificationDispatcher
from dingtalk_notifier.alerter.errors import AlertDeliveryError, TemplateLoadError
from dingtalk_notifier.alerter.formatter import AlertFormatter
from dingtalk_notifier.alerter.models import AlertContent, AlertDestinationConfig
from dingtalk_notifier.alerter.renderer import TemplateRenderer
from dingtalk_notifier.alerter.webhook import redact_webhook_url, resolve_webhook
from dingtalk_notifier.config import Settings, clear_settings_cache, get_settings

# Application info
APP_NAME = "DingTalk Notifier"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="dingtalk-notifier",
        description="Send an alert to a DingTalk custom robot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m dingtalk_notifier --title "DB Down"              Send an alert
  python -m dingtalk_notifier --config-check                 Validate config and exit
  python -m dingtalk_notifier --title "DB Down" --dry-run    Print payload, don't send
  python -m dingtalk_notifier --log-level DEBUG --title X    Enable debug logging
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and template, then exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render the payload but don't send it",
    )

    alert = parser.add_argument_group("alert")
    alert.add_argument("--title", default="Alert", help="Alert title")
    alert.add_argument("--subject", default=None, help="Heading of the message body")
    alert.add_argument("--message", default=None, help="Alert message text")
    alert.add_argument("--severity", default=None, help="Alert severity")
    alert.add_argument("--job-name", default=None, help="Name of the failing job")
    alert.add_argument("--status", default=None, help="Current job status")
    alert.add_argument("--link", default=None, help="Link to more details")

    return parser


def configure_logging(level: str) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_banner() -> None:
    """Print the application startup banner."""
    banner = f"""
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║   {APP_NAME:^56}   ║
║   {"v" + APP_VERSION:^56}   ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
"""
    print(banner)


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
        dry_run: Whether dry-run mode is enabled.
    """
    summary = settings.redacted_summary()
    print("Configuration:")
    print(f"  Webhook: {summary['webhook_url']}")
    print(f"  Token: {summary['token']}")
    print(f"  Signed: {summary['secret_enabled']}")
    print(f"  Contacts: {summary['contacts']}")
    print(f"  At All: {summary['at_all']}")
    print(f"  Templates: {summary['template_dir']}")
    print(f"  Log Level: {summary['log_level']}")
    print(f"  Dry Run: {dry_run}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        # Clear cache to force reload
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def load_renderer(settings: Settings) -> TemplateRenderer | None:
    """Load the message template once for the whole process.

    Returns:
        The renderer, or None if the template could not be loaded.
    """
    try:
        return TemplateRenderer(search_path=settings.template_dir)
    except TemplateLoadError as e:
        print(f"Template loading failed: {e}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings, dry_run=settings.dry_run)

    print("Checking component availability...")

    if settings.dingtalk.enabled:
        print("  DingTalk robot: configured")
    else:
        print("  DingTalk robot: not configured")

    renderer = load_renderer(settings)
    if renderer is None:
        print("  Template: failed to load")
        return EXIT_CONFIG_ERROR
    print(f"  Template: {', '.join(renderer.template_names)}")

    print()
    print("All checks passed. Ready to send.")
    return EXIT_SUCCESS


def build_alert(args: argparse.Namespace) -> AlertContent:
    """Build alert content from command line arguments."""
    return AlertContent(
        title=args.title,
        subject=args.subject,
        job_name=args.job_name,
        status=args.status,
        severity=args.severity,
        start_time=datetime.now(UTC),
        link=args.link,
        message=args.message,
    )


def run_dry_run(
    formatter: AlertFormatter,
    destination: AlertDestinationConfig,
    content: AlertContent,
) -> int:
    """Print the resolved URL and payload without sending.

    Returns:
        Exit code.
    """
    try:
        payload = formatter.compose(destination, content)
        url = resolve_webhook(destination)
    except AlertDeliveryError as e:
        print(f"Failed to build alert: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(f"POST {redact_webhook_url(url)}")
    print(json.dumps(payload.to_dict(), indent=2, ensure_ascii=False))
    return EXIT_SUCCESS


async def send_alert(
    dispatcher: NotificationDispatcher,
    destination: AlertDestinationConfig,
    content: AlertContent,
) -> int:
    """Send one alert.

    Returns:
        Exit code.
    """
    delivered = await dispatcher.dispatch(destination, content)
    if delivered:
        print("Alert delivered.")
        return EXIT_SUCCESS
    print("Alert was not delivered, see logs for details.", file=sys.stderr)
    return EXIT_ERROR


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    # Determine effective log level
    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    print_banner()

    if args.config_check:
        sys.exit(run_config_check(settings))

    if not settings.dingtalk.enabled:
        print("DINGTALK_TOKEN is not set.", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    # The template is loaded once; without it no alert can be sent
    renderer = load_renderer(settings)
    if renderer is None:
        sys.exit(EXIT_CONFIG_ERROR)

    dry_run = args.dry_run or settings.dry_run
    print_config_summary(settings, dry_run)

    formatter = AlertFormatter(renderer)
    destination = settings.dingtalk.to_destination()
    content = build_alert(args)

    if dry_run:
        sys.exit(run_dry_run(formatter, destination, content))

    dispatcher = NotificationDispatcher(
        formatter, DingTalkChannel(timeout=settings.http_timeout)
    )
    try:
        exit_code = asyncio.run(send_alert(dispatcher, destination, content))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
