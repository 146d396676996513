"""Tests for the CLI entry point."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from dingtalk_notifier.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    build_alert,
    configure_logging,
    create_parser,
    main,
    print_banner,
    run_config_check,
    validate_config,
)

ENV_KEYS = (
    "DINGTALK_WEBHOOK_URL",
    "DINGTALK_TOKEN",
    "DINGTALK_SECRET_ENABLED",
    "DINGTALK_SECRET",
    "DINGTALK_CONTACTS",
    "DINGTALK_AT_ALL",
    "LOG_LEVEL",
    "TEMPLATE_DIR",
    "DRY_RUN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run each test without notifier variables from the outer environment."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_has_version(self):
        """Parser should have version flag."""
        parser = create_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_parser_config_check(self):
        """Parser should accept --config-check flag."""
        parser = create_parser()
        args = parser.parse_args(["--config-check"])
        assert args.config_check is True

    def test_parser_log_level(self):
        """Parser should accept --log-level option."""
        parser = create_parser()
        args = parser.parse_args(["--log-level", "DEBUG"])
        assert args.log_level == "DEBUG"

    def test_parser_dry_run(self):
        """Parser should accept --dry-run flag."""
        parser = create_parser()
        args = parser.parse_args(["--dry-run"])
        assert args.dry_run is True

    def test_parser_alert_options(self):
        """Parser should accept alert content options."""
        parser = create_parser()
        args = parser.parse_args(
            ["--title", "DB Down", "--severity", "CRITICAL", "--job-name", "etl"]
        )
        assert args.title == "DB Down"
        assert args.severity == "CRITICAL"
        assert args.job_name == "etl"

    def test_parser_default_values(self):
        """Parser should have correct defaults."""
        parser = create_parser()
        args = parser.parse_args([])
        assert args.config_check is False
        assert args.log_level is None
        assert args.dry_run is False
        assert args.title == "Alert"
        assert args.message is None


class TestBuildAlert:
    """Tests for alert construction from arguments."""

    def test_build_alert(self):
        args = create_parser().parse_args(
            ["--title", "DB Down", "--message", "disk full", "--link", "https://x"]
        )
        alert = build_alert(args)
        assert alert.title == "DB Down"
        assert alert.message == "disk full"
        assert alert.link == "https://x"
        assert alert.start_time is not None


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_logging_info(self):
        """Should configure logging at INFO level."""
        configure_logging("INFO")
        import logging

        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_debug(self):
        """Should configure logging at DEBUG level."""
        configure_logging("DEBUG")
        import logging

        assert logging.getLogger().level == logging.DEBUG


class TestPrintBanner:
    """Tests for banner printing."""

    def test_banner_contains_app_name(self, capsys):
        """Banner should contain application name."""
        print_banner()
        captured = capsys.readouterr()
        assert "DingTalk Notifier" in captured.out

    def test_banner_contains_version(self, capsys):
        """Banner should contain version."""
        print_banner()
        captured = capsys.readouterr()
        assert "v0.1.0" in captured.out


class TestValidateConfig:
    """Tests for configuration validation."""

    def test_validate_config_success(self, monkeypatch):
        """Should return settings on valid config."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")

        settings = validate_config()
        assert settings is not None

    def test_validate_config_failure(self, monkeypatch, capsys):
        """Should return None on invalid config."""
        monkeypatch.setenv("DINGTALK_WEBHOOK_URL", "ftp://robot.example.com")

        settings = validate_config()
        assert settings is None

        captured = capsys.readouterr()
        assert "Configuration validation failed" in captured.err


class TestRunConfigCheck:
    """Tests for config check mode."""

    def test_config_check_prints_summary(self, monkeypatch, capsys):
        """Config check should print configuration summary."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")

        settings = validate_config()
        assert settings is not None

        result = run_config_check(settings)
        assert result == EXIT_SUCCESS

        captured = capsys.readouterr()
        assert "Configuration is valid!" in captured.out
        assert "Configuration:" in captured.out
        assert "DingTalk robot: configured" in captured.out
        assert "abc123" not in captured.out

    def test_config_check_missing_template(self, monkeypatch, tmp_path, capsys):
        """A template that cannot load fails the check."""
        monkeypatch.setenv("TEMPLATE_DIR", str(tmp_path))

        settings = validate_config()
        assert settings is not None

        assert run_config_check(settings) == EXIT_CONFIG_ERROR
        captured = capsys.readouterr()
        assert "Template loading failed" in captured.err


class TestMain:
    """Tests for main entry point."""

    def test_main_with_config_check(self, monkeypatch):
        """Main should exit successfully with --config-check."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")

        with pytest.raises(SystemExit) as exc_info:
            main(["--config-check"])

        assert exc_info.value.code == EXIT_SUCCESS

    def test_main_with_invalid_config(self, monkeypatch):
        """Main should exit with config error on invalid config."""
        monkeypatch.setenv("DINGTALK_SECRET_ENABLED", "true")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    def test_main_without_token(self):
        """Main should refuse to send without a robot token."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--title", "DB Down"])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    def test_main_with_missing_template(self, monkeypatch, tmp_path):
        """Template load failure at start-up is fatal."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")
        monkeypatch.setenv("TEMPLATE_DIR", str(tmp_path))

        with pytest.raises(SystemExit) as exc_info:
            main(["--title", "DB Down"])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    def test_main_dry_run(self, monkeypatch, capsys):
        """Dry run prints the redacted URL and payload without sending."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")
        monkeypatch.setenv("DINGTALK_CONTACTS", "alice")

        with (
            patch("httpx.AsyncClient") as mock_client_class,
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--title", "DB Down", "--dry-run"])

        assert exc_info.value.code == EXIT_SUCCESS
        mock_client_class.assert_not_called()

        out = capsys.readouterr().out
        assert "POST https://oapi.dingtalk.com/robot/send?access_token=***" in out
        assert "abc123" not in out
        payload = json.loads(out[out.index("{") :])
        assert payload["markdown"]["title"] == "DB Down @alice"
        assert payload["at"] == {"atMobiles": ["alice"], "isAtAll": False}

    @patch(
        "dingtalk_notifier.__main__.NotificationDispatcher.dispatch",
        new_callable=AsyncMock,
    )
    def test_main_sends_alert(self, mock_dispatch, monkeypatch):
        """Main should exit successfully when the alert is delivered."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")
        mock_dispatch.return_value = True

        with pytest.raises(SystemExit) as exc_info:
            main(["--title", "DB Down"])

        assert exc_info.value.code == EXIT_SUCCESS
        mock_dispatch.assert_awaited_once()
        destination, content = mock_dispatch.await_args.args
        assert destination.token == "abc123"
        assert content.title == "DB Down"

    @patch(
        "dingtalk_notifier.__main__.NotificationDispatcher.dispatch",
        new_callable=AsyncMock,
    )
    def test_main_delivery_failure(self, mock_dispatch, monkeypatch, capsys):
        """Main should exit with an error when the alert is not delivered."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")
        mock_dispatch.return_value = False

        with pytest.raises(SystemExit) as exc_info:
            main(["--title", "DB Down"])

        assert exc_info.value.code == EXIT_ERROR
        assert "not delivered" in capsys.readouterr().err

    @patch(
        "dingtalk_notifier.__main__.NotificationDispatcher.dispatch",
        new_callable=AsyncMock,
    )
    def test_main_interrupted(self, mock_dispatch, monkeypatch):
        """Ctrl-C during delivery should exit with the interrupted code."""
        monkeypatch.setenv("DINGTALK_TOKEN", "abc123")
        mock_dispatch.side_effect = KeyboardInterrupt

        with pytest.raises(SystemExit) as exc_info:
            main(["--title", "DB Down"])

        assert exc_info.value.code == EXIT_INTERRUPTED


class TestIntegration:
    """Integration tests for CLI invocation."""

    def test_cli_help_option(self, capsys):
        """CLI should display help with -h option."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-h"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "dingtalk-notifier" in captured.out
        assert "--config-check" in captured.out
        assert "--dry-run" in captured.out
        assert "--log-level" in captured.out

    def test_cli_version_option(self, capsys):
        """CLI should display version with --version option."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "0.1.0" in captured.out

    def test_cli_invalid_log_level(self, capsys):
        """CLI should reject invalid log level."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "INVALID"])

        assert exc_info.value.code != 0
        captured = capsys.readouterr()
        assert "invalid choice" in captured.err
