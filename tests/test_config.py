"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from insyd.config import (
    AppConfig,
    AudienceMode,
    ConfigurationError,
    LikePolicy,
    load_config,
    validate_config_file,
)
from insyd.config.duration import (
    DurationParseError,
    parse_duration,
    seconds_to_human_readable,
    validate_duration_range,
)
from insyd.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from insyd.config.validators import check_for_warnings

ENV_VARS = (
    "DATABASE_URL",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "EMAIL_FROM",
    "SMTP_SENDER_NAME",
    "LOG_LEVEL",
    "ENVIRONMENT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Unset every Insyd environment variable and run from an empty directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "custom.yaml"
    path.write_text(text)
    return path


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_defaults_when_no_file_present(self, clean_env):
        app_config, env_config = load_config()

        assert app_config.notifications.audience_mode == "followers"
        assert app_config.notifications.like_policy == "toggle"
        assert app_config.notifications.notify_on_content_removed is False
        assert app_config.notifications.inbox_limit == 20
        assert app_config.email.delivery_mode == "background"
        assert app_config.maintenance.keepalive_enabled is False
        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.smtp_configured is False

    def test_load_explicit_file(self, clean_env, tmp_path):
        path = write_config(
            tmp_path,
            "notifications:\n"
            "  audience_mode: broadcast\n"
            "  like_policy: reject\n"
            "  inbox_limit: 10\n"
            "  site_url: https://insyd.example.com/\n"
            "maintenance:\n"
            "  keepalive_enabled: true\n"
            "  keepalive_interval: PT10M\n",
        )

        with pytest.warns(UserWarning, match="broadcast"):
            app_config, _ = load_config(path)

        assert app_config.notifications.audience_mode == AudienceMode.BROADCAST.value
        assert app_config.notifications.like_policy == LikePolicy.REJECT.value
        assert app_config.notifications.inbox_limit == 10
        assert app_config.notifications.site_url == "https://insyd.example.com"
        assert app_config.maintenance.keepalive_interval_seconds == 600

    def test_config_yaml_in_working_directory_is_found(self, clean_env, tmp_path):
        (tmp_path / "config.yaml").write_text("notifications:\n  inbox_limit: 5\n")

        app_config, _ = load_config()

        assert app_config.notifications.inbox_limit == 5

    def test_nested_config_directory_is_found(self, clean_env, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("email:\n  enabled: false\n")

        app_config, _ = load_config()

        assert app_config.email.enabled is False

    def test_explicit_file_not_found(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(Path("nonexistent.yaml"))

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml_syntax(self, clean_env, tmp_path):
        path = write_config(tmp_path, "notifications:\n  audience_mode: 'broken\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert "parse" in str(exc_info.value).lower()

    def test_empty_file_uses_defaults(self, clean_env, tmp_path):
        path = write_config(tmp_path, "")

        app_config, _ = load_config(path)

        assert app_config == AppConfig()

    def test_top_level_list_rejected(self, clean_env, tmp_path):
        path = write_config(tmp_path, "- one\n- two\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)


class TestConfigurationValidation:
    """Test configuration validation rules."""

    def test_unknown_audience_mode(self, clean_env, tmp_path):
        path = write_config(tmp_path, "notifications:\n  audience_mode: everyone\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert any("audience_mode" in error for error in exc_info.value.errors)

    def test_unknown_like_policy(self, clean_env, tmp_path):
        path = write_config(tmp_path, "notifications:\n  like_policy: double\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    @pytest.mark.parametrize("limit", [0, 101])
    def test_inbox_limit_out_of_range(self, clean_env, tmp_path, limit):
        path = write_config(tmp_path, f"notifications:\n  inbox_limit: {limit}\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_keepalive_interval_too_short(self, clean_env, tmp_path):
        path = write_config(tmp_path, "maintenance:\n  keepalive_interval: 30s\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert "keepalive_interval" in str(exc_info.value)

    def test_blank_site_url_rejected(self, clean_env, tmp_path):
        path = write_config(tmp_path, "notifications:\n  site_url: '   '\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_validate_config_file(self, tmp_path, capsys):
        good = write_config(tmp_path, "email:\n  max_workers: 2\n")
        assert validate_config_file(good) is True

        bad = tmp_path / "bad.yaml"
        bad.write_text("email:\n  max_workers: 0\n")
        assert validate_config_file(bad) is False
        assert "failed" in capsys.readouterr().out


class TestWarnings:
    def test_no_warnings_for_defaults(self):
        assert check_for_warnings({}) == []

    def test_large_worker_pool_and_inline_delivery(self):
        messages = check_for_warnings({"email": {"max_workers": 20, "delivery_mode": "inline"}})

        assert len(messages) == 2
        assert any("max_workers" in m for m in messages)
        assert any("inline" in m for m in messages)

    def test_large_inbox_limit(self):
        messages = check_for_warnings({"notifications": {"inbox_limit": 80}})

        assert len(messages) == 1
        assert "inbox_limit" in messages[0]


class TestEnvironmentConfig:
    """Test environment variable loading."""

    def test_full_smtp_environment(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite:///./other.db")
        clean_env.setenv("SMTP_HOST", "smtp.example.com")
        clean_env.setenv("SMTP_PORT", "465")
        clean_env.setenv("SMTP_USER", "mailer@example.com")
        clean_env.setenv("SMTP_PASS", "secret")
        clean_env.setenv("EMAIL_FROM", "noreply@insyd.io")
        clean_env.setenv("LOG_LEVEL", "debug")

        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:///./other.db"
        assert env_config.smtp_configured is True
        assert env_config.smtp_port == 465
        assert env_config.email_from == "noreply@insyd.io"
        assert env_config.log_level == "DEBUG"
        assert env_config.smtp_sender_name == "Insyd"
        assert env_config.environment == "local"

    def test_invalid_port(self, clean_env):
        clean_env.setenv("SMTP_PORT", "not-a-port")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "SMTP_PORT" in str(exc_info.value)

    def test_port_out_of_range(self, clean_env):
        clean_env.setenv("SMTP_PORT", "70000")

        with pytest.raises(ConfigurationError):
            load_environment_config()

    def test_user_without_password(self, clean_env):
        clean_env.setenv("SMTP_USER", "mailer@example.com")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "SMTP_PASS" in str(exc_info.value)

    def test_invalid_email_from(self, clean_env):
        clean_env.setenv("EMAIL_FROM", "not an email")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "EMAIL_FROM" in str(exc_info.value)

    def test_invalid_log_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            load_environment_config()

    def test_all_errors_reported_together(self, clean_env):
        clean_env.setenv("SMTP_PORT", "abc")
        clean_env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert len(exc_info.value.errors) == 2


class TestDurationParsing:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("5m", 300),
            ("1h", 3600),
            ("1h30m", 5400),
            ("PT15M", 900),
            ("PT1H", 3600),
        ],
    )
    def test_valid_durations(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "PT0M", "0m"])
    def test_invalid_durations(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_range_validation(self):
        validate_duration_range(60)
        validate_duration_range(86400)

        with pytest.raises(DurationParseError):
            validate_duration_range(59)
        with pytest.raises(DurationParseError):
            validate_duration_range(86401)

    def test_human_readable(self):
        assert seconds_to_human_readable(300) == "5 minutes"
        assert seconds_to_human_readable(3600) == "1 hour"
