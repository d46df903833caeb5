"""Configuration factories shared by tests."""

from insyd.config.models import AppConfig


def make_app_config(**notifications) -> AppConfig:
    """AppConfig with inline email delivery and optional notification overrides."""
    return AppConfig.model_validate(
        {
            "notifications": notifications,
            "email": {"delivery_mode": "inline"},
        }
    )


def create_users(services, *emails):
    """Create users without sending welcome emails."""
    return [services.identity.resolve_or_create(email)[0] for email in emails]
