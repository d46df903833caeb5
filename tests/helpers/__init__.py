"""Test helper utilities for Insyd tests."""

from .factories import create_users, make_app_config
from .fake_smtp import RecordingSMTPClient

__all__ = ["RecordingSMTPClient", "create_users", "make_app_config"]
