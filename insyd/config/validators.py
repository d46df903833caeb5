"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    messages = []

    notifications = config_dict.get("notifications") or {}
    if isinstance(notifications, dict):
        if notifications.get("audience_mode") == "broadcast":
            messages.append(
                "audience_mode is 'broadcast': every new blog and job notifies all users, "
                "not just the author's followers"
            )

        inbox_limit = notifications.get("inbox_limit")
        if isinstance(inbox_limit, int) and inbox_limit > 50:
            messages.append(
                f"Large inbox_limit ({inbox_limit}) makes every inbox poll heavier"
            )

    email = config_dict.get("email") or {}
    if isinstance(email, dict):
        max_workers = email.get("max_workers")
        if isinstance(max_workers, int) and max_workers > 16:
            messages.append(
                f"Large email max_workers ({max_workers}) may exceed the SMTP server's connection limit"
            )
        if email.get("delivery_mode") == "inline":
            messages.append(
                "email delivery_mode is 'inline': requests wait for every email send to finish"
            )

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message through Python's warnings module."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)
