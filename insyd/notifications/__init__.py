"""Notification pipeline: audience policies, fan-out, templates and email delivery.

This module provides the public API for the notification system, including:
- FanOutEngine: writes inbox rows and queues one email per recipient
- EmailDispatcher: process-wide email resource (background or inline)
- TemplateRenderer: Jinja2-based email template rendering
- SMTPClient: SMTP delivery with TLS/SSL support
"""

from .audience import AUDIENCE_POLICIES, compute_audience, get_audience_policy
from .dispatcher import EmailDispatcher
from .fanout import FanOutEngine
from .models import (
    FanOutResult,
    NotificationError,
    NotificationEvent,
    NotificationTemplateError,
    OutboundEmail,
    SMTPDeliveryError,
)
from .smtp_client import SMTPClient, build_message, build_sender_address
from .templates import TemplateRenderer

__all__ = [
    # Main services
    "FanOutEngine",
    "EmailDispatcher",
    "TemplateRenderer",
    "SMTPClient",
    # Audience
    "AUDIENCE_POLICIES",
    "compute_audience",
    "get_audience_policy",
    # Models
    "NotificationEvent",
    "FanOutResult",
    "OutboundEmail",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
    # Utilities
    "build_message",
    "build_sender_address",
]
