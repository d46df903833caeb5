"""Data models and exceptions for the notification pipeline.

This module defines the event consumed by the fan-out engine, the result it
returns, the outbound email envelope, and the exceptions raised while
rendering and delivering email.
"""

from dataclasses import dataclass
from typing import Optional

from insyd.domain.models import Blog, Job, NotificationType, User


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to a missing template or variable."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when the single SMTP delivery attempt fails."""

    pass


@dataclass(frozen=True)
class OutboundEmail:
    """A fully rendered email waiting for delivery."""

    recipient: str
    subject: str
    text_body: str
    html_body: Optional[str] = None


@dataclass(frozen=True)
class NotificationEvent:
    """Something happened that may notify one or more users.

    Attributes:
        type: What happened
        actor: User who triggered the event; never notified
        counterparty: Single recipient for interaction events (content author,
            followed user, or former liker/applicant). None for content events,
            whose audience comes from the audience policy.
        blog: Blog the event is about, if any
        job: Job the event is about, if any
    """

    type: NotificationType
    actor: User
    counterparty: Optional[User] = None
    blog: Optional[Blog] = None
    job: Optional[Job] = None

    @property
    def event_type(self) -> str:
        return NotificationType(self.type).value

    @property
    def references_content(self) -> bool:
        """Whether stored notifications should point at blog/job.

        Removal notices outlive the content, so they carry no reference.
        """
        return self.type != NotificationType.CONTENT_REMOVED


@dataclass
class FanOutResult:
    """Outcome of one fan-out.

    Attributes:
        event_type: Notification type value
        recipients: Size of the computed audience
        notifications_created: Rows written to the inbox store
        emails_queued: Emails handed to the dispatcher
        status: "completed", "skipped" (empty audience) or "failed"
        error: Error message when status is "failed"
    """

    event_type: str
    recipients: int = 0
    notifications_created: int = 0
    emails_queued: int = 0
    status: str = "completed"
    error: Optional[str] = None
