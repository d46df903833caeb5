"""Notification fan-out engine.

Given an event, the engine computes the audience, writes one inbox row per
recipient in its own transaction, and then submits one email per recipient
to the dispatcher. It is called after the triggering mutation committed and
never raises: every failure is logged and reported in the FanOutResult.
"""

import logging
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from insyd.config.models import AudienceMode, NotificationConfig
from insyd.domain.models import User
from insyd.logging import get_logger
from insyd.logging.context import log_context
from insyd.persistence import (
    FollowRepository,
    NotificationRepository,
    UserRepository,
    get_session,
)

from .audience import compute_audience
from .dispatcher import EmailDispatcher
from .models import FanOutResult, NotificationError, NotificationEvent, OutboundEmail
from .payloads import (
    build_email_context,
    build_notification_content,
    build_welcome_context,
    template_kind,
)
from .templates import TemplateRenderer

logger = get_logger(__name__, component="fanout")

SessionFactory = Callable[[], ContextManager[Session]]


class FanOutEngine:
    """Turns events into inbox rows and best-effort emails."""

    def __init__(
        self,
        notification_config: NotificationConfig,
        dispatcher: EmailDispatcher,
        template_renderer: Optional[TemplateRenderer] = None,
        session_factory: SessionFactory = get_session,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the engine.

        Args:
            notification_config: Audience mode and site URL
            dispatcher: Shared email dispatcher
            template_renderer: Renderer (creates default if None)
            session_factory: Context manager yielding a transactional session
            logger_instance: Logger instance (uses module logger if None)
        """
        self.config = notification_config
        self.dispatcher = dispatcher
        self.template_renderer = template_renderer or TemplateRenderer()
        self.session_factory = session_factory
        self.logger = logger_instance or logger

    @property
    def audience_mode(self) -> str:
        return AudienceMode(self.config.audience_mode).value

    def publish(self, event: NotificationEvent) -> FanOutResult:
        """Fan an event out to its audience.

        Args:
            event: The triggering event

        Returns:
            FanOutResult describing what was written and queued
        """
        result = FanOutResult(event_type=event.event_type)

        with log_context(event_type=event.event_type, actor=event.actor.email):
            try:
                recipients = self._write_notifications(event, result)
            except Exception as e:
                self.logger.error(
                    f"Fan-out for {event.event_type} failed: {e}",
                    exc_info=True,
                    extra={"event": "fanout.failed", "error_type": type(e).__name__},
                )
                result.status = "failed"
                result.error = str(e)
                return result

            if not recipients:
                result.status = "skipped"
                self.logger.debug(
                    "No recipients for event",
                    extra={"event": "fanout.skipped"},
                )
                return result

            for recipient in recipients:
                try:
                    queued = self._queue_email(event, recipient)
                except Exception as e:
                    self.logger.error(
                        f"Could not queue email for {recipient.email}: {e}",
                        exc_info=True,
                        extra={
                            "event": "email.queue.failure",
                            "recipient": recipient.email,
                            "error_type": type(e).__name__,
                        },
                    )
                    continue
                if queued:
                    result.emails_queued += 1

            self.logger.info(
                f"Fan-out for {event.event_type} reached {result.recipients} recipients",
                extra={
                    "event": "fanout.completed",
                    "recipients": result.recipients,
                    "notifications_created": result.notifications_created,
                    "emails_queued": result.emails_queued,
                },
            )
            return result

    def _write_notifications(self, event: NotificationEvent, result: FanOutResult) -> List[User]:
        with self.session_factory() as session:
            recipients = compute_audience(
                event,
                self.audience_mode,
                followers_of=FollowRepository(session).list_followers,
                all_users=UserRepository(session).list_all,
            )
            result.recipients = len(recipients)
            if not recipients:
                return recipients

            title, message = build_notification_content(event)
            blog_id = event.blog.id if event.blog and event.references_content else None
            job_id = event.job.id if event.job and event.references_content else None

            repo = NotificationRepository(session)
            for recipient in recipients:
                repo.create(
                    user_id=recipient.id,
                    title=title,
                    message=message,
                    type=event.event_type,
                    actor_id=event.actor.id,
                    blog_id=blog_id,
                    job_id=job_id,
                )
            result.notifications_created = len(recipients)
            return recipients

    def _queue_email(self, event: NotificationEvent, recipient: User) -> bool:
        if not self.dispatcher.enabled:
            return False
        try:
            context = build_email_context(event, recipient, self.config.site_url)
            rendered = self.template_renderer.render(template_kind(event), context)
        except (NotificationError, ValueError) as e:
            self.logger.error(
                f"Could not render email for {recipient.email}: {e}",
                extra={"event": "email.render.failure", "recipient": recipient.email},
            )
            return False

        return self.dispatcher.submit(
            OutboundEmail(
                recipient=recipient.email,
                subject=rendered["subject"],
                text_body=rendered["text_body"],
                html_body=rendered["html_body"],
            )
        )

    def send_welcome(self, user: User) -> bool:
        """Send the welcome email to a newly registered user.

        Returns:
            True if the email was handed to the dispatcher
        """
        if not self.dispatcher.enabled:
            return False
        try:
            rendered = self.template_renderer.render(
                "welcome", build_welcome_context(user, self.config.site_url)
            )
        except NotificationError as e:
            self.logger.error(
                f"Could not render welcome email for {user.email}: {e}",
                extra={"event": "email.render.failure", "recipient": user.email},
            )
            return False

        return self.dispatcher.submit(
            OutboundEmail(
                recipient=user.email,
                subject=rendered["subject"],
                text_body=rendered["text_body"],
                html_body=rendered["html_body"],
            )
        )
