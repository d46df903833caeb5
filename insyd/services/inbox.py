"""Notification inbox: per-user recent notifications and read state."""

from dataclasses import dataclass, field
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from insyd.domain.models import Notification
from insyd.logging import get_logger
from insyd.persistence import (
    NotificationRepository,
    RecordNotFoundError,
    UserRepository,
    get_session,
)

from .errors import InvalidArgument, NotFound
from .identity import require_fields

logger = get_logger(__name__, component="inbox")

SessionFactory = Callable[[], ContextManager[Session]]

NOT_FOUND_MESSAGE = "Notification not found or not authorized"


@dataclass
class InboxPage:
    """Most recent notifications for one user, newest first.

    unread counts every unread notification the user has, not only those on
    this page.
    """

    notifications: List[Notification] = field(default_factory=list)
    unread: int = 0


class InboxService:
    """Fetch and mark-read, always scoped to the resolved user."""

    def __init__(self, default_limit: int = 20, session_factory: SessionFactory = get_session):
        self.default_limit = default_limit
        self.session_factory = session_factory

    def list(self, user_email: str, limit: Optional[int] = None) -> InboxPage:
        """Recent notifications for user_email. Unknown users get an empty page.

        Raises:
            InvalidArgument: Missing email or non-positive limit
        """
        require_fields("Email parameter is required", user_email)
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise InvalidArgument("Limit must be a positive integer")

        with self.session_factory() as session:
            user = UserRepository(session).get_by_email(user_email)
            if user is None:
                return InboxPage()
            repo = NotificationRepository(session)
            return InboxPage(
                notifications=repo.list_for_user(user.id, limit),
                unread=repo.count_unread(user.id),
            )

    def mark_read(self, notification_id: str, user_email: str) -> None:
        """Mark a notification read if the resolved user owns it.

        Unknown user, unknown id and someone else's notification all raise the
        same NotFound.

        Raises:
            InvalidArgument: Missing id or email
            NotFound: See above
        """
        require_fields("Missing notificationId or email", notification_id, user_email)

        with self.session_factory() as session:
            user = UserRepository(session).get_by_email(user_email)
            if user is None:
                raise NotFound(NOT_FOUND_MESSAGE)
            try:
                NotificationRepository(session).mark_read(notification_id, user.id)
            except RecordNotFoundError as e:
                raise NotFound(NOT_FOUND_MESSAGE) from e

        logger.debug(
            "Notification marked as read",
            extra={"event": "inbox.marked_read", "notification_id": notification_id},
        )
