"""Relationship store: directed follow edges between users."""

from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from insyd.domain.models import NotificationType, User
from insyd.logging import get_logger
from insyd.notifications.fanout import FanOutEngine
from insyd.notifications.models import FanOutResult, NotificationEvent
from insyd.persistence import (
    DataIntegrityError,
    FollowRepository,
    RecordNotFoundError,
    get_session,
)

from .errors import AlreadyExists, InvalidArgument, NotFound
from .identity import require_fields, require_user

logger = get_logger(__name__, component="relationships")

SessionFactory = Callable[[], ContextManager[Session]]


class RelationshipService:
    """Follow, unfollow and follower queries."""

    def __init__(
        self,
        fanout: Optional[FanOutEngine] = None,
        session_factory: SessionFactory = get_session,
    ):
        self.fanout = fanout
        self.session_factory = session_factory

    def follow(self, follower_email: str, following_email: str) -> Optional[FanOutResult]:
        """Create a follow edge and notify the followed user.

        Raises:
            InvalidArgument: Missing email or self-follow
            NotFound: Either user is unknown
            AlreadyExists: The edge already exists
        """
        require_fields(
            "Both follower and following emails are required", follower_email, following_email
        )
        if follower_email == following_email:
            raise InvalidArgument("Cannot follow yourself")

        try:
            with self.session_factory() as session:
                follower = require_user(session, follower_email, "One or both users not found")
                following = require_user(session, following_email, "One or both users not found")
                repo = FollowRepository(session)
                if repo.exists(follower.id, following.id):
                    raise AlreadyExists("Already following this user")
                repo.create(follower.id, following.id)
        except DataIntegrityError as e:
            raise AlreadyExists("Already following this user") from e

        logger.info(
            f"{follower.email} followed {following.email}",
            extra={"event": "relationship.followed"},
        )

        if self.fanout is None:
            return None
        return self.fanout.publish(
            NotificationEvent(type=NotificationType.FOLLOW, actor=follower, counterparty=following)
        )

    def unfollow(self, follower_email: str, following_email: str) -> None:
        """Delete a follow edge. No notification is sent.

        Raises:
            InvalidArgument: Missing email
            NotFound: Either user or the edge is unknown
        """
        require_fields(
            "Both follower and following emails are required", follower_email, following_email
        )

        with self.session_factory() as session:
            follower = require_user(session, follower_email, "One or both users not found")
            following = require_user(session, following_email, "One or both users not found")
            try:
                FollowRepository(session).delete(follower.id, following.id)
            except RecordNotFoundError as e:
                raise NotFound("Follow relationship not found") from e

        logger.info(
            f"{follower.email} unfollowed {following.email}",
            extra={"event": "relationship.unfollowed"},
        )

    def list_followers(self, user_id: str) -> List[User]:
        """Followers of user_id, oldest follow first."""
        with self.session_factory() as session:
            return FollowRepository(session).list_followers(user_id)

    def is_following(self, candidate_id: str, target_id: str) -> bool:
        with self.session_factory() as session:
            return FollowRepository(session).exists(candidate_id, target_id)
