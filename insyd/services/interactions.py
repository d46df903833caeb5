"""Interaction store: likes on blogs and applications to jobs."""

from dataclasses import dataclass
from typing import Callable, ContextManager, Optional

from sqlalchemy.orm import Session

from insyd.config.models import LikePolicy
from insyd.domain.models import NotificationType
from insyd.logging import get_logger
from insyd.notifications.fanout import FanOutEngine
from insyd.notifications.models import NotificationEvent
from insyd.persistence import (
    ApplicationRepository,
    BlogRepository,
    DataIntegrityError,
    JobRepository,
    LikeRepository,
    UserRepository,
    get_session,
)

from .errors import AlreadyExists, NotFound
from .identity import require_fields, require_user

logger = get_logger(__name__, component="interactions")

SessionFactory = Callable[[], ContextManager[Session]]


@dataclass(frozen=True)
class LikeOutcome:
    """Like count after the request, and whether the user now likes the blog."""

    likes: int
    liked: bool


class InteractionService:
    """Like/unlike blogs and apply to jobs."""

    def __init__(
        self,
        fanout: Optional[FanOutEngine] = None,
        like_policy: str = LikePolicy.TOGGLE.value,
        session_factory: SessionFactory = get_session,
    ):
        self.fanout = fanout
        self.like_policy = LikePolicy(like_policy).value
        self.session_factory = session_factory

    def like(self, blog_id: str, user_email: str) -> LikeOutcome:
        """Like a blog, or apply the like policy when already liked.

        Under the toggle policy a repeated like removes the like and sends
        nothing. Under the reject policy it raises AlreadyExists.

        Raises:
            InvalidArgument: Missing email
            NotFound: Unknown user or blog
            AlreadyExists: Duplicate like under the reject policy, or a lost race
        """
        require_fields("User email is required", user_email)

        try:
            with self.session_factory() as session:
                user = require_user(session, user_email)
                blog = BlogRepository(session).get_by_id(blog_id)
                if blog is None:
                    raise NotFound("Blog not found")

                likes = LikeRepository(session)
                if likes.exists(user.id, blog.id):
                    if self.like_policy == LikePolicy.REJECT.value:
                        raise AlreadyExists("Already liked this blog")
                    likes.delete(user.id, blog.id)
                    outcome = LikeOutcome(likes=likes.count_for_blog(blog.id), liked=False)
                    author = None
                else:
                    likes.create(user.id, blog.id)
                    outcome = LikeOutcome(likes=likes.count_for_blog(blog.id), liked=True)
                    author = UserRepository(session).get_by_id(blog.author_id)
        except DataIntegrityError as e:
            raise AlreadyExists("Already liked this blog") from e

        logger.info(
            f"{user.email} {'liked' if outcome.liked else 'unliked'} blog {blog.id}",
            extra={
                "event": "interaction.like" if outcome.liked else "interaction.unlike",
                "blog_id": blog.id,
                "likes": outcome.likes,
            },
        )

        if outcome.liked and author is not None and self.fanout is not None:
            self.fanout.publish(
                NotificationEvent(
                    type=NotificationType.LIKE, actor=user, counterparty=author, blog=blog
                )
            )
        return outcome

    def apply(self, job_id: str, user_email: str) -> int:
        """Apply to a job and notify its author.

        Returns:
            Application count for the job after the request

        Raises:
            InvalidArgument: Missing email
            NotFound: Unknown user or job
            AlreadyExists: The user already applied
        """
        require_fields("User email is required", user_email)

        try:
            with self.session_factory() as session:
                user = require_user(session, user_email)
                job = JobRepository(session).get_by_id(job_id)
                if job is None:
                    raise NotFound("Job not found")

                applications = ApplicationRepository(session)
                if applications.exists(user.id, job.id):
                    raise AlreadyExists("Already applied to this job")
                applications.create(user.id, job.id)
                count = applications.count_for_job(job.id)
                author = UserRepository(session).get_by_id(job.author_id)
        except DataIntegrityError as e:
            raise AlreadyExists("Already applied to this job") from e

        logger.info(
            f"{user.email} applied to job {job.id}",
            extra={"event": "interaction.application", "job_id": job.id, "applications": count},
        )

        if author is not None and self.fanout is not None:
            self.fanout.publish(
                NotificationEvent(
                    type=NotificationType.APPLICATION, actor=user, counterparty=author, job=job
                )
            )
        return count
