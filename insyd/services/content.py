"""Content store: blogs and jobs owned by exactly one author.

Creation commits the row first and then fans out a new-blog / new-job
notification to the author's audience. Deletion is owner-only; likes,
applications and notifications that reference the content go with it.
"""

from dataclasses import dataclass
from typing import Callable, ContextManager, List, Optional, Union

from sqlalchemy.orm import Session

from insyd.domain.models import Blog, BlogSummary, Job, JobSummary, NotificationType, User
from insyd.logging import get_logger
from insyd.notifications.fanout import FanOutEngine
from insyd.notifications.models import NotificationEvent
from insyd.persistence import (
    ApplicationRepository,
    BlogRepository,
    JobRepository,
    LikeRepository,
    UserRepository,
    get_session,
)

from .errors import InvalidArgument, NotFound, Unauthorized
from .identity import require_fields, require_user

logger = get_logger(__name__, component="content")

SessionFactory = Callable[[], ContextManager[Session]]


@dataclass
class CreatedContent:
    """A freshly created blog or job and the size of its notified audience.

    notified_followers is the computed audience size; it does not drop when
    writing the inbox rows fails.
    """

    item: Union[Blog, Job]
    author_email: str
    notified_followers: int = 0


class ContentService:
    """Create, delete and list blogs and jobs."""

    def __init__(
        self,
        fanout: Optional[FanOutEngine] = None,
        notify_on_content_removed: bool = False,
        session_factory: SessionFactory = get_session,
    ):
        self.fanout = fanout
        self.notify_on_content_removed = notify_on_content_removed
        self.session_factory = session_factory

    def create_blog(self, author_email: str, title: str, content: str) -> CreatedContent:
        """Create a blog and notify the author's audience.

        Raises:
            InvalidArgument: Missing email, title or content
            NotFound: Unknown author
        """
        require_fields("Email, title, and content are required", author_email, title, content)

        with self.session_factory() as session:
            author = require_user(session, author_email)
            blog = BlogRepository(session).create(author.id, title, content)

        logger.info(
            f"Blog created by {author.email}",
            extra={"event": "content.blog.created", "blog_id": blog.id},
        )
        notified = self._announce(NotificationEvent(type=NotificationType.NEW_BLOG, actor=author, blog=blog))
        return CreatedContent(item=blog, author_email=author.email, notified_followers=notified)

    def create_job(self, author_email: str, title: str, company: str) -> CreatedContent:
        """Create a job and notify the author's audience.

        Raises:
            InvalidArgument: Missing email, title or company
            NotFound: Unknown author
        """
        require_fields("Email, title, and company are required", author_email, title, company)

        with self.session_factory() as session:
            author = require_user(session, author_email)
            job = JobRepository(session).create(author.id, title, company)

        logger.info(
            f"Job created by {author.email}",
            extra={"event": "content.job.created", "job_id": job.id},
        )
        notified = self._announce(NotificationEvent(type=NotificationType.NEW_JOB, actor=author, job=job))
        return CreatedContent(item=job, author_email=author.email, notified_followers=notified)

    def _announce(self, event: NotificationEvent) -> int:
        if self.fanout is None:
            return 0
        return self.fanout.publish(event).recipients

    def delete_blog(self, blog_id: str, requester_email: str) -> None:
        """Delete a blog owned by the requester.

        Raises:
            InvalidArgument: Missing requester email
            NotFound: Unknown requester or blog
            Unauthorized: Requester is not the author
        """
        require_fields("User email is required", requester_email)

        with self.session_factory() as session:
            requester = require_user(session, requester_email)
            repo = BlogRepository(session)
            blog = repo.get_by_id(blog_id)
            if blog is None:
                raise NotFound("Blog not found")
            if blog.author_id != requester.id:
                raise Unauthorized("Only the author can delete this blog")

            former_likers = self._users(session, LikeRepository(session).user_ids_for_blog(blog.id))
            repo.delete(blog.id)

        logger.info(
            f"Blog {blog.id} deleted by {requester.email}",
            extra={"event": "content.blog.deleted", "blog_id": blog.id},
        )
        self._announce_removal(requester, former_likers, blog=blog)

    def delete_job(self, job_id: str, requester_email: str) -> None:
        """Delete a job owned by the requester.

        Raises:
            InvalidArgument: Missing requester email
            NotFound: Unknown requester or job
            Unauthorized: Requester is not the author
        """
        require_fields("User email is required", requester_email)

        with self.session_factory() as session:
            requester = require_user(session, requester_email)
            repo = JobRepository(session)
            job = repo.get_by_id(job_id)
            if job is None:
                raise NotFound("Job not found")
            if job.author_id != requester.id:
                raise Unauthorized("Only the author can delete this job")

            applicants = self._users(session, ApplicationRepository(session).user_ids_for_job(job.id))
            repo.delete(job.id)

        logger.info(
            f"Job {job.id} deleted by {requester.email}",
            extra={"event": "content.job.deleted", "job_id": job.id},
        )
        self._announce_removal(requester, applicants, job=job)

    def _users(self, session: Session, user_ids: List[str]) -> List[User]:
        if not (self.notify_on_content_removed and self.fanout):
            return []
        repo = UserRepository(session)
        users = (repo.get_by_id(user_id) for user_id in user_ids)
        return [user for user in users if user is not None]

    def _announce_removal(
        self,
        owner: User,
        recipients: List[User],
        blog: Optional[Blog] = None,
        job: Optional[Job] = None,
    ) -> None:
        if not (self.notify_on_content_removed and self.fanout):
            return
        for recipient in recipients:
            self.fanout.publish(
                NotificationEvent(
                    type=NotificationType.CONTENT_REMOVED,
                    actor=owner,
                    counterparty=recipient,
                    blog=blog,
                    job=job,
                )
            )

    def list_blogs(self) -> List[BlogSummary]:
        """Every blog, newest first, with author email and like count."""
        with self.session_factory() as session:
            return BlogRepository(session).list_summaries()

    def list_jobs(self) -> List[JobSummary]:
        """Every job, newest first, with author email and application count."""
        with self.session_factory() as session:
            return JobRepository(session).list_summaries()
