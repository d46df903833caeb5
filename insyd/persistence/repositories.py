"""Data access layer (repositories) for persistence operations.

Repositories encapsulate database operations on a caller-provided session and
return domain models rather than ORM models. They never commit; the caller's
get_session() block owns the transaction. Constraint violations surface as
DataIntegrityError so services can map lost races to AlreadyExists.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from insyd.domain.models import (
    Application,
    Blog,
    BlogSummary,
    FollowEdge,
    Job,
    JobSummary,
    Like,
    Notification,
    User,
    UserSummary,
)

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import (
    BlogLikeModel,
    BlogModel,
    FollowModel,
    JobApplicationModel,
    JobModel,
    NotificationModel,
    UserModel,
    new_id,
    timestamp_now,
)

logger = logging.getLogger(__name__)


class _Repository:
    """Shared session handling and error translation."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _insert(self, model, description: str):
        try:
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.debug(f"Integrity error inserting {description}: {e}")
            raise DataIntegrityError(
                f"Failed to create {description} due to constraint violation: {e.orig}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting {description}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create {description}: {e}") from e


class UserRepository(_Repository):
    """Repository for user records."""

    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by exact (case-sensitive) email.

        Returns:
            User domain model if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(UserModel).where(UserModel.email == email)
            user_model = self.session.execute(stmt).scalar_one_or_none()
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            user_model = self.session.get(UserModel, user_id)
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def create(self, email: str, name: Optional[str] = None) -> User:
        """Insert a new user.

        Raises:
            DataIntegrityError: If the email is already taken
            PersistenceError: If database error occurs
        """
        model = UserModel(id=new_id(), email=email, name=name, created_at=timestamp_now())
        return self._insert(model, "user")

    def list_all(self) -> List[User]:
        """All users, newest first."""
        try:
            stmt = select(UserModel).order_by(UserModel.created_at.desc())
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing users: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list users: {e}") from e

    def list_directory(self, current_user_id: str) -> List[UserSummary]:
        """Every user except current_user_id, newest first, with relation counts.

        Args:
            current_user_id: The requesting user; is_following is relative to them

        Returns:
            List of UserSummary

        Raises:
            PersistenceError: If database error occurs
        """
        followers = (
            select(func.count(FollowModel.id))
            .where(FollowModel.following_id == UserModel.id)
            .scalar_subquery()
        )
        following = (
            select(func.count(FollowModel.id))
            .where(FollowModel.follower_id == UserModel.id)
            .scalar_subquery()
        )
        blogs = (
            select(func.count(BlogModel.id))
            .where(BlogModel.author_id == UserModel.id)
            .scalar_subquery()
        )
        jobs = (
            select(func.count(JobModel.id))
            .where(JobModel.author_id == UserModel.id)
            .scalar_subquery()
        )
        is_following = (
            select(FollowModel.id)
            .where(
                FollowModel.follower_id == current_user_id,
                FollowModel.following_id == UserModel.id,
            )
            .exists()
        )

        try:
            stmt = (
                select(UserModel, is_following, followers, following, blogs, jobs)
                .where(UserModel.id != current_user_id)
                .order_by(UserModel.created_at.desc())
            )
            rows = self.session.execute(stmt).all()
            return [
                UserSummary(
                    user=row[0].to_domain(),
                    is_following=bool(row[1]),
                    followers=row[2],
                    following=row[3],
                    blogs=row[4],
                    jobs=row[5],
                )
                for row in rows
            ]
        except SQLAlchemyError as e:
            logger.error(f"Error building user directory: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list users: {e}") from e


class FollowRepository(_Repository):
    """Repository for directed follow edges."""

    def exists(self, follower_id: str, following_id: str) -> bool:
        try:
            stmt = select(FollowModel.id).where(
                FollowModel.follower_id == follower_id,
                FollowModel.following_id == following_id,
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking follow edge: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check follow: {e}") from e

    def create(self, follower_id: str, following_id: str) -> FollowEdge:
        """Insert a follow edge.

        Raises:
            DataIntegrityError: If the edge already exists or is a self-follow
            PersistenceError: If database error occurs
        """
        model = FollowModel(
            id=new_id(),
            follower_id=follower_id,
            following_id=following_id,
            created_at=timestamp_now(),
        )
        return self._insert(model, "follow edge")

    def delete(self, follower_id: str, following_id: str) -> None:
        """Delete a follow edge.

        Raises:
            RecordNotFoundError: If the edge doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            stmt = delete(FollowModel).where(
                FollowModel.follower_id == follower_id,
                FollowModel.following_id == following_id,
            )
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError("Follow relationship not found")
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error deleting follow edge: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete follow: {e}") from e

    def list_followers(self, user_id: str) -> List[User]:
        """Users following user_id, oldest follow first."""
        try:
            stmt = (
                select(UserModel)
                .join(FollowModel, FollowModel.follower_id == UserModel.id)
                .where(FollowModel.following_id == user_id)
                .order_by(FollowModel.created_at.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing followers of {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list followers: {e}") from e


class BlogRepository(_Repository):
    """Repository for blog posts."""

    def create(self, author_id: str, title: str, content: str) -> Blog:
        model = BlogModel(
            id=new_id(),
            author_id=author_id,
            title=title,
            content=content,
            created_at=timestamp_now(),
        )
        return self._insert(model, "blog")

    def get_by_id(self, blog_id: str) -> Optional[Blog]:
        try:
            blog_model = self.session.get(BlogModel, blog_id)
            return blog_model.to_domain() if blog_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving blog {blog_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve blog: {e}") from e

    def delete(self, blog_id: str) -> None:
        """Delete a blog. Likes and notifications referencing it cascade.

        Raises:
            RecordNotFoundError: If blog_id doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            result = self.session.execute(delete(BlogModel).where(BlogModel.id == blog_id))
            if result.rowcount == 0:
                raise RecordNotFoundError(f"Blog {blog_id} not found")
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error deleting blog {blog_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete blog: {e}") from e

    def list_summaries(self) -> List[BlogSummary]:
        """All blogs newest first, with author email and like count."""
        likes = (
            select(func.count(BlogLikeModel.id))
            .where(BlogLikeModel.blog_id == BlogModel.id)
            .scalar_subquery()
        )
        try:
            stmt = (
                select(BlogModel, UserModel.email, likes)
                .join(UserModel, UserModel.id == BlogModel.author_id)
                .order_by(BlogModel.created_at.desc())
            )
            return [
                BlogSummary(blog=blog.to_domain(), author_email=email, likes=count)
                for blog, email, count in self.session.execute(stmt).all()
            ]
        except SQLAlchemyError as e:
            logger.error(f"Error listing blogs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list blogs: {e}") from e


class JobRepository(_Repository):
    """Repository for job listings."""

    def create(self, author_id: str, title: str, company: str) -> Job:
        model = JobModel(
            id=new_id(),
            author_id=author_id,
            title=title,
            company=company,
            created_at=timestamp_now(),
        )
        return self._insert(model, "job")

    def get_by_id(self, job_id: str) -> Optional[Job]:
        try:
            job_model = self.session.get(JobModel, job_id)
            return job_model.to_domain() if job_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve job: {e}") from e

    def delete(self, job_id: str) -> None:
        """Delete a job. Applications and notifications referencing it cascade.

        Raises:
            RecordNotFoundError: If job_id doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            result = self.session.execute(delete(JobModel).where(JobModel.id == job_id))
            if result.rowcount == 0:
                raise RecordNotFoundError(f"Job {job_id} not found")
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error deleting job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete job: {e}") from e

    def list_summaries(self) -> List[JobSummary]:
        """All jobs newest first, with author email and application count."""
        applications = (
            select(func.count(JobApplicationModel.id))
            .where(JobApplicationModel.job_id == JobModel.id)
            .scalar_subquery()
        )
        try:
            stmt = (
                select(JobModel, UserModel.email, applications)
                .join(UserModel, UserModel.id == JobModel.author_id)
                .order_by(JobModel.created_at.desc())
            )
            return [
                JobSummary(job=job.to_domain(), author_email=email, applications=count)
                for job, email, count in self.session.execute(stmt).all()
            ]
        except SQLAlchemyError as e:
            logger.error(f"Error listing jobs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list jobs: {e}") from e


class LikeRepository(_Repository):
    """Repository for (user, blog) likes."""

    def exists(self, user_id: str, blog_id: str) -> bool:
        try:
            stmt = select(BlogLikeModel.id).where(
                BlogLikeModel.user_id == user_id, BlogLikeModel.blog_id == blog_id
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking like: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check like: {e}") from e

    def create(self, user_id: str, blog_id: str) -> Like:
        model = BlogLikeModel(
            id=new_id(), user_id=user_id, blog_id=blog_id, created_at=timestamp_now()
        )
        return self._insert(model, "like")

    def delete(self, user_id: str, blog_id: str) -> bool:
        """Remove a like. Returns False if there was none."""
        try:
            stmt = delete(BlogLikeModel).where(
                BlogLikeModel.user_id == user_id, BlogLikeModel.blog_id == blog_id
            )
            return self.session.execute(stmt).rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting like: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete like: {e}") from e

    def count_for_blog(self, blog_id: str) -> int:
        try:
            stmt = select(func.count(BlogLikeModel.id)).where(BlogLikeModel.blog_id == blog_id)
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting likes for {blog_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count likes: {e}") from e

    def user_ids_for_blog(self, blog_id: str) -> List[str]:
        try:
            stmt = select(BlogLikeModel.user_id).where(BlogLikeModel.blog_id == blog_id)
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing likers of {blog_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list likers: {e}") from e


class ApplicationRepository(_Repository):
    """Repository for (user, job) applications."""

    def exists(self, user_id: str, job_id: str) -> bool:
        try:
            stmt = select(JobApplicationModel.id).where(
                JobApplicationModel.user_id == user_id, JobApplicationModel.job_id == job_id
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking application: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check application: {e}") from e

    def create(self, user_id: str, job_id: str) -> Application:
        model = JobApplicationModel(
            id=new_id(), user_id=user_id, job_id=job_id, created_at=timestamp_now()
        )
        return self._insert(model, "application")

    def count_for_job(self, job_id: str) -> int:
        try:
            stmt = select(func.count(JobApplicationModel.id)).where(
                JobApplicationModel.job_id == job_id
            )
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting applications for {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count applications: {e}") from e

    def user_ids_for_job(self, job_id: str) -> List[str]:
        try:
            stmt = select(JobApplicationModel.user_id).where(JobApplicationModel.job_id == job_id)
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing applicants of {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list applicants: {e}") from e


class NotificationRepository(_Repository):
    """Repository for inbox notifications."""

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str,
        actor_id: Optional[str] = None,
        blog_id: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> Notification:
        """Insert one unread notification.

        Raises:
            DataIntegrityError: If a reference is dangling or recipient equals actor
            PersistenceError: If database error occurs
        """
        model = NotificationModel(
            id=new_id(),
            user_id=user_id,
            actor_id=actor_id,
            title=title,
            message=message,
            type=type,
            read=False,
            blog_id=blog_id,
            job_id=job_id,
            created_at=timestamp_now(),
        )
        return self._insert(model, "notification")

    def list_for_user(self, user_id: str, limit: int) -> List[Notification]:
        """Most recent notifications for one recipient, newest first."""
        try:
            stmt = (
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id)
                .order_by(NotificationModel.created_at.desc())
                .limit(limit)
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e

    def count_unread(self, user_id: str) -> int:
        try:
            stmt = select(func.count(NotificationModel.id)).where(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting unread notifications: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count notifications: {e}") from e

    def mark_read(self, notification_id: str, user_id: str) -> None:
        """Set read=True on a notification owned by user_id.

        Raises:
            RecordNotFoundError: If no row matches both id and owner
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                update(NotificationModel)
                .where(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
                .values(read=True)
            )
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError("Notification not found or not authorized")
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error marking notification {notification_id} read: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update notification: {e}") from e
