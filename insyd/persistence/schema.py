"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the database schema and provides
conversion methods between ORM models and domain models.

Uniqueness that the application relies on under concurrency is declared here:
users.email, (user_id, blog_id), (user_id, job_id), (follower_id, following_id).
Dependent rows reference their parents with ON DELETE CASCADE.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from insyd.domain.models import (
    Application,
    Blog,
    FollowEdge,
    Job,
    Like,
    Notification,
    User,
)

logger = logging.getLogger(__name__)

Base = declarative_base()

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def new_id() -> str:
    """Generate an opaque identifier for a new row."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """ORM model for users table."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(255), nullable=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_users_created", "created_at"),)

    def to_domain(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=_parse_datetime(self.created_at),
        )


class FollowModel(Base):
    """ORM model for follows table (directed edges)."""

    __tablename__ = "follows"

    id = Column(String(36), primary_key=True, default=new_id)
    follower_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    following_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
        Index("idx_follows_following", "following_id", "created_at"),
    )

    def to_domain(self) -> FollowEdge:
        return FollowEdge(
            id=self.id,
            follower_id=self.follower_id,
            following_id=self.following_id,
            created_at=_parse_datetime(self.created_at),
        )


class BlogModel(Base):
    """ORM model for blogs table."""

    __tablename__ = "blogs"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_blogs_created", "created_at"),
        Index("idx_blogs_author", "author_id"),
    )

    def to_domain(self) -> Blog:
        return Blog(
            id=self.id,
            title=self.title,
            content=self.content,
            author_id=self.author_id,
            created_at=_parse_datetime(self.created_at),
        )


class JobModel(Base):
    """ORM model for jobs table."""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    company = Column(String(255), nullable=False)
    author_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_jobs_created", "created_at"),
        Index("idx_jobs_author", "author_id"),
    )

    def to_domain(self) -> Job:
        return Job(
            id=self.id,
            title=self.title,
            company=self.company,
            author_id=self.author_id,
            created_at=_parse_datetime(self.created_at),
        )


class BlogLikeModel(Base):
    """ORM model for blog_likes table. A row means "liked"."""

    __tablename__ = "blog_likes"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    blog_id = Column(String(36), ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "blog_id", name="uq_blog_likes_pair"),
        Index("idx_blog_likes_blog", "blog_id"),
    )

    def to_domain(self) -> Like:
        return Like(
            id=self.id,
            user_id=self.user_id,
            blog_id=self.blog_id,
            created_at=_parse_datetime(self.created_at),
        )


class JobApplicationModel(Base):
    """ORM model for job_applications table."""

    __tablename__ = "job_applications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_job_applications_pair"),
        Index("idx_job_applications_job", "job_id"),
    )

    def to_domain(self) -> Application:
        return Application(
            id=self.id,
            user_id=self.user_id,
            job_id=self.job_id,
            created_at=_parse_datetime(self.created_at),
        )


class NotificationModel(Base):
    """ORM model for notifications table.

    blog_id / job_id cascade so that deleting content removes the
    notifications that reference it.
    """

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    blog_id = Column(String(36), ForeignKey("blogs.id", ondelete="CASCADE"), nullable=True)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "actor_id IS NULL OR actor_id <> user_id", name="ck_notifications_not_self"
        ),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    def to_domain(self) -> Notification:
        return Notification(
            id=self.id,
            user_id=self.user_id,
            actor_id=self.actor_id,
            title=self.title,
            message=self.message,
            type=self.type,
            read=bool(self.read),
            blog_id=self.blog_id,
            job_id=self.job_id,
            created_at=_parse_datetime(self.created_at),
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO 8601 string for database storage.

    Args:
        dt: Datetime object (naive values are treated as UTC)

    Returns:
        ISO 8601 formatted string or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    # Fixed width with explicit Z so string order equals time order
    return dt.strftime(TIMESTAMP_FORMAT)


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse ISO 8601 string to datetime object.

    Args:
        dt_str: ISO 8601 formatted string

    Returns:
        Timezone-aware datetime in UTC or None
    """
    if dt_str is None or dt_str == "":
        return None

    dt_str = dt_str.rstrip("Z")

    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def timestamp_now() -> str:
    """Current UTC time in storage format."""
    return _format_datetime(utc_now())


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
