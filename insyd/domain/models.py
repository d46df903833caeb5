"""Core domain models for users, content, interactions and notifications.

This module defines the data structures used throughout the application:
- User: a member identified by a bare email string
- FollowEdge: directed follow relationship between two users
- Blog / Job: content owned by exactly one author
- Like / Application: unique (user, content) interaction pairs
- Notification: an in-app inbox entry produced by the fan-out engine
- *Summary: read models returned by list operations
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _ensure_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class NotificationType(str, Enum):
    """Type tag carried by every notification."""

    NEW_BLOG = "new-blog"
    NEW_JOB = "new-job"
    LIKE = "like"
    APPLICATION = "application"
    FOLLOW = "follow"
    CONTENT_REMOVED = "content-removed"

    @property
    def is_content_event(self) -> bool:
        """Whether the event announces new content to an audience."""
        return self in (NotificationType.NEW_BLOG, NotificationType.NEW_JOB)


class User(BaseModel):
    """A registered member. The email is the identity and is used verbatim."""

    id: str = Field(..., description="Opaque stable identifier")
    email: str = Field(..., min_length=1, description="Unique, case-sensitive email")
    name: Optional[str] = Field(None, description="Optional display name")
    created_at: datetime = Field(..., description="When the user was created (UTC)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return _ensure_utc(v)


class FollowEdge(BaseModel):
    """Directed edge: follower_id follows following_id."""

    id: str
    follower_id: str
    following_id: str
    created_at: datetime

    @field_validator("following_id")
    @classmethod
    def no_self_follow(cls, v: str, info) -> str:
        if info.data.get("follower_id") == v:
            raise ValueError("A user cannot follow themselves")
        return v


class Blog(BaseModel):
    """A blog post owned by its author."""

    id: str
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    author_id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)


class Job(BaseModel):
    """A job listing owned by its author."""

    id: str
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    author_id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)


class Like(BaseModel):
    """Presence of this row means the user likes the blog."""

    id: str
    user_id: str
    blog_id: str
    created_at: datetime


class Application(BaseModel):
    """A user's application to a job. There is no un-apply."""

    id: str
    user_id: str
    job_id: str
    created_at: datetime


class Notification(BaseModel):
    """An inbox entry for a single recipient.

    actor_id is the user who triggered the event; it is never equal to
    user_id. blog_id / job_id reference the content the notification is
    about; deleting that content deletes the notification with it.
    """

    id: str
    user_id: str = Field(..., description="Recipient")
    actor_id: Optional[str] = Field(None, description="User who triggered the event")
    title: str
    message: str
    type: NotificationType
    read: bool = False
    blog_id: Optional[str] = None
    job_id: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _ensure_utc(v)

    model_config = {"use_enum_values": True}


class BlogSummary(BaseModel):
    """Blog as listed: author email and like count attached."""

    blog: Blog
    author_email: str
    likes: int = Field(0, ge=0)


class JobSummary(BaseModel):
    """Job as listed: author email and application count attached."""

    job: Job
    author_email: str
    applications: int = Field(0, ge=0)


class UserSummary(BaseModel):
    """Directory entry for one user, relative to the requesting user."""

    user: User
    is_following: bool = False
    followers: int = Field(0, ge=0)
    following: int = Field(0, ge=0)
    blogs: int = Field(0, ge=0)
    jobs: int = Field(0, ge=0)
