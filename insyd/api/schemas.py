"""Request and response schemas for the HTTP API.

JSON keys are camelCase. Request fields are all optional so that missing
fields reach the services, which answer with their own 400 messages; values
of the wrong type are rejected by validation and mapped to 400 as well.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from insyd.domain.models import BlogSummary, JobSummary, Notification, User, UserSummary


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None


class CreateBlogRequest(CamelModel):
    email: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class CreateJobRequest(CamelModel):
    email: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None


class UserEmailRequest(CamelModel):
    """Body of delete, like, apply and mark-read requests."""

    user_email: Optional[str] = None


class FollowRequest(CamelModel):
    follower_email: Optional[str] = None
    following_email: Optional[str] = None


class LegacyMarkReadRequest(CamelModel):
    notification_id: Optional[str] = None
    email: Optional[str] = None


# --- Responses ---


class MessageResponse(CamelModel):
    message: str


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserOut":
        return cls(id=user.id, email=user.email, name=user.name, created_at=user.created_at)


class RegisterResponse(CamelModel):
    user: UserOut
    created: bool


class BlogOut(CamelModel):
    id: str
    title: str
    content: str
    author_id: str
    author_email: str
    created_at: datetime
    likes: int = 0

    @classmethod
    def from_summary(cls, summary: BlogSummary) -> "BlogOut":
        blog = summary.blog
        return cls(
            id=blog.id,
            title=blog.title,
            content=blog.content,
            author_id=blog.author_id,
            author_email=summary.author_email,
            created_at=blog.created_at,
            likes=summary.likes,
        )


class JobOut(CamelModel):
    id: str
    title: str
    company: str
    author_id: str
    author_email: str
    created_at: datetime
    applications: int = 0

    @classmethod
    def from_summary(cls, summary: JobSummary) -> "JobOut":
        job = summary.job
        return cls(
            id=job.id,
            title=job.title,
            company=job.company,
            author_id=job.author_id,
            author_email=summary.author_email,
            created_at=job.created_at,
            applications=summary.applications,
        )


class BlogListResponse(CamelModel):
    blogs: List[BlogOut]


class JobListResponse(CamelModel):
    jobs: List[JobOut]


class BlogCreatedResponse(CamelModel):
    message: str
    blog: BlogOut
    notified_followers: int


class JobCreatedResponse(CamelModel):
    message: str
    job: JobOut
    notified_followers: int


class LikeResponse(CamelModel):
    message: str
    likes: int
    liked: bool


class ApplyResponse(CamelModel):
    message: str
    applications: int


class NotificationOut(CamelModel):
    id: str
    user_id: str
    actor_id: Optional[str] = None
    title: str
    message: str
    type: str
    read: bool
    blog_id: Optional[str] = None
    job_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationOut":
        return cls(**notification.model_dump())


class NotificationListResponse(CamelModel):
    notifications: List[NotificationOut]
    unread: int


class UserSummaryOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime
    is_following: bool
    followers: int
    following: int
    blogs: int
    jobs: int

    @classmethod
    def from_summary(cls, summary: UserSummary) -> "UserSummaryOut":
        user = summary.user
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            is_following=summary.is_following,
            followers=summary.followers,
            following=summary.following,
            blogs=summary.blogs,
            jobs=summary.jobs,
        )


class UserListResponse(CamelModel):
    users: List[UserSummaryOut]


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
