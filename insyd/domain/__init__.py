"""Domain models for Insyd."""

from .models import (
    Application,
    Blog,
    BlogSummary,
    FollowEdge,
    Job,
    JobSummary,
    Like,
    Notification,
    NotificationType,
    User,
    UserSummary,
)

__all__ = [
    "User",
    "FollowEdge",
    "Blog",
    "Job",
    "Like",
    "Application",
    "Notification",
    "NotificationType",
    "BlogSummary",
    "JobSummary",
    "UserSummary",
]
