"""Payload resolution for notifications and email templates.

This module turns a NotificationEvent into the inbox title/message pair and
into the context dictionary the email templates render.
"""

from typing import Dict, Tuple

from insyd.domain.models import NotificationType, User

from .models import NotificationEvent

PREVIEW_LENGTH = 200

TEMPLATE_KINDS = {
    NotificationType.NEW_BLOG: "new_blog",
    NotificationType.NEW_JOB: "new_job",
    NotificationType.LIKE: "like",
    NotificationType.APPLICATION: "application",
    NotificationType.FOLLOW: "follow",
    NotificationType.CONTENT_REMOVED: "content_removed",
}


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """First `length` characters of text, with "..." when truncated."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def template_kind(event: NotificationEvent) -> str:
    return TEMPLATE_KINDS[NotificationType(event.type)]


def build_notification_content(event: NotificationEvent) -> Tuple[str, str]:
    """Build the inbox (title, message) for an event.

    Raises:
        ValueError: If the event lacks the blog/job its type needs
    """
    actor = event.actor.email
    event_type = NotificationType(event.type)

    if event_type == NotificationType.NEW_BLOG:
        blog = _require(event.blog, event_type)
        return "New Blog Post", f"{actor} posted a new blog: {blog.title}"

    if event_type == NotificationType.NEW_JOB:
        job = _require(event.job, event_type)
        return f"New Job: {job.title}", f"{actor} posted a job at {job.company}"

    if event_type == NotificationType.LIKE:
        blog = _require(event.blog, event_type)
        return "Blog Liked", f"{actor} liked your blog: {blog.title}"

    if event_type == NotificationType.APPLICATION:
        job = _require(event.job, event_type)
        return "Job Application", f"{actor} applied to your job: {job.title} at {job.company}"

    if event_type == NotificationType.FOLLOW:
        return "New Follower", f"{actor} is now following you"

    if event.blog is not None:
        return "Content Removed", f"{actor} removed the blog: {event.blog.title}"
    job = _require(event.job, event_type)
    return "Content Removed", f"{actor} removed the job: {job.title} at {job.company}"


def build_email_context(event: NotificationEvent, recipient: User, site_url: str) -> Dict:
    """Build the template context for one recipient of an event.

    Returns:
        Dictionary with:
        - actor_email, recipient_email, site_url: always present
        - title, message: inbox title and message
        - blog_title, blog_preview: for blog events
        - job_title, company: for job events
        - content_kind: "blog" or "job" for removal notices
    """
    title, message = build_notification_content(event)
    context = {
        "actor_email": event.actor.email,
        "recipient_email": recipient.email,
        "site_url": site_url,
        "title": title,
        "message": message,
    }

    if event.blog is not None:
        context["content_kind"] = "blog"
        context["blog_title"] = event.blog.title
        context["blog_preview"] = preview(event.blog.content)
    if event.job is not None:
        context["content_kind"] = "job"
        context["job_title"] = event.job.title
        context["company"] = event.job.company

    return context


def build_welcome_context(user: User, site_url: str) -> Dict:
    return {"recipient_email": user.email, "name": user.name, "site_url": site_url}


def _require(value, event_type: NotificationType):
    if value is None:
        raise ValueError(f"{event_type.value} event is missing its content")
    return value
