"""Blog endpoints: list, create, delete, like."""

from typing import Optional

from fastapi import APIRouter, Depends

from insyd.api.dependencies import get_services
from insyd.api.schemas import (
    BlogCreatedResponse,
    BlogListResponse,
    BlogOut,
    CreateBlogRequest,
    LikeResponse,
    MessageResponse,
    UserEmailRequest,
)
from insyd.domain.models import BlogSummary
from insyd.services import Services

router = APIRouter(prefix="/blogs", tags=["blogs"])


@router.get("", response_model=BlogListResponse)
def list_blogs(services: Services = Depends(get_services)):
    """Every blog, newest first, with like counts."""
    summaries = services.content.list_blogs()
    return BlogListResponse(blogs=[BlogOut.from_summary(s) for s in summaries])


@router.post("", response_model=BlogCreatedResponse)
def create_blog(
    body: Optional[CreateBlogRequest] = None,
    services: Services = Depends(get_services),
):
    """Create a blog and notify the author's followers."""
    body = body or CreateBlogRequest()
    created = services.content.create_blog(body.email, body.title, body.content)
    summary = BlogSummary(blog=created.item, author_email=created.author_email, likes=0)
    return BlogCreatedResponse(
        message="Blog created successfully",
        blog=BlogOut.from_summary(summary),
        notified_followers=created.notified_followers,
    )


@router.delete("/{blog_id}", response_model=MessageResponse)
def delete_blog(
    blog_id: str,
    body: Optional[UserEmailRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or UserEmailRequest()
    services.content.delete_blog(blog_id, body.user_email)
    return MessageResponse(message="Blog deleted successfully")


@router.post("/{blog_id}/like", response_model=LikeResponse)
def like_blog(
    blog_id: str,
    body: Optional[UserEmailRequest] = None,
    services: Services = Depends(get_services),
):
    """Like a blog; a repeated like follows the configured like policy."""
    body = body or UserEmailRequest()
    outcome = services.interactions.like(blog_id, body.user_email)
    message = "Blog liked successfully" if outcome.liked else "Blog unliked successfully"
    return LikeResponse(message=message, likes=outcome.likes, liked=outcome.liked)
