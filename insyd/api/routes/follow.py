"""Follow and unfollow endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from insyd.api.dependencies import get_services
from insyd.api.schemas import FollowRequest, MessageResponse
from insyd.services import Services

router = APIRouter(prefix="/follow", tags=["follow"])


@router.post("", response_model=MessageResponse)
def follow(
    body: Optional[FollowRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or FollowRequest()
    services.relationships.follow(body.follower_email, body.following_email)
    return MessageResponse(message="Successfully followed user")


@router.delete("", response_model=MessageResponse)
def unfollow(
    body: Optional[FollowRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or FollowRequest()
    services.relationships.unfollow(body.follower_email, body.following_email)
    return MessageResponse(message="Successfully unfollowed user")
