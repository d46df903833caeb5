"""User directory endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from insyd.api.dependencies import get_services
from insyd.api.schemas import UserListResponse, UserSummaryOut
from insyd.services import Services

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
def list_users(
    current_user: Optional[str] = Query(None, alias="currentUser"),
    services: Services = Depends(get_services),
):
    """Every other user with follow status and counts."""
    summaries = services.directory.list_users(current_user)
    return UserListResponse(users=[UserSummaryOut.from_summary(s) for s in summaries])
