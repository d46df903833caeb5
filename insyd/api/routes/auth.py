"""Registration endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends

from insyd.api.dependencies import get_services
from insyd.api.schemas import RegisterRequest, RegisterResponse, UserOut
from insyd.services import Services

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse)
def register(
    body: Optional[RegisterRequest] = None,
    services: Services = Depends(get_services),
):
    """Register an email, or return the existing user for it."""
    body = body or RegisterRequest()
    user, created = services.identity.register(body.email, name=body.name)
    return RegisterResponse(user=UserOut.from_domain(user), created=created)
