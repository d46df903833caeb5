"""API router aggregation."""

from fastapi import APIRouter

from .auth import router as auth_router
from .blogs import router as blogs_router
from .follow import router as follow_router
from .health import router as health_router
from .jobs import router as jobs_router
from .notifications import router as notifications_router
from .users import router as users_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(blogs_router)
router.include_router(jobs_router)
router.include_router(follow_router)
router.include_router(notifications_router)
router.include_router(users_router)
router.include_router(health_router)
