"""API routers for the ActionGraph HTTP API."""

from fastapi import APIRouter

from actiongraph.backend.api.actions import router as actions_router
from actiongraph.backend.api.users import router as users_router

router = APIRouter()

router.include_router(actions_router, prefix="/actions", tags=["actions"])
router.include_router(users_router, prefix="/users", tags=["users"])

__all__ = ["router"]
