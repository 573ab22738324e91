"""User history and lookup endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from actiongraph.backend.app import get_tracker, require_success
from actiongraph.log_config import get_logger
from actiongraph.tracker import ActionTracker

router = APIRouter()
log = get_logger("backend.api.users")


@router.get("/by-email")
async def find_user_by_email(
    email: str = Query(..., min_length=1),
    env: Literal["uat", "prod"] = Query("prod"),
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """Find a tracked user by email."""
    log.info(f"Looking up user by email ({env})")
    result = await tracker.find_user_by_email(email, env)
    if not result.get("success") and result.get("message") == "User not found":
        raise HTTPException(status_code=404, detail="User not found")
    return require_success(result)


@router.get("/{user_id}/history")
async def user_history(
    user_id: str,
    limit: int = Query(20, ge=1, le=500),
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """A user's actions, newest first."""
    log.info(f"History for {user_id} (limit={limit})")
    return require_success(await tracker.get_user_action_history(user_id, limit))
