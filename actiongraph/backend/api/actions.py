"""Action recording and analytics endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette import status

from actiongraph.backend.app import get_tracker, require_success
from actiongraph.log_config import get_logger
from actiongraph.models import ActionStatus
from actiongraph.tracker import ActionTracker

router = APIRouter()
log = get_logger("backend.api.actions")


class RecordActionRequest(BaseModel):
    """Request model for recording one tool invocation."""

    user_id: str = Field(..., min_length=1, description="ID of the user who ran the tool")
    user_name: str | None = Field(default=None, description="Display name")
    user_email: str | None = Field(default=None, description="Email address")
    user_team: str | None = Field(default=None, description="Team name")
    mcp_id: str = Field(..., min_length=1, description="Calling service instance ID")
    mcp_type: str = Field(..., description="Calling service type (Mattermost, Jira, ...)")
    mcp_name: str = Field(..., description="Calling service name")
    action_type: str = Field(..., min_length=1, description="Coarse action category")
    action_name: str = Field(..., min_length=1, description="Specific operation name")
    parameters: dict[str, Any] = Field(default_factory=dict, description="Call inputs")
    result: Any = Field(default=None, description="Outcome or error payload")
    status: ActionStatus = Field(..., description="success or failure")


class SimilarActionsRequest(BaseModel):
    """Request model for similar action search."""

    mcp_type: str = Field(..., description="Type of MCP to search within")
    action_type: str = Field(..., description="Type of action being performed")
    parameters: dict[str, Any] = Field(default_factory=dict, description="Parameters of the action")
    limit: int = Field(default=5, ge=1, le=100)


class SuggestNextActionRequest(BaseModel):
    """Request model for next-action suggestions."""

    user_id: str = Field(..., description="ID of the user")
    mcp_type: str = Field(..., description="Type of MCP")
    current_action_type: str = Field(..., description="Type of the current action")
    current_parameters: dict[str, Any] = Field(
        default_factory=dict, description="Parameters of the current action"
    )


class RecommendationsRequest(BaseModel):
    """Request model for context recommendations."""

    context: str = Field(..., min_length=1, description="Keyword matched against actions")
    user_id: str | None = Field(default=None, description="Only consider this user's actions")
    limit: int = Field(default=5, ge=1, le=100)


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_action(
    request: RecordActionRequest,
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """Record one tool invocation."""
    log.info(f"Recording {request.action_type}/{request.action_name} for {request.user_id}")
    result = await tracker.record_action(
        user_id=request.user_id,
        user_name=request.user_name,
        user_email=request.user_email,
        user_team=request.user_team,
        mcp_id=request.mcp_id,
        mcp_type=request.mcp_type,
        mcp_name=request.mcp_name,
        action_type=request.action_type,
        action_name=request.action_name,
        parameters=request.parameters,
        result=request.result,
        status=request.status,
    )
    return require_success(result)


@router.post("/similar")
async def similar_actions(
    request: SimilarActionsRequest,
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """Find previously recorded actions similar to the given one."""
    result = await tracker.find_similar_actions(
        request.mcp_type, request.action_type, request.parameters, request.limit
    )
    return require_success(result)


@router.post("/suggest-next")
async def suggest_next_action(
    request: SuggestNextActionRequest,
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """Suggest the user's likely next action."""
    result = await tracker.suggest_next_action(
        request.user_id,
        request.mcp_type,
        request.current_action_type,
        request.current_parameters,
    )
    return require_success(result)


@router.post("/recommendations")
async def recommendations(
    request: RecommendationsRequest,
    tracker: ActionTracker = Depends(get_tracker),
) -> dict:
    """Frequent actions matching a keyword."""
    result = await tracker.get_action_recommendations(
        request.context, request.user_id, request.limit
    )
    return require_success(result)
