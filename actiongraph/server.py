"""MCP Server for ActionGraph.

Exposes the analytical tracker operations as MCP tools. The tracker is
created and connected in the server lifespan and closed on shutdown; when
the graph store is not configured or unreachable the tools answer with an
"unavailable" payload instead of failing the server.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any, AsyncIterator, Literal

from mcp.server.fastmcp import Context, FastMCP
from pydantic import Field

from actiongraph.config import Config
from actiongraph.errors import TrackerUnavailableError
from actiongraph.log_config import get_logger
from actiongraph.tracker import ActionTracker, connect_action_tracker

log = get_logger("server")


@dataclass
class TrackerContext:
    """Lifespan state shared by all tool calls."""

    tracker: ActionTracker | None


@asynccontextmanager
async def tracker_lifespan(server: FastMCP) -> AsyncIterator[TrackerContext]:
    """Connect the tracker on startup and close it on shutdown."""
    log.info("ActionGraph MCP server starting...")
    tracker = await connect_action_tracker(Config())
    try:
        yield TrackerContext(tracker=tracker)
    finally:
        if tracker is not None:
            await tracker.close()
        log.info("ActionGraph MCP server stopped")


mcp = FastMCP(
    "actiongraph",
    instructions="""ActionGraph: history and patterns of tool usage.

## WHEN TO USE

- `get_similar_actions`: before repeating an operation, see how similar calls
  were made before (parameter key overlap, same service and action type)
- `suggest_next_action`: after an operation, see what this user usually does
  next within the same session (30 minute window)
- `get_user_history`: a user's most recent actions across services
- `find_user_by_email`: resolve a tracked user from an email address
- `get_action_recommendations`: frequent actions matching a keyword
""",
    lifespan=tracker_lifespan,
)


def _get_tracker(ctx: Context) -> ActionTracker:
    """Return the connected tracker or raise TrackerUnavailableError."""
    tracker = ctx.request_context.lifespan_context.tracker
    if tracker is None:
        raise TrackerUnavailableError()
    return tracker


def _unavailable(error: TrackerUnavailableError) -> dict[str, Any]:
    log.warning(f"Tool called while tracking is disabled: {error.detail}")
    return {"success": False, "message": error.detail}


# ═══════════════════════════════════════════════════════════════════════════════
# TOOLS
# ═══════════════════════════════════════════════════════════════════════════════


@mcp.tool(
    name="get_similar_actions",
    description="Finds previously recorded actions similar to the current one",
)
async def get_similar_actions(
    mcp_type: Annotated[str, Field(description="Type of MCP (Mattermost, DynamoDB, Jira, etc.)")],
    action_type: Annotated[str, Field(description="Type of action being performed")],
    parameters: Annotated[dict[str, Any], Field(description="Parameters of the action")],
    ctx: Context,
    limit: Annotated[int, Field(description="Maximum number of similar actions to return", ge=1)] = 5,
) -> dict[str, Any]:
    log.info(f"Tool: get_similar_actions called ({mcp_type}/{action_type}, limit={limit})")
    try:
        tracker = _get_tracker(ctx)
    except TrackerUnavailableError as e:
        return _unavailable(e)
    return await tracker.find_similar_actions(mcp_type, action_type, parameters, limit)


@mcp.tool(name="get_user_history", description="Gets a user's action history")
async def get_user_history(
    user_id: Annotated[str, Field(description="ID of the user")],
    ctx: Context,
    limit: Annotated[int, Field(description="Maximum number of actions to return", ge=1)] = 20,
) -> dict[str, Any]:
    log.info(f"Tool: get_user_history called (user={user_id}, limit={limit})")
    try:
        tracker = _get_tracker(ctx)
    except TrackerUnavailableError as e:
        return _unavailable(e)
    return await tracker.get_user_action_history(user_id, limit)


@mcp.tool(
    name="suggest_next_action",
    description="Suggests the next action based on the user's typical patterns",
)
async def suggest_next_action(
    user_id: Annotated[str, Field(description="ID of the user")],
    mcp_type: Annotated[str, Field(description="Type of MCP (Mattermost, DynamoDB, Jira, etc.)")],
    current_action_type: Annotated[str, Field(description="Type of the current action")],
    ctx: Context,
    current_parameters: Annotated[
        dict[str, Any] | None, Field(description="Parameters of the current action")
    ] = None,
) -> dict[str, Any]:
    log.info(f"Tool: suggest_next_action called (user={user_id}, {mcp_type}/{current_action_type})")
    try:
        tracker = _get_tracker(ctx)
    except TrackerUnavailableError as e:
        return _unavailable(e)
    return await tracker.suggest_next_action(
        user_id, mcp_type, current_action_type, current_parameters or {}
    )


@mcp.tool(
    name="find_user_by_email",
    description="Finds a tracked user by email and returns their attributes",
)
async def find_user_by_email(
    email: Annotated[str, Field(description="Email of the user to find")],
    env: Annotated[Literal["uat", "prod"], Field(description="Environment: uat or prod")],
    ctx: Context,
) -> dict[str, Any]:
    log.info(f"Tool: find_user_by_email called (env={env})")
    try:
        tracker = _get_tracker(ctx)
    except TrackerUnavailableError as e:
        return _unavailable(e)
    return await tracker.find_user_by_email(email, env)


@mcp.tool(
    name="get_action_recommendations",
    description="Recommends frequently used actions whose name or type matches a keyword",
)
async def get_action_recommendations(
    context: Annotated[str, Field(description="Keyword matched against action names and types")],
    ctx: Context,
    user_id: Annotated[str | None, Field(description="Only consider this user's actions")] = None,
    limit: Annotated[int, Field(description="Maximum number of recommendations", ge=1)] = 5,
) -> dict[str, Any]:
    log.info(f"Tool: get_action_recommendations called (context='{context[:50]}')")
    try:
        tracker = _get_tracker(ctx)
    except TrackerUnavailableError as e:
        return _unavailable(e)
    return await tracker.get_action_recommendations(context, user_id, limit)


def main() -> None:
    """Run the MCP server over stdio."""
    mcp.run()


if __name__ == "__main__":
    main()
