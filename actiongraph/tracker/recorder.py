"""Action recording.

Writes one immutable Action node per tool invocation and links it to its
User (PERFORMED) and MCP (USED) in a single atomic Cypher statement.
Recording is best-effort telemetry: every failure is returned as a
``{"success": False, "message": ...}`` payload, never raised.
"""

import uuid
from typing import Any

from actiongraph.codec import encode_structured
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger, log_timing
from actiongraph.models import ActionStatus, utc_timestamp

log = get_logger("tracker.recorder")

RECORD_ACTION_QUERY = """
    MERGE (user:User {id: $userId})
    ON CREATE SET user.name = $userName,
                  user.email = $userEmail,
                  user.team = $userTeam,
                  user.createdAt = $timestamp
    ON MATCH SET user.name = COALESCE($userName, user.name),
                 user.email = COALESCE($userEmail, user.email),
                 user.team = COALESCE($userTeam, user.team)

    MERGE (mcp:MCP {id: $mcpId})
    ON CREATE SET mcp.type = $mcpType,
                  mcp.name = $mcpName,
                  mcp.createdAt = $timestamp

    CREATE (action:Action {
        id: $actionId,
        type: $actionType,
        name: $actionName,
        parameters: $parametersJson,
        result: $resultJson,
        status: $status,
        timestamp: $timestamp,
        mcpType: $mcpType
    })
    CREATE (user)-[:PERFORMED]->(action)
    CREATE (action)-[:USED]->(mcp)

    RETURN action.id AS actionId
"""


def _optional(value: str | None) -> str | None:
    """Empty strings never overwrite stored user fields."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")


class ActionRecorder:
    """Records tool invocations into the action graph."""

    def __init__(self, graph: GraphBackend):
        """Initialize ActionRecorder.

        Args:
            graph: Connected graph backend shared with the other components
        """
        self.graph = graph

    async def record_action(
        self,
        user_id: str,
        mcp_id: str,
        mcp_type: str,
        mcp_name: str,
        action_type: str,
        action_name: str,
        parameters: Any,
        result: Any,
        status: ActionStatus | str,
        user_name: str | None = None,
        user_email: str | None = None,
        user_team: str | None = None,
    ) -> dict[str, Any]:
        """Record one tool invocation.

        The User and MCP are upserted; the Action and both edges are created
        in the same write. User name/email/team are only updated when a new
        non-empty value is supplied. MCP properties are set on creation only.

        Args:
            user_id: Id of the user who triggered the invocation
            mcp_id: Id of the calling service instance
            mcp_type: Service category (e.g. "Mattermost")
            mcp_name: Human readable service name
            action_type: Coarse action category (e.g. "post_creation")
            action_name: Specific operation (e.g. "mattermost_create_post")
            parameters: Call inputs (any structured value)
            result: Outcome or error payload (any structured value)
            status: "success" or "failure"
            user_name: Optional display name
            user_email: Optional email
            user_team: Optional team

        Returns:
            {"success": True, "actionId", "message"} or
            {"success": False, "message"}
        """
        action_id = str(uuid.uuid4())
        timestamp = utc_timestamp()

        try:
            _require(
                user_id=user_id,
                mcp_id=mcp_id,
                action_type=action_type,
                action_name=action_name,
            )
            status_value = ActionStatus(status).value
            params = {
                "userId": user_id,
                "userName": _optional(user_name),
                "userEmail": _optional(user_email),
                "userTeam": _optional(user_team),
                "mcpId": mcp_id,
                "mcpType": mcp_type,
                "mcpName": mcp_name,
                "actionId": action_id,
                "actionType": action_type,
                "actionName": action_name,
                "parametersJson": encode_structured(parameters),
                "resultJson": encode_structured(result),
                "status": status_value,
                "timestamp": timestamp,
            }

            with log_timing(f"record_action {action_name}", log, level="trace"):
                query_result = await self.graph.query(RECORD_ACTION_QUERY, params)

            if not query_result:
                raise RuntimeError("write returned no action id")

            log.debug(
                f"Recorded action {action_id[:8]} ({action_type}/{action_name}, "
                f"status={status_value}) for user {user_id} on {mcp_id}"
            )
            return {
                "success": True,
                "actionId": action_id,
                "message": "Action recorded successfully",
            }

        except Exception as e:
            log.error(f"Error recording action {action_name}: {e}")
            return {
                "success": False,
                "message": f"Failed to record action: {e}",
            }
