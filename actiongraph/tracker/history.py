"""User action history, newest first."""

from typing import Any

from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger
from actiongraph.models import Action, McpService

log = get_logger("tracker.history")

USER_HISTORY_QUERY = """
    MATCH (user:User {id: $userId})-[:PERFORMED]->(action:Action)-[:USED]->(mcp:MCP)
    RETURN action, mcp
    ORDER BY action.timestamp DESC
    LIMIT $limit
"""


class HistoryReader:
    """Reads a user's past actions in reverse chronological order."""

    def __init__(self, graph: GraphBackend):
        self.graph = graph

    async def get_user_action_history(self, user_id: str, limit: int = 20) -> dict[str, Any]:
        """Get the most recent actions of a user with their MCP.

        An unknown user yields an empty, successful result.

        Returns:
            {"success": True, "actions": [{"action", "mcp"}, ...]} or
            {"success": False, "message"}
        """
        try:
            if limit < 1:
                raise ValueError(f"limit must be positive, got {limit}")

            result = await self.graph.query(
                USER_HISTORY_QUERY, {"userId": user_id, "limit": int(limit)}
            )
            actions = [
                {
                    "action": Action.from_properties(row["action"]).to_dict(),
                    "mcp": McpService.from_properties(row["mcp"]).to_dict(),
                }
                for row in result.records()
            ]

            log.debug(f"History for {user_id}: {len(actions)} actions")
            return {"success": True, "actions": actions}

        except Exception as e:
            log.error(f"Error getting user action history: {e}")
            return {
                "success": False,
                "message": f"Failed to get user action history: {e}",
            }
