"""Context-based action recommendations.

Finds recorded actions whose name or type contains a context string and
reports the most frequent (service, action) combinations with sample
parameters.
"""

from typing import Any

from actiongraph.codec import decode_structured
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger

log = get_logger("tracker.recommendations")

RECOMMENDATIONS_QUERY = """
    MATCH (user:User)-[:PERFORMED]->(action:Action)-[:USED]->(mcp:MCP)
    WHERE (toLower(action.name) CONTAINS $context OR toLower(action.type) CONTAINS $context)
      AND ($userId IS NULL OR user.id = $userId)
    RETURN mcp.type AS mcpType,
           mcp.name AS mcpName,
           action.type AS actionType,
           action.name AS actionName,
           collect(DISTINCT action.parameters) AS parameterSamples,
           count(action) AS frequency
    ORDER BY frequency DESC, actionName ASC
    LIMIT $limit
"""


class ActionRecommender:
    """Recommends actions matching a free-text context."""

    def __init__(self, graph: GraphBackend):
        self.graph = graph

    async def get_action_recommendations(
        self,
        context: str,
        user_id: str | None = None,
        limit: int = 5,
    ) -> dict[str, Any]:
        """Most frequent actions whose name or type contains ``context``.

        Args:
            context: Case-insensitive text matched against action name/type
            user_id: Only count actions performed by this user when given
            limit: Maximum number of recommendations (default: 5)

        Returns:
            {"success": True, "recommendations": [...]} or
            {"success": False, "message"}
        """
        try:
            context = (context or "").strip().lower()
            if not context:
                raise ValueError("context must not be empty")
            if limit < 1:
                raise ValueError(f"limit must be positive, got {limit}")

            result = await self.graph.query(
                RECOMMENDATIONS_QUERY,
                {"context": context, "userId": user_id, "limit": int(limit)},
            )
            recommendations = [
                {
                    "mcpType": row["mcpType"],
                    "mcpName": row["mcpName"],
                    "actionType": row["actionType"],
                    "actionName": row["actionName"],
                    "parameterSamples": [decode_structured(p) for p in row["parameterSamples"]],
                    "frequency": int(row["frequency"]),
                }
                for row in result.records()
            ]
            log.debug(f"Recommendations for '{context}': {len(recommendations)}")
            return {"success": True, "recommendations": recommendations}

        except Exception as e:
            log.error(f"Error getting action recommendations: {e}")
            return {
                "success": False,
                "message": f"Failed to get action recommendations: {e}",
            }
