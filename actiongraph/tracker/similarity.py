"""Similar action search.

Candidates are Actions of the requested type performed against services of
the requested MCP type. Each candidate is scored by the Jaccard overlap of
its parameter key set with the query's key set (values are ignored).
Candidates with no parameters, or scoring at or below the threshold, are
dropped; the rest are ranked by score, then recency.
"""

from collections.abc import Iterable
from typing import Any

from actiongraph.codec import decode_parameter_map, parameter_keys
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger, log_timing
from actiongraph.models import Action, McpService

log = get_logger("tracker.similarity")

DEFAULT_SIMILARITY_THRESHOLD = 0.3

CANDIDATE_ACTIONS_QUERY = """
    MATCH (action:Action {type: $actionType})-[:USED]->(mcp:MCP {type: $mcpType})
    RETURN action, mcp
"""


def jaccard_similarity(candidate_keys: Iterable[str], input_keys: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B| over two key sets; 0.0 when both are empty.

    Identical non-empty key sets always score 1.0.
    """
    a = frozenset(candidate_keys)
    b = frozenset(input_keys)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def rank_similar(
    candidates: Iterable[tuple[dict[str, Any], dict[str, Any]]],
    parameters: dict[str, Any],
    limit: int,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[dict[str, Any]]:
    """Score and rank (action_props, mcp_props) candidates.

    Args:
        candidates: Raw node properties as returned by the store
        parameters: Query parameters whose keys are compared
        limit: Maximum number of results
        threshold: Scores must be strictly greater than this

    Returns:
        List of {"action", "mcp", "similarity"} dicts, best first
    """
    input_keys = parameter_keys(parameters)
    if not input_keys:
        return []

    scored = []
    for action_props, mcp_props in candidates:
        candidate_keys = parameter_keys(decode_parameter_map(action_props.get("parameters")))
        if not candidate_keys:
            continue
        score = jaccard_similarity(candidate_keys, input_keys)
        if score <= threshold:
            continue
        scored.append((score, action_props.get("timestamp") or "", action_props, mcp_props))

    # Score desc, then most recent first
    scored.sort(key=lambda item: (item[0], item[1]), reverse=True)

    return [
        {
            "action": Action.from_properties(action_props).to_dict(),
            "mcp": McpService.from_properties(mcp_props).to_dict(),
            "similarity": score,
        }
        for score, _, action_props, mcp_props in scored[:limit]
    ]


class SimilarityEngine:
    """Finds recorded actions structurally similar to a candidate action."""

    def __init__(self, graph: GraphBackend, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.graph = graph
        self.threshold = threshold

    async def find_similar_actions(
        self,
        mcp_type: str,
        action_type: str,
        parameters: dict[str, Any] | None,
        limit: int = 5,
    ) -> dict[str, Any]:
        """Find previously recorded actions similar to the given one.

        Args:
            mcp_type: Service category to search within
            action_type: Action category to search within
            parameters: Parameters of the candidate action
            limit: Maximum results (default: 5)

        Returns:
            {"success": True, "similarActions": [...]} or
            {"success": False, "message"}
        """
        try:
            if limit < 1:
                raise ValueError(f"limit must be positive, got {limit}")

            with log_timing("similar actions query", log):
                result = await self.graph.query(
                    CANDIDATE_ACTIONS_QUERY,
                    {"mcpType": mcp_type, "actionType": action_type},
                )

            candidates = [(row["action"], row["mcp"]) for row in result.records()]
            similar = rank_similar(candidates, parameters or {}, limit, self.threshold)

            log.debug(
                f"Similar actions for {mcp_type}/{action_type}: "
                f"{len(similar)} of {len(candidates)} candidates"
            )
            return {"success": True, "similarActions": similar}

        except Exception as e:
            log.error(f"Error finding similar actions: {e}")
            return {
                "success": False,
                "message": f"Failed to find similar actions: {e}",
            }
