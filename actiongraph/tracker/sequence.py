"""Next-action suggestion from observed action sequences.

Treats a user's history as a short-horizon Markov signal: for every past
occurrence of the current action (same type, same MCP type, same user),
each later action by that user against the same MCP instance within the
session window counts as one observed transition. Transitions are grouped
by (type, name) and the most frequent groups are suggested.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from actiongraph.codec import decode_structured
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger, log_timing
from actiongraph.models import parse_timestamp

log = get_logger("tracker.sequence")

DEFAULT_SESSION_WINDOW = timedelta(minutes=30)
DEFAULT_MAX_SUGGESTIONS = 3

# Pairs are bounded by the session window in the store; group_transitions
# re-checks the exact strict window in Python.
TRANSITIONS_QUERY = """
    MATCH (user:User {id: $userId})-[:PERFORMED]->(current:Action {type: $currentActionType})
          -[:USED]->(mcp:MCP {type: $mcpType})
    MATCH (user)-[:PERFORMED]->(next:Action)-[:USED]->(mcp)
    WHERE next.timestamp > current.timestamp
      AND datetime(next.timestamp) < datetime(current.timestamp) + duration({milliseconds: $windowMillis})
    RETURN current.timestamp AS currentTimestamp,
           next.type AS nextType,
           next.name AS nextName,
           next.parameters AS nextParameters,
           next.timestamp AS nextTimestamp
"""

# Memgraph: no zone-suffixed datetime parsing, singular duration keys
MEMGRAPH_TRANSITIONS_QUERY = """
    MATCH (user:User {id: $userId})-[:PERFORMED]->(current:Action {type: $currentActionType})
          -[:USED]->(mcp:MCP {type: $mcpType})
    MATCH (user)-[:PERFORMED]->(next:Action)-[:USED]->(mcp)
    WHERE next.timestamp > current.timestamp
      AND localDateTime(substring(next.timestamp, 0, 23))
          < localDateTime(substring(current.timestamp, 0, 23)) + duration({millisecond: $windowMillis})
    RETURN current.timestamp AS currentTimestamp,
           next.type AS nextType,
           next.name AS nextName,
           next.parameters AS nextParameters,
           next.timestamp AS nextTimestamp
"""

_TRANSITIONS_QUERIES = {
    "neo4j": TRANSITIONS_QUERY,
    "memgraph": MEMGRAPH_TRANSITIONS_QUERY,
}


@dataclass
class _TransitionGroup:
    action_type: str
    action_name: str
    frequency: int = 0
    last_seen: str = ""
    parameter_sets: list[str] = field(default_factory=list)

    def add(self, parameters_json: str | None, timestamp: str) -> None:
        self.frequency += 1
        self.last_seen = max(self.last_seen, timestamp)
        parameters_json = parameters_json or "{}"
        if parameters_json not in self.parameter_sets:
            self.parameter_sets.append(parameters_json)

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionType": self.action_type,
            "actionName": self.action_name,
            "possibleParameters": [decode_structured(p) for p in self.parameter_sets],
            "frequency": self.frequency,
        }


def within_window(current: str, following: str, window: timedelta) -> bool:
    """True when ``following`` is later than ``current`` by less than ``window``."""
    gap = parse_timestamp(following) - parse_timestamp(current)
    return timedelta(0) < gap < window


def group_transitions(
    rows: list[dict[str, Any]],
    window: timedelta = DEFAULT_SESSION_WINDOW,
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[dict[str, Any]]:
    """Group transition rows into ranked suggestions.

    Args:
        rows: Dicts with currentTimestamp, nextType, nextName,
            nextParameters, nextTimestamp
        window: Exclusive upper bound on the gap between the two actions
        max_suggestions: Number of groups returned

    Returns:
        Suggestions ordered by frequency desc, then most recent transition
    """
    groups: dict[tuple[str, str], _TransitionGroup] = {}

    # Newest transitions first so parameter samples list recent ones first
    ordered = sorted(rows, key=lambda r: r["nextTimestamp"], reverse=True)
    for row in ordered:
        try:
            if not within_window(row["currentTimestamp"], row["nextTimestamp"], window):
                continue
        except (TypeError, ValueError) as e:
            log.warning(f"Skipping transition with unparseable timestamp: {e}")
            continue

        key = (row["nextType"], row["nextName"])
        group = groups.get(key)
        if group is None:
            group = groups[key] = _TransitionGroup(*key)
        group.add(row.get("nextParameters"), row["nextTimestamp"])

    # Stable sorts: frequency desc, then latest transition, then name
    ranked = sorted(groups.values(), key=lambda g: (g.action_type, g.action_name))
    ranked.sort(key=lambda g: g.last_seen, reverse=True)
    ranked.sort(key=lambda g: g.frequency, reverse=True)
    return [group.to_dict() for group in ranked[:max_suggestions]]


class SequencePredictor:
    """Suggests a likely next action from temporal adjacency of past actions."""

    def __init__(
        self,
        graph: GraphBackend,
        window: timedelta = DEFAULT_SESSION_WINDOW,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
    ):
        self.graph = graph
        self.window = window
        self.max_suggestions = max_suggestions

    @property
    def window_millis(self) -> int:
        return int(self.window / timedelta(milliseconds=1))

    def _transitions_query(self) -> str:
        dialect = getattr(self.graph, "SCHEMA_DIALECT", "neo4j")
        return _TRANSITIONS_QUERIES.get(dialect, TRANSITIONS_QUERY)

    async def suggest_next_action(
        self,
        user_id: str,
        mcp_type: str,
        current_action_type: str,
        current_parameters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Suggest what the user is likely to do after the current action.

        Args:
            user_id: User whose own history is mined
            mcp_type: Service category of the current action
            current_action_type: Type of the action just performed
            current_parameters: Parameters of the current action (not used
                for ranking)

        Returns:
            {"success": True, "suggestions": [...]} or
            {"success": False, "message"}
        """
        try:
            with log_timing("next action transitions query", log):
                result = await self.graph.query(
                    self._transitions_query(),
                    {
                        "userId": user_id,
                        "mcpType": mcp_type,
                        "currentActionType": current_action_type,
                        "windowMillis": self.window_millis,
                    },
                )

            rows = result.records()
            suggestions = group_transitions(rows, self.window, self.max_suggestions)

            log.debug(
                f"Next action for {user_id} after {mcp_type}/{current_action_type} "
                f"(params={sorted((current_parameters or {}).keys())}): "
                f"{len(suggestions)} suggestions from {len(rows)} candidate transitions"
            )
            return {"success": True, "suggestions": suggestions}

        except Exception as e:
            log.error(f"Error suggesting next action: {e}")
            return {
                "success": False,
                "message": f"Failed to suggest next action: {e}",
            }
