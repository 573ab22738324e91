"""ActionTracker façade.

Builds every tracker component around one injected graph backend and owns
its connect/close lifecycle. The process entry point (MCP server lifespan,
API lifespan, CLI command) constructs the tracker explicitly; there is no
module-level instance.
"""

from datetime import timedelta
from typing import Any

from actiongraph.config import Config
from actiongraph.db.graph_factory import create_graph_backend
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger
from actiongraph.models import ActionStatus
from actiongraph.tracker.directory import Environment, UserDirectory
from actiongraph.tracker.history import HistoryReader
from actiongraph.tracker.recommendations import ActionRecommender
from actiongraph.tracker.recorder import ActionRecorder
from actiongraph.tracker.sequence import SequencePredictor
from actiongraph.tracker.similarity import SimilarityEngine

log = get_logger("tracker")


class ActionTracker:
    """Records tool invocations and answers analytical queries over them.

    Example:
        tracker = ActionTracker.from_config(Config())
        async with tracker:
            await tracker.record_action(...)
            history = await tracker.get_user_action_history("u1")
    """

    def __init__(self, graph: GraphBackend, config: Config | None = None):
        """Initialize the tracker and its components.

        Args:
            graph: Graph backend shared by all components (connected or not)
            config: Optional config for analytics tuning (defaults otherwise)
        """
        self.graph = graph
        self.config = config

        threshold = config.similarity_threshold if config else 0.3
        window = timedelta(minutes=config.session_window_minutes if config else 30)
        max_suggestions = config.max_suggestions if config else 3

        self.recorder = ActionRecorder(graph)
        self.similarity = SimilarityEngine(graph, threshold=threshold)
        self.history = HistoryReader(graph)
        self.sequences = SequencePredictor(graph, window=window, max_suggestions=max_suggestions)
        self.directory = UserDirectory(graph)
        self.recommender = ActionRecommender(graph)

    @classmethod
    def from_config(cls, config: Config) -> "ActionTracker":
        """Create an unconnected tracker for the configured backend.

        Raises:
            ValueError: If connection settings are missing
        """
        return cls(create_graph_backend(config), config)

    @property
    def backend_name(self) -> str:
        return self.graph.backend_name

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    async def connect(self) -> None:
        """Connect to the store and initialize the schema.

        Connection or authentication failures propagate; there is no retry.
        """
        await self.graph.connect()
        log.info(f"Action tracker connected ({self.backend_name})")

    async def close(self) -> None:
        await self.graph.close()

    async def health_check(self) -> bool:
        return await self.graph.health_check()

    async def __aenter__(self) -> "ActionTracker":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ═══════════════════════════════════════════════════════════════════════════
    # OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

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
        return await self.recorder.record_action(
            user_id=user_id,
            mcp_id=mcp_id,
            mcp_type=mcp_type,
            mcp_name=mcp_name,
            action_type=action_type,
            action_name=action_name,
            parameters=parameters,
            result=result,
            status=status,
            user_name=user_name,
            user_email=user_email,
            user_team=user_team,
        )

    async def find_similar_actions(
        self,
        mcp_type: str,
        action_type: str,
        parameters: dict[str, Any] | None,
        limit: int = 5,
    ) -> dict[str, Any]:
        return await self.similarity.find_similar_actions(mcp_type, action_type, parameters, limit)

    async def get_user_action_history(self, user_id: str, limit: int = 20) -> dict[str, Any]:
        return await self.history.get_user_action_history(user_id, limit)

    async def suggest_next_action(
        self,
        user_id: str,
        mcp_type: str,
        current_action_type: str,
        current_parameters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self.sequences.suggest_next_action(
            user_id, mcp_type, current_action_type, current_parameters
        )

    async def find_user_by_email(self, email: str, env: Environment) -> dict[str, Any]:
        return await self.directory.find_user_by_email(email, env)

    async def get_action_recommendations(
        self,
        context: str,
        user_id: str | None = None,
        limit: int = 5,
    ) -> dict[str, Any]:
        return await self.recommender.get_action_recommendations(context, user_id, limit)


async def connect_action_tracker(config: Config | None = None) -> ActionTracker | None:
    """Create and connect a tracker, or return None when tracking is off.

    Missing configuration disables tracking silently (info log). A failed
    connection is logged and also disables tracking; it does not abort the
    enclosing application.
    """
    config = config or Config()
    if not config.tracking_enabled:
        log.info(
            "Graph store configuration not found "
            f"({', '.join(config.missing_connection_settings)} missing). "
            "Action tracking will be disabled."
        )
        return None

    tracker = ActionTracker.from_config(config)
    try:
        await tracker.connect()
    except Exception as e:
        log.warning(f"Failed to connect action tracker: {e}. Action tracking will be disabled.")
        return None
    return tracker
