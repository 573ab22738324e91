"""Configuration for ActionGraph.

Simple dataclass-based configuration with sensible defaults.
Connection settings use the conventional NEO4J_* variables (an
ACTIONGRAPH_-prefixed variant wins when both are set); everything else is
overridden via environment variables with the ACTIONGRAPH_ prefix.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from actiongraph.log_config import get_logger

log = get_logger("config")

# Load .env file if present
try:
    from dotenv import load_dotenv

    _pkg_dir = Path(__file__).parent.parent
    _env_loaded = load_dotenv(_pkg_dir / ".env") or load_dotenv(Path.cwd() / ".env")
    log.debug(f"Loaded .env file: {_env_loaded}")
except ImportError:
    log.debug("python-dotenv not installed, using environment variables directly")


GRAPH_BACKENDS = ("neo4j", "memgraph")


def _get_env(key: str, default: str) -> str:
    """Get environment variable with ACTIONGRAPH_ prefix."""
    return os.getenv(f"ACTIONGRAPH_{key}", default)


def _get_connection_env(key: str) -> str | None:
    """Get a connection setting, preferring ACTIONGRAPH_ over the bare name.

    Empty values count as unset.
    """
    return os.getenv(f"ACTIONGRAPH_{key}") or os.getenv(key) or None


@dataclass
class Config:
    """ActionGraph configuration.

    Attributes:
        neo4j_uri: Bolt endpoint of the graph store (e.g. bolt://localhost:7687)
        neo4j_username: Graph store username
        neo4j_password: Graph store password
        graph_backend: "neo4j" (default) or "memgraph"
        neo4j_database: Optional database name (Neo4j multi-database setups)
        connection_timeout: Driver connection timeout in seconds
        similarity_threshold: Minimum key overlap a similar action must exceed
        session_window_minutes: Max gap between two actions of one sequence
        max_suggestions: Number of next-action suggestions returned
        api_key: API key required by the HTTP API when set
        host: HTTP API bind address
        port: HTTP API port
    """

    neo4j_uri: str | None = field(default_factory=lambda: _get_connection_env("NEO4J_URI"))
    neo4j_username: str | None = field(
        default_factory=lambda: _get_connection_env("NEO4J_USERNAME")
    )
    neo4j_password: str | None = field(
        default_factory=lambda: _get_connection_env("NEO4J_PASSWORD")
    )
    graph_backend: str = field(
        default_factory=lambda: _get_env("GRAPH_BACKEND", "neo4j").lower()
    )
    neo4j_database: str | None = field(
        default_factory=lambda: _get_env("NEO4J_DATABASE", "") or None
    )
    connection_timeout: float = field(
        default_factory=lambda: float(_get_env("CONNECTION_TIMEOUT", "30"))
    )

    # Analytics tuning
    similarity_threshold: float = field(
        default_factory=lambda: float(_get_env("SIMILARITY_THRESHOLD", "0.3"))
    )
    session_window_minutes: int = field(
        default_factory=lambda: int(_get_env("SESSION_WINDOW_MINUTES", "30"))
    )
    max_suggestions: int = field(
        default_factory=lambda: int(_get_env("MAX_SUGGESTIONS", "3"))
    )

    # HTTP API
    api_key: str | None = field(default_factory=lambda: _get_env("API_KEY", "") or None)
    host: str = field(default_factory=lambda: _get_env("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(_get_env("PORT", "8430")))

    def __post_init__(self):
        """Validate values and log the effective configuration."""
        log.trace("Initializing Config")

        if self.graph_backend not in GRAPH_BACKENDS:
            log.warning(
                f"Unknown graph backend '{self.graph_backend}', falling back to neo4j "
                f"(expected one of {', '.join(GRAPH_BACKENDS)})"
            )
            self.graph_backend = "neo4j"

        if not 0.0 <= self.similarity_threshold < 1.0:
            raise ValueError(
                f"similarity_threshold must be in [0, 1), got {self.similarity_threshold}"
            )
        if self.session_window_minutes <= 0:
            raise ValueError(
                f"session_window_minutes must be positive, got {self.session_window_minutes}"
            )
        if self.max_suggestions <= 0:
            raise ValueError(f"max_suggestions must be positive, got {self.max_suggestions}")

        log.debug(f"neo4j_uri={self.neo4j_uri}")
        log.debug(f"neo4j_username={'set' if self.neo4j_username else 'missing'}")
        log.debug(f"neo4j_password={'set' if self.neo4j_password else 'missing'}")
        log.debug(f"graph_backend={self.graph_backend}, database={self.neo4j_database}")
        log.debug(
            f"similarity_threshold={self.similarity_threshold}, "
            f"session_window_minutes={self.session_window_minutes}, "
            f"max_suggestions={self.max_suggestions}"
        )
        log.info(
            f"Config initialized: backend={self.graph_backend}, "
            f"tracking={'enabled' if self.tracking_enabled else 'disabled'}"
        )

    @property
    def tracking_enabled(self) -> bool:
        """Tracking needs all three connection parameters."""
        return bool(self.neo4j_uri and self.neo4j_username and self.neo4j_password)

    @property
    def missing_connection_settings(self) -> list[str]:
        """Names of the connection settings that are not set."""
        missing = []
        if not self.neo4j_uri:
            missing.append("NEO4J_URI")
        if not self.neo4j_username:
            missing.append("NEO4J_USERNAME")
        if not self.neo4j_password:
            missing.append("NEO4J_PASSWORD")
        return missing
