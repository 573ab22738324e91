"""Graph backend factory.

Selects the backend named in the configuration:
- neo4j: Neo4j 5.x (default)
- memgraph: Memgraph via the same Bolt driver

Environment variables for override:
- ACTIONGRAPH_GRAPH_BACKEND: 'neo4j' or 'memgraph'
- NEO4J_URI / NEO4J_USERNAME / NEO4J_PASSWORD: connection settings
- ACTIONGRAPH_NEO4J_DATABASE: database name (Neo4j only)
"""

from typing import Literal

from actiongraph.config import Config
from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger

log = get_logger("db.graph_factory")

# Type alias for backend names
BackendType = Literal["neo4j", "memgraph"]


def create_graph_backend(config: Config, backend: BackendType | None = None) -> GraphBackend:
    """Create an unconnected graph backend from configuration.

    Call ``await backend.connect()`` before use.

    Args:
        config: Configuration with connection settings
        backend: Override for config.graph_backend

    Returns:
        GraphBackend instance (not yet connected)

    Raises:
        ValueError: If connection settings are missing or the backend is unknown
    """
    backend = backend or config.graph_backend
    if not config.tracking_enabled:
        raise ValueError(
            f"Missing graph store configuration: {', '.join(config.missing_connection_settings)}"
        )

    if backend == "neo4j":
        from actiongraph.db.neo4j_backend import Neo4jBackend

        log.info(f"Using Neo4j backend at {config.neo4j_uri}")
        return Neo4jBackend(
            config.neo4j_uri,
            config.neo4j_username,
            config.neo4j_password,
            database=config.neo4j_database,
            connection_timeout=config.connection_timeout,
        )

    if backend == "memgraph":
        from actiongraph.db.memgraph_backend import MemgraphBackend

        log.info(f"Using Memgraph backend at {config.neo4j_uri}")
        return MemgraphBackend(
            config.neo4j_uri,
            config.neo4j_username or "",
            config.neo4j_password or "",
            database=config.neo4j_database,
            connection_timeout=config.connection_timeout,
        )

    raise ValueError(f"Unknown graph backend: {backend}")


def get_backend_info(config: Config) -> dict:
    """Describe the configured backend without connecting.

    Returns:
        Dict with backend name, uri, database and which settings are missing
    """
    return {
        "backend": config.graph_backend,
        "uri": config.neo4j_uri,
        "database": config.neo4j_database,
        "tracking_enabled": config.tracking_enabled,
        "missing": config.missing_connection_settings,
    }
