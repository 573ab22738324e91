"""Graph store access for ActionGraph.

Module Structure:
- graph_protocol.py: Async GraphBackend protocol and QueryResult
- neo4j_backend.py: Neo4j implementation (async Bolt driver)
- memgraph_backend.py: Memgraph implementation (same driver, Memgraph DDL)
- schema.py: Idempotent constraints and indexes
- graph_factory.py: Backend selection from Config

Example:
    from actiongraph.config import Config
    from actiongraph.db import create_graph_backend

    backend = create_graph_backend(Config())
    await backend.connect()
    result = await backend.query("MATCH (u:User) RETURN count(u) AS users")
    await backend.close()
"""

from actiongraph.db.graph_factory import create_graph_backend, get_backend_info
from actiongraph.db.graph_protocol import BaseGraphBackend, GraphBackend, QueryResult
from actiongraph.db.schema import SchemaInitializer

__all__ = [
    "BaseGraphBackend",
    "GraphBackend",
    "QueryResult",
    "SchemaInitializer",
    "create_graph_backend",
    "get_backend_info",
]
