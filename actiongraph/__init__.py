"""ActionGraph - action tracking and recommendation over a property graph.

Persists every tool invocation as a graph of Users, Actions and calling
services (MCPs), and answers analytical queries over it:
- Similar action search (parameter key overlap)
- Next-action suggestion (session-window sequences)
- User history and lookup by email
- Context recommendations

Backends: Neo4j (default) or Memgraph via the async neo4j driver.
"""

__version__ = "0.1.0"

from actiongraph.config import Config
from actiongraph.models import Action, ActionStatus, McpService, User
from actiongraph.tracker import (
    ActionTracker,
    Caller,
    ServiceIdentity,
    connect_action_tracker,
    track_call,
)

__all__ = [
    "Action",
    "ActionStatus",
    "ActionTracker",
    "Caller",
    "Config",
    "McpService",
    "ServiceIdentity",
    "User",
    "connect_action_tracker",
    "track_call",
]
