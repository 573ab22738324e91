"""Graph store protocol for ActionGraph.

Defines the async interface every graph backend implements (Neo4j,
Memgraph). The tracker components only talk to this interface, so the
database vendor can change without touching them.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Protocol, runtime_checkable


@dataclass
class QueryResult:
    """Unified query result from any graph backend.

    Attributes:
        result_set: List of result rows (each row is a list of values)
        header: Column names if available
        stats: Query statistics (nodes created, relationships created, etc.)
    """
    result_set: list[list[Any]]
    header: list[str] | None = None
    stats: dict[str, Any] | None = None

    def __iter__(self):
        """Allow iteration over result set."""
        return iter(self.result_set)

    def __len__(self):
        """Return number of result rows."""
        return len(self.result_set)

    def __bool__(self):
        """Check if result has any rows."""
        return len(self.result_set) > 0

    def records(self) -> list[dict[str, Any]]:
        """Rows as dicts keyed by column name.

        Raises:
            ValueError: If the result has rows but no header
        """
        if not self.result_set:
            return []
        if self.header is None:
            raise ValueError("QueryResult has no header; cannot build records")
        return [dict(zip(self.header, row)) for row in self.result_set]


@runtime_checkable
class GraphBackend(Protocol):
    """Protocol for graph store backends.

    Every data operation runs in its own scoped session which is released on
    every exit path; sessions are never shared between operations.
    """

    @property
    def backend_name(self) -> str:
        """Return the backend name (e.g., 'neo4j', 'memgraph')."""
        ...

    async def connect(self) -> None:
        """Open the connection pool, verify reachability, initialize schema.

        Raises the driver error when the endpoint is unreachable or the
        credentials are rejected.
        """
        ...

    async def query(self, cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
        """Execute one Cypher statement in a scoped session.

        Args:
            cypher: Cypher query string
            params: Optional query parameters (use $param syntax)

        Returns:
            QueryResult with result_set, header, and stats
        """
        ...

    def session_scope(self) -> Any:
        """Async context manager yielding a runner bound to one session."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable. Never raises."""
        ...

    async def close(self) -> None:
        """Release the connection pool."""
        ...

    async def init_schema(self) -> dict[str, Any]:
        """Create constraints and indexes. Idempotent."""
        ...


class BaseGraphBackend(ABC):
    """Abstract base class for graph backends with common functionality."""

    # Schema DDL dialect understood by SchemaInitializer
    SCHEMA_DIALECT = "neo4j"

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Connect and initialize schema."""
        pass

    @abstractmethod
    async def query(self, cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
        """Execute a Cypher query."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check backend health."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connection."""
        pass

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[Callable[..., Awaitable[QueryResult]]]:
        """Yield a runner for several statements that belong together.

        Default implementation runs each statement through ``query``;
        driver-backed subclasses share one session across the block.
        """

        async def run(cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
            return await self.query(cypher, params)

        yield run

    async def init_schema(self) -> dict[str, Any]:
        """Initialize schema using this backend's DDL dialect."""
        from actiongraph.db.schema import SchemaInitializer

        return await SchemaInitializer(self, dialect=self.SCHEMA_DIALECT).run()

    def _translate_cypher(self, cypher: str) -> str:
        """Translate Cypher dialect differences if needed.

        Override in subclasses for dialect-specific translations.
        """
        return cypher
