"""Neo4j backend implementation for ActionGraph.

Wraps the async neo4j Python driver (Bolt protocol). The driver owns one
connection pool per backend instance; every operation borrows a session
with ``async with driver.session()`` so it is returned to the pool on
success, query error, or cancellation alike.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

from neo4j import AsyncGraphDatabase
from neo4j.graph import Node, Path, Relationship

from actiongraph.db.graph_protocol import BaseGraphBackend, QueryResult
from actiongraph.errors import TrackerNotConnectedError
from actiongraph.log_config import get_logger

log = get_logger("db.neo4j")

# Counters copied from the driver's result summary into QueryResult.stats
_STAT_COUNTERS = (
    "nodes_created",
    "nodes_deleted",
    "relationships_created",
    "properties_set",
    "constraints_added",
    "indexes_added",
)


def _to_python(value: Any) -> Any:
    """Convert driver graph types into plain Python values.

    Nodes and relationships become their property dicts; paths become the
    list of their nodes' property dicts. Temporal values become ISO strings.
    """
    if isinstance(value, (Node, Relationship)):
        return {k: _to_python(v) for k, v in value.items()}
    if isinstance(value, Path):
        return [_to_python(node) for node in value.nodes]
    if isinstance(value, list):
        return [_to_python(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_python(v) for k, v in value.items()}
    if hasattr(value, "iso_format"):
        return value.iso_format()
    return value


class Neo4jBackend(BaseGraphBackend):
    """Neo4j graph backend using the async Bolt driver.

    Construction does no I/O; ``connect()`` creates the driver, verifies
    connectivity and initializes the schema. Connection failures propagate.
    """

    SCHEMA_DIALECT = "neo4j"

    def __init__(
        self,
        uri: str,
        username: str,
        password: str,
        database: str | None = None,
        connection_timeout: float = 30.0,
    ):
        """Configure the backend.

        Args:
            uri: Bolt URI (bolt://, neo4j://, neo4j+s:// ...)
            username: Username for basic auth
            password: Password for basic auth
            database: Optional database name (server default when None)
            connection_timeout: Connection timeout in seconds (default: 30.0)
        """
        self.uri = uri
        self.username = username
        self.password = password
        self.database = database
        self.connection_timeout = connection_timeout
        self.schema_summary: dict[str, Any] | None = None
        self._driver = None

    @property
    def backend_name(self) -> str:
        return "neo4j"

    @property
    def is_connected(self) -> bool:
        return self._driver is not None

    def _create_driver(self):
        return AsyncGraphDatabase.driver(
            self.uri,
            auth=(self.username, self.password),
            connection_timeout=self.connection_timeout,
        )

    async def connect(self) -> None:
        """Open the connection pool, verify reachability, initialize schema.

        Raises:
            neo4j.exceptions.ServiceUnavailable: Endpoint unreachable
            neo4j.exceptions.AuthError: Credentials rejected
        """
        if self._driver is not None:
            log.debug(f"{self.backend_name} already connected: {self.uri}")
            return

        log.info(f"Connecting to {self.backend_name} at {self.uri}")
        driver = self._create_driver()
        try:
            await driver.verify_connectivity()
        except Exception as e:
            log.error(f"Failed to connect to {self.backend_name} at {self.uri}: {e}")
            await driver.close()
            raise

        self._driver = driver
        log.info(f"{self.backend_name} connected: {self.uri}")

        try:
            self.schema_summary = await self.init_schema()
        except Exception:
            await self.close()
            raise

    def _session(self):
        if self._driver is None:
            raise TrackerNotConnectedError(self.backend_name)
        if self.database:
            return self._driver.session(database=self.database)
        return self._driver.session()

    @staticmethod
    async def _run(session, cypher: str, params: dict[str, Any] | None) -> QueryResult:
        result = await session.run(cypher, params or {})
        header = list(await result.keys())
        records = [record async for record in result]
        summary = await result.consume()

        result_set = [[_to_python(v) for v in record.values()] for record in records]

        stats: dict[str, Any] = {"backend": "neo4j"}
        counters = getattr(summary, "counters", None)
        if counters is not None:
            for name in _STAT_COUNTERS:
                stats[name] = getattr(counters, name, 0)

        return QueryResult(result_set=result_set, header=header or None, stats=stats)

    async def query(self, cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
        """Execute one Cypher statement in its own session.

        Args:
            cypher: Cypher query string
            params: Optional query parameters

        Returns:
            QueryResult with result_set, header, and stats
        """
        cypher = self._translate_cypher(cypher)
        log.trace(f"{self.backend_name} query: {cypher.strip()[:100]}...")

        try:
            async with self._session() as session:
                return await self._run(session, cypher, params)
        except Exception as e:
            log.error(f"{self.backend_name} query failed: {e}")
            log.debug(f"Query was: {cypher}")
            raise

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[Callable[..., Awaitable[QueryResult]]]:
        """Yield a runner whose statements share one session."""
        async with self._session() as session:

            async def run(cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
                return await self._run(session, self._translate_cypher(cypher), params)

            yield run

    async def health_check(self) -> bool:
        """Check if the store answers a trivial query.

        Returns:
            True if connection is operational
        """
        if self._driver is None:
            return False
        try:
            async with self._session() as session:
                result = await session.run("RETURN 1")
                await result.consume()
            return True
        except Exception as e:
            log.warning(f"{self.backend_name} health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the driver and its connection pool."""
        if self._driver is None:
            return
        log.info(f"Closing {self.backend_name} connection")
        driver, self._driver = self._driver, None
        await driver.close()
