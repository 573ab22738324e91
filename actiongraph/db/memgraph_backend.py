"""Memgraph backend implementation for ActionGraph.

Memgraph speaks the Bolt protocol and is compatible with the neo4j Python
driver, so this backend reuses Neo4jBackend and only changes what differs:

- Schema syntax: CREATE INDEX ON :Label(prop) and
  CREATE CONSTRAINT ON (n:Label) ASSERT n.prop IS UNIQUE
- No Cypher full-text index (skipped at schema time)
- No named databases; the database setting is ignored
- Authentication is optional
"""

from actiongraph.db.neo4j_backend import Neo4jBackend
from actiongraph.log_config import get_logger

log = get_logger("db.memgraph")


class MemgraphBackend(Neo4jBackend):
    """Memgraph-based graph backend using the Bolt protocol."""

    SCHEMA_DIALECT = "memgraph"

    def __init__(
        self,
        uri: str,
        username: str = "",
        password: str = "",
        database: str | None = None,
        connection_timeout: float = 30.0,
    ):
        if database:
            log.warning(f"Memgraph has no named databases; ignoring database '{database}'")
        super().__init__(
            uri,
            username,
            password,
            database=None,
            connection_timeout=connection_timeout,
        )

    @property
    def backend_name(self) -> str:
        return "memgraph"

    def _create_driver(self):
        from neo4j import AsyncGraphDatabase

        log.debug(f"Memgraph auth={'yes' if self.password else 'no'}")
        if self.username or self.password:
            return AsyncGraphDatabase.driver(
                self.uri,
                auth=(self.username, self.password),
                connection_timeout=self.connection_timeout,
            )
        return AsyncGraphDatabase.driver(
            self.uri,
            connection_timeout=self.connection_timeout,
        )
