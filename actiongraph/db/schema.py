"""Idempotent schema initialization for the action graph.

Runs once right after a backend connects:
- uniqueness constraints on User.id, Action.id, MCP.id
- property indexes on User.email, User.team, Action.type, Action.name,
  Action.timestamp, Action.mcpType
- full-text index over Action.name / Action.type (context search)

Re-running against an initialized store is a no-op. A failing full-text
index is logged and skipped; it never aborts startup.
"""

from typing import Any

from actiongraph.log_config import get_logger

log = get_logger("db.schema")

FULLTEXT_INDEX_NAME = "actionContext"

# (label, property) pairs
UNIQUE_KEYS = [
    ("User", "id"),
    ("Action", "id"),
    ("MCP", "id"),
]

INDEXED_PROPERTIES = [
    ("User", "email"),
    ("User", "team"),
    ("Action", "type"),
    ("Action", "name"),
    ("Action", "timestamp"),
    ("Action", "mcpType"),
]

FULLTEXT_PROPERTIES = ("Action", ["name", "type"])

_VARIABLES = {"User": "user", "Action": "action", "MCP": "mcp"}


def neo4j_statements() -> tuple[list[str], str]:
    """Neo4j 5 DDL: (constraint + index statements, full-text statement)."""
    statements = []
    for label, prop in UNIQUE_KEYS:
        var = _VARIABLES[label]
        statements.append(
            f"CREATE CONSTRAINT IF NOT EXISTS FOR ({var}:{label}) REQUIRE {var}.{prop} IS UNIQUE"
        )
    for label, prop in INDEXED_PROPERTIES:
        var = _VARIABLES[label]
        statements.append(f"CREATE INDEX IF NOT EXISTS FOR ({var}:{label}) ON ({var}.{prop})")

    label, props = FULLTEXT_PROPERTIES
    var = label[0].lower()
    fields = ", ".join(f"{var}.{p}" for p in props)
    fulltext = (
        f"CREATE FULLTEXT INDEX {FULLTEXT_INDEX_NAME} IF NOT EXISTS "
        f"FOR ({var}:{label}) ON EACH [{fields}]"
    )
    return statements, fulltext


def memgraph_statements() -> tuple[list[str], None]:
    """Memgraph DDL. Memgraph has no Cypher full-text index statement."""
    statements = []
    for label, prop in UNIQUE_KEYS:
        var = _VARIABLES[label]
        statements.append(f"CREATE CONSTRAINT ON ({var}:{label}) ASSERT {var}.{prop} IS UNIQUE")
    for label, prop in INDEXED_PROPERTIES:
        statements.append(f"CREATE INDEX ON :{label}({prop})")
    return statements, None


_DIALECTS = {
    "neo4j": neo4j_statements,
    "memgraph": memgraph_statements,
}


def _is_already_exists(error: Exception) -> bool:
    error_msg = str(error).lower()
    return "already exists" in error_msg or "equivalent" in error_msg


class SchemaInitializer:
    """Applies the action-graph schema through a backend's scoped session.

    All statements run in one scoped session obtained from
    ``backend.session_scope()``.
    """

    def __init__(self, backend: Any, dialect: str = "neo4j"):
        if dialect not in _DIALECTS:
            raise ValueError(f"Unknown schema dialect: {dialect}")
        self.backend = backend
        self.dialect = dialect

    async def run(self) -> dict[str, Any]:
        """Apply all schema statements.

        Returns:
            Summary dict: applied statements, skipped statements, fulltext state

        Raises:
            Exception: Driver errors on constraint/index statements other than
                "already exists" (these abort startup)
        """
        statements, fulltext = _DIALECTS[self.dialect]()
        summary: dict[str, Any] = {
            "dialect": self.dialect,
            "applied": [],
            "skipped": [],
            "fulltext": "unsupported",
        }

        log.info(f"Initializing action graph schema ({self.dialect})")
        async with self.backend.session_scope() as run:
            for statement in statements:
                try:
                    await run(statement)
                    summary["applied"].append(statement)
                except Exception as e:
                    if not _is_already_exists(e):
                        log.error(f"Schema statement failed: {statement}: {e}")
                        raise
                    log.trace(f"Schema element already exists: {statement}")
                    summary["skipped"].append(statement)

            if fulltext is None:
                log.debug(f"Full-text index not supported by {self.dialect}, skipping")
            else:
                try:
                    await run(fulltext)
                    summary["fulltext"] = "created"
                except Exception as e:
                    log.warning(f"Full-text index {FULLTEXT_INDEX_NAME} not created: {e}")
                    summary["fulltext"] = "failed"

        log.debug(
            f"Schema initialized: {len(summary['applied'])} applied, "
            f"{len(summary['skipped'])} skipped, fulltext={summary['fulltext']}"
        )
        return summary
