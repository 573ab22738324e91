"""Shared pytest fixtures for ActionGraph tests."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest

from actiongraph.config import Config
from actiongraph.db.graph_protocol import BaseGraphBackend, QueryResult
from actiongraph.models import parse_timestamp
from actiongraph.tracker import ActionTracker
from actiongraph.tracker.directory import FIND_USER_BY_EMAIL_QUERY
from actiongraph.tracker.history import USER_HISTORY_QUERY
from actiongraph.tracker.recommendations import RECOMMENDATIONS_QUERY
from actiongraph.tracker.recorder import RECORD_ACTION_QUERY
from actiongraph.tracker.sequence import MEMGRAPH_TRANSITIONS_QUERY, TRANSITIONS_QUERY
from actiongraph.tracker.similarity import CANDIDATE_ACTIONS_QUERY


class InMemoryGraphBackend(BaseGraphBackend):
    """Graph backend answering the tracker's queries from Python dicts.

    Each tracker query constant is dispatched to a small Python
    re-implementation of its Cypher, so the components can be exercised
    end to end without a database. Schema DDL is accepted and recorded.
    """

    def __init__(self):
        self.users: dict[str, dict[str, Any]] = {}
        self.mcps: dict[str, dict[str, Any]] = {}
        self.actions: list[dict[str, Any]] = []
        self.performed: dict[str, str] = {}  # action id -> user id
        self.used: dict[str, str] = {}  # action id -> mcp id
        self.schema_statements: list[str] = []
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self.connected = False
        self.closed = False
        self.schema_summary: dict[str, Any] | None = None

    @property
    def backend_name(self) -> str:
        return "memory"

    async def connect(self) -> None:
        self.connected = True
        self.schema_summary = await self.init_schema()

    async def health_check(self) -> bool:
        return self.connected

    async def close(self) -> None:
        self.connected = False
        self.closed = True

    async def query(self, cypher: str, params: dict[str, Any] | None = None) -> QueryResult:
        params = params or {}
        if cypher.lstrip().startswith("CREATE") and ("INDEX" in cypher or "CONSTRAINT" in cypher):
            self.schema_statements.append(cypher)
            return QueryResult(result_set=[], header=[])

        self.queries.append((cypher, params))
        if self.fail_with is not None:
            raise self.fail_with

        handlers = {
            RECORD_ACTION_QUERY: self._record_action,
            CANDIDATE_ACTIONS_QUERY: self._candidate_actions,
            USER_HISTORY_QUERY: self._user_history,
            TRANSITIONS_QUERY: self._transitions,
            MEMGRAPH_TRANSITIONS_QUERY: self._transitions,
            FIND_USER_BY_EMAIL_QUERY: self._find_user,
            RECOMMENDATIONS_QUERY: self._recommendations,
        }
        handler = handlers.get(cypher)
        if handler is None:
            raise ValueError(f"Unsupported query: {cypher.strip()[:60]}")
        return handler(params)

    # ─────────────────────────────────────────────────────────────────────
    # Seeding helpers
    # ─────────────────────────────────────────────────────────────────────

    def seed_action(
        self,
        *,
        user_id: str,
        mcp_id: str,
        mcp_type: str,
        action_type: str,
        action_name: str,
        timestamp: str,
        parameters: str = "{}",
        result: str = "{}",
        status: str = "success",
        action_id: str | None = None,
        user_email: str | None = None,
    ) -> dict[str, Any]:
        """Insert an Action (and its User/MCP) with an explicit timestamp."""
        self.users.setdefault(
            user_id,
            {"id": user_id, "name": None, "email": user_email, "team": None, "createdAt": timestamp},
        )
        self.mcps.setdefault(
            mcp_id, {"id": mcp_id, "type": mcp_type, "name": mcp_id, "createdAt": timestamp}
        )
        action = {
            "id": action_id or f"a{len(self.actions) + 1}",
            "type": action_type,
            "name": action_name,
            "parameters": parameters,
            "result": result,
            "status": status,
            "timestamp": timestamp,
            "mcpType": mcp_type,
        }
        self.actions.append(action)
        self.performed[action["id"]] = user_id
        self.used[action["id"]] = mcp_id
        return action

    # ─────────────────────────────────────────────────────────────────────
    # Query emulation
    # ─────────────────────────────────────────────────────────────────────

    def _mcp_of(self, action: dict[str, Any]) -> dict[str, Any]:
        return self.mcps[self.used[action["id"]]]

    def _record_action(self, p: dict[str, Any]) -> QueryResult:
        user = self.users.get(p["userId"])
        if user is None:
            self.users[p["userId"]] = {
                "id": p["userId"],
                "name": p["userName"],
                "email": p["userEmail"],
                "team": p["userTeam"],
                "createdAt": p["timestamp"],
            }
        else:
            for field, key in (("name", "userName"), ("email", "userEmail"), ("team", "userTeam")):
                if p[key] is not None:
                    user[field] = p[key]

        self.mcps.setdefault(
            p["mcpId"],
            {"id": p["mcpId"], "type": p["mcpType"], "name": p["mcpName"], "createdAt": p["timestamp"]},
        )

        action = {
            "id": p["actionId"],
            "type": p["actionType"],
            "name": p["actionName"],
            "parameters": p["parametersJson"],
            "result": p["resultJson"],
            "status": p["status"],
            "timestamp": p["timestamp"],
            "mcpType": p["mcpType"],
        }
        self.actions.append(action)
        self.performed[action["id"]] = p["userId"]
        self.used[action["id"]] = p["mcpId"]
        return QueryResult(result_set=[[action["id"]]], header=["actionId"])

    def _candidate_actions(self, p: dict[str, Any]) -> QueryResult:
        rows = [
            [dict(action), dict(self._mcp_of(action))]
            for action in self.actions
            if action["type"] == p["actionType"] and self._mcp_of(action)["type"] == p["mcpType"]
        ]
        return QueryResult(result_set=rows, header=["action", "mcp"])

    def _user_history(self, p: dict[str, Any]) -> QueryResult:
        mine = [a for a in self.actions if self.performed[a["id"]] == p["userId"]]
        mine.sort(key=lambda a: a["timestamp"], reverse=True)
        rows = [[dict(a), dict(self._mcp_of(a))] for a in mine[: p["limit"]]]
        return QueryResult(result_set=rows, header=["action", "mcp"])

    def _transitions(self, p: dict[str, Any]) -> QueryResult:
        mine = [a for a in self.actions if self.performed[a["id"]] == p["userId"]]
        rows = []
        for current in mine:
            mcp_id = self.used[current["id"]]
            if current["type"] != p["currentActionType"] or self.mcps[mcp_id]["type"] != p["mcpType"]:
                continue
            for following in mine:
                if self.used[following["id"]] != mcp_id:
                    continue
                if following["timestamp"] <= current["timestamp"]:
                    continue
                gap = parse_timestamp(following["timestamp"]) - parse_timestamp(current["timestamp"])
                if gap >= timedelta(milliseconds=p["windowMillis"]):
                    continue
                rows.append([
                    current["timestamp"],
                    following["type"],
                    following["name"],
                    following["parameters"],
                    following["timestamp"],
                ])
        return QueryResult(
            result_set=rows,
            header=["currentTimestamp", "nextType", "nextName", "nextParameters", "nextTimestamp"],
        )

    def _find_user(self, p: dict[str, Any]) -> QueryResult:
        for user in self.users.values():
            if user.get("email") == p["email"]:
                return QueryResult(result_set=[[dict(user)]], header=["user"])
        return QueryResult(result_set=[], header=["user"])

    def _recommendations(self, p: dict[str, Any]) -> QueryResult:
        context = p["context"]
        groups: dict[tuple, dict[str, Any]] = {}
        for action in self.actions:
            if p["userId"] is not None and self.performed[action["id"]] != p["userId"]:
                continue
            if context not in action["name"].lower() and context not in action["type"].lower():
                continue
            mcp = self._mcp_of(action)
            key = (mcp["type"], mcp["name"], action["type"], action["name"])
            group = groups.setdefault(key, {"samples": [], "frequency": 0})
            group["frequency"] += 1
            if action["parameters"] not in group["samples"]:
                group["samples"].append(action["parameters"])

        ranked = sorted(groups.items(), key=lambda item: item[0][3])
        ranked.sort(key=lambda item: item[1]["frequency"], reverse=True)
        rows = [
            [mcp_type, mcp_name, action_type, action_name, g["samples"], g["frequency"]]
            for (mcp_type, mcp_name, action_type, action_name), g in ranked[: p["limit"]]
        ]
        return QueryResult(
            result_set=rows,
            header=[
                "mcpType",
                "mcpName",
                "actionType",
                "actionName",
                "parameterSamples",
                "frequency",
            ],
        )


@pytest.fixture
def graph():
    """Empty in-memory graph backend."""
    return InMemoryGraphBackend()


@pytest.fixture
def tracking_config():
    """Config with complete connection settings (nothing connects)."""
    return Config(
        neo4j_uri="bolt://localhost:7687",
        neo4j_username="neo4j",
        neo4j_password="secret",
        graph_backend="neo4j",
        api_key=None,
    )


@pytest.fixture
def disabled_config():
    """Config without connection settings."""
    return Config(neo4j_uri=None, neo4j_username=None, neo4j_password=None, api_key=None)


@pytest.fixture
def tracker(graph, tracking_config):
    """ActionTracker wired to the in-memory backend."""
    return ActionTracker(graph, tracking_config)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every ActionGraph-related environment variable."""
    for key in ("NEO4J_URI", "NEO4J_USERNAME", "NEO4J_PASSWORD"):
        monkeypatch.delenv(key, raising=False)
        monkeypatch.delenv(f"ACTIONGRAPH_{key}", raising=False)
    for key in (
        "GRAPH_BACKEND",
        "NEO4J_DATABASE",
        "CONNECTION_TIMEOUT",
        "SIMILARITY_THRESHOLD",
        "SESSION_WINDOW_MINUTES",
        "MAX_SUGGESTIONS",
        "API_KEY",
        "HOST",
        "PORT",
    ):
        monkeypatch.delenv(f"ACTIONGRAPH_{key}", raising=False)
    return monkeypatch
