"""Domain types for the action graph.

Node dataclasses mirror the persisted graph schema:

    (:User {id, name, email, team, createdAt})
        -[:PERFORMED]->
    (:Action {id, type, name, parameters, result, status, timestamp, mcpType})
        -[:USED]->
    (:MCP {id, type, name, createdAt})

``to_dict()`` returns the camelCase shape used on the wire, with
``parameters``/``result`` decoded back into structured values.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from actiongraph.codec import StructuredValue, decode_structured

# Node labels
LABEL_USER = "User"
LABEL_ACTION = "Action"
LABEL_MCP = "MCP"

# Relationship types
REL_PERFORMED = "PERFORMED"
REL_USED = "USED"


class ActionStatus(str, Enum):
    """Outcome of a recorded tool invocation."""

    SUCCESS = "success"
    FAILURE = "failure"


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix.

    Fixed width, so string order equals chronological order.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a stored timestamp into an aware datetime (naive values are UTC)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class User:
    """A user whose tool invocations are tracked.

    Attributes:
        id: Unique user identifier (chat-platform user id)
        name: Display name, if known
        email: Email address, if known
        team: Team name, if known
        created_at: ISO timestamp of the first recorded action
    """

    id: str
    name: str | None = None
    email: str | None = None
    team: str | None = None
    created_at: str | None = None

    @classmethod
    def from_properties(cls, props: dict[str, Any]) -> "User":
        return cls(
            id=props["id"],
            name=props.get("name"),
            email=props.get("email"),
            team=props.get("team"),
            created_at=props.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "team": self.team,
            "createdAt": self.created_at,
        }


@dataclass
class McpService:
    """A calling service (MCP) whose invocations are tracked.

    Attributes:
        id: Unique service instance id (e.g. "mcp-mattermost")
        type: Service category (e.g. "Mattermost", "Jira")
        name: Human readable name
        created_at: ISO timestamp of first use
    """

    id: str
    type: str | None = None
    name: str | None = None
    created_at: str | None = None

    @classmethod
    def from_properties(cls, props: dict[str, Any]) -> "McpService":
        return cls(
            id=props["id"],
            type=props.get("type"),
            name=props.get("name"),
            created_at=props.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "createdAt": self.created_at,
        }


@dataclass
class Action:
    """One recorded tool invocation. Immutable once stored.

    Attributes:
        id: Generated UUID
        type: Coarse category (e.g. "post_creation")
        name: Specific operation (e.g. "mattermost_create_post")
        parameters: Decoded call inputs
        result: Decoded outcome or error payload
        status: "success" or "failure"
        timestamp: ISO creation time
        mcp_type: Type of the service the action was performed against
    """

    id: str
    type: str
    name: str
    timestamp: str
    status: str
    parameters: StructuredValue = field(default_factory=dict)
    result: StructuredValue = field(default_factory=dict)
    mcp_type: str | None = None

    @classmethod
    def from_properties(cls, props: dict[str, Any]) -> "Action":
        return cls(
            id=props["id"],
            type=props.get("type", ""),
            name=props.get("name", ""),
            timestamp=props.get("timestamp", ""),
            status=props.get("status", ""),
            parameters=decode_structured(props.get("parameters")),
            result=decode_structured(props.get("result")),
            mcp_type=props.get("mcpType"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "parameters": self.parameters,
            "result": self.result,
            "status": self.status,
            "timestamp": self.timestamp,
        }
        if self.mcp_type is not None:
            data["mcpType"] = self.mcp_type
        return data
