"""User lookup by email."""

from typing import Any, Literal

from actiongraph.db.graph_protocol import GraphBackend
from actiongraph.log_config import get_logger
from actiongraph.models import User

log = get_logger("tracker.directory")

Environment = Literal["uat", "prod"]
ENVIRONMENTS = ("uat", "prod")

FIND_USER_BY_EMAIL_QUERY = """
    MATCH (user:User {email: $email})
    RETURN user
    LIMIT 1
"""


class UserDirectory:
    """Point lookup of tracked users."""

    def __init__(self, graph: GraphBackend):
        self.graph = graph

    async def find_user_by_email(self, email: str, env: Environment) -> dict[str, Any]:
        """Find a user by exact email.

        ``env`` names the environment the caller works in. It is validated
        and echoed back; all environments share one store.

        Returns:
            {"success": True, "user", "env"}, or
            {"success": False, "message": "User not found"} when nothing matches,
            or {"success": False, "message"} on failure
        """
        try:
            if env not in ENVIRONMENTS:
                raise ValueError(f"env must be one of {', '.join(ENVIRONMENTS)}, got {env!r}")

            result = await self.graph.query(FIND_USER_BY_EMAIL_QUERY, {"email": email})
            rows = result.records()
            if not rows:
                log.debug(f"No user with email {email} ({env})")
                return {"success": False, "message": "User not found"}

            user = User.from_properties(rows[0]["user"])
            return {"success": True, "user": user.to_dict(), "env": env}

        except Exception as e:
            log.error(f"Error finding user by email: {e}")
            return {
                "success": False,
                "message": f"Failed to find user: {e}",
            }
