"""Tracking hook for tool handlers.

Tool handlers wrap each domain operation in ``track_call`` so it is
recorded after it completes, successfully or not:

    async with track_call(
        tracker,
        caller=Caller(id=user_id, email=email),
        service=MATTERMOST,
        action_type="post_creation",
        action_name="mattermost_create_post",
        parameters={"channelId": channel_id, "message": message},
    ) as call:
        call.result = await client.create_post(channel_id, message)

Exceptions raised by the operation propagate unchanged. Recording problems
are logged and never raised.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from actiongraph.log_config import get_logger
from actiongraph.models import ActionStatus

log = get_logger("tracker.hooks")


@dataclass(frozen=True)
class Caller:
    """User on whose behalf a tool runs."""

    id: str
    name: str | None = None
    email: str | None = None
    team: str | None = None


@dataclass(frozen=True)
class ServiceIdentity:
    """The calling service (MCP) whose invocations are tracked."""

    id: str
    type: str
    name: str


@dataclass
class TrackedCall:
    """Mutable handle the wrapped operation reports its result on."""

    action_type: str
    action_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    status: ActionStatus | None = None
    record: dict[str, Any] | None = None


def _error_payload(exc: BaseException) -> dict[str, Any]:
    return {"error": str(exc), "errorType": type(exc).__name__}


@asynccontextmanager
async def track_call(
    tracker,
    *,
    caller: Caller,
    service: ServiceIdentity,
    action_type: str,
    action_name: str,
    parameters: dict[str, Any] | None = None,
) -> AsyncIterator[TrackedCall]:
    """Record the wrapped operation as one Action.

    Args:
        tracker: Connected ActionTracker, or None to disable recording
        caller: User performing the operation
        service: Calling service identity
        action_type: Coarse action category
        action_name: Specific operation name
        parameters: Operation inputs

    Yields:
        TrackedCall whose ``result`` the operation sets
    """
    call = TrackedCall(action_type, action_name, dict(parameters or {}))
    try:
        yield call
    except Exception as exc:
        call.status = ActionStatus.FAILURE
        call.result = _error_payload(exc)
        await _record(tracker, caller, service, call)
        raise
    else:
        call.status = ActionStatus.SUCCESS
        await _record(tracker, caller, service, call)


async def _record(tracker, caller: Caller, service: ServiceIdentity, call: TrackedCall) -> None:
    if tracker is None:
        return
    try:
        call.record = await tracker.record_action(
            user_id=caller.id,
            user_name=caller.name,
            user_email=caller.email,
            user_team=caller.team,
            mcp_id=service.id,
            mcp_type=service.type,
            mcp_name=service.name,
            action_type=call.action_type,
            action_name=call.action_name,
            parameters=call.parameters,
            result=call.result,
            status=call.status,
        )
    except Exception as e:
        log.error(f"Tracking {call.action_name} raised unexpectedly: {e}")
        call.record = {"success": False, "message": f"Failed to record action: {e}"}
        return

    if not call.record.get("success"):
        log.warning(f"Action {call.action_name} not recorded: {call.record.get('message')}")
