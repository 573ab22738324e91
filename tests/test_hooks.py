"""Tests for the track_call tool handler hook."""

from unittest.mock import AsyncMock

import pytest

from actiongraph.models import ActionStatus
from actiongraph.tracker import Caller, ServiceIdentity, track_call

MATTERMOST = ServiceIdentity(id="mcp-mattermost", type="Mattermost", name="Mattermost")


@pytest.fixture
def mock_tracker():
    tracker = AsyncMock()
    tracker.record_action.return_value = {
        "success": True,
        "actionId": "a1",
        "message": "Action recorded successfully",
    }
    return tracker


class TestTrackCall:
    """Test recording around a wrapped operation."""

    @pytest.mark.asyncio
    async def test_success_recorded(self, mock_tracker):
        async with track_call(
            mock_tracker,
            caller=Caller(id="u1", email="ann@x.com"),
            service=MATTERMOST,
            action_type="post_creation",
            action_name="mattermost_create_post",
            parameters={"channelId": "c1"},
        ) as call:
            call.result = {"postId": "p1"}

        kwargs = mock_tracker.record_action.await_args.kwargs
        assert kwargs["status"] is ActionStatus.SUCCESS
        assert kwargs["result"] == {"postId": "p1"}
        assert kwargs["user_email"] == "ann@x.com"
        assert kwargs["mcp_type"] == "Mattermost"
        assert call.record["actionId"] == "a1"

    @pytest.mark.asyncio
    async def test_failure_recorded_and_reraised(self, mock_tracker):
        with pytest.raises(PermissionError):
            async with track_call(
                mock_tracker,
                caller=Caller(id="u1"),
                service=MATTERMOST,
                action_type="post_creation",
                action_name="mattermost_create_post",
            ):
                raise PermissionError("channel is read-only")

        kwargs = mock_tracker.record_action.await_args.kwargs
        assert kwargs["status"] is ActionStatus.FAILURE
        assert kwargs["result"] == {
            "error": "channel is read-only",
            "errorType": "PermissionError",
        }

    @pytest.mark.asyncio
    async def test_disabled_tracking(self):
        async with track_call(
            None,
            caller=Caller(id="u1"),
            service=MATTERMOST,
            action_type="post_creation",
            action_name="mattermost_create_post",
        ) as call:
            call.result = "ok"

        assert call.status is ActionStatus.SUCCESS
        assert call.record is None

    @pytest.mark.asyncio
    async def test_recording_error_never_raised(self, mock_tracker):
        mock_tracker.record_action.side_effect = RuntimeError("driver exploded")

        async with track_call(
            mock_tracker,
            caller=Caller(id="u1"),
            service=MATTERMOST,
            action_type="post_creation",
            action_name="mattermost_create_post",
        ) as call:
            call.result = "ok"

        assert call.record["success"] is False

    @pytest.mark.asyncio
    async def test_records_into_real_tracker(self, tracker, graph):
        async with track_call(
            tracker,
            caller=Caller(id="u1", name="Ann"),
            service=MATTERMOST,
            action_type="post_creation",
            action_name="mattermost_create_post",
            parameters={"channelId": "c1"},
        ) as call:
            call.result = {"postId": "p1"}

        assert call.record["success"] is True
        assert graph.actions[0]["status"] == "success"
        assert graph.users["u1"]["name"] == "Ann"
