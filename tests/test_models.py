"""Tests for graph node types and timestamps."""

from datetime import datetime, timedelta, timezone

import pytest

from actiongraph.models import (
    Action,
    ActionStatus,
    McpService,
    User,
    parse_timestamp,
    utc_timestamp,
)


class TestTimestamps:
    """Test the stored timestamp format."""

    def test_utc_timestamp_format(self):
        moment = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        assert utc_timestamp(moment) == "2024-05-01T12:30:15.123Z"

    def test_naive_treated_as_utc(self):
        assert utc_timestamp(datetime(2024, 5, 1, 12, 0, 0)) == "2024-05-01T12:00:00.000Z"

    def test_other_timezones_converted(self):
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)
        assert utc_timestamp(moment) == "2024-05-01T12:00:00.000Z"

    def test_string_order_is_chronological(self):
        base = datetime(2024, 5, 1, 9, 59, 59, 999000, tzinfo=timezone.utc)
        earlier = utc_timestamp(base)
        later = utc_timestamp(base + timedelta(milliseconds=1))
        assert earlier < later

    def test_parse_round_trip(self):
        moment = datetime(2024, 5, 1, 12, 30, 15, 123000, tzinfo=timezone.utc)
        assert parse_timestamp(utc_timestamp(moment)) == moment

    def test_now_ends_with_z(self):
        assert utc_timestamp().endswith("Z")


class TestActionStatus:
    """Test the status enum."""

    def test_values(self):
        assert ActionStatus("success") is ActionStatus.SUCCESS
        assert ActionStatus.FAILURE.value == "failure"

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            ActionStatus("pending")


class TestNodeTypes:
    """Test conversion from stored properties to the wire shape."""

    def test_action_decodes_parameters_and_result(self):
        action = Action.from_properties({
            "id": "a1",
            "type": "post_creation",
            "name": "mattermost_create_post",
            "parameters": '{"channelId": "c1"}',
            "result": '{"postId": "p1"}',
            "status": "success",
            "timestamp": "2024-05-01T12:00:00.000Z",
            "mcpType": "Mattermost",
        })
        data = action.to_dict()
        assert data["parameters"] == {"channelId": "c1"}
        assert data["result"] == {"postId": "p1"}
        assert data["mcpType"] == "Mattermost"

    def test_action_without_mcp_type(self):
        action = Action.from_properties({
            "id": "a1",
            "type": "t",
            "name": "n",
            "status": "success",
            "timestamp": "2024-05-01T12:00:00.000Z",
        })
        data = action.to_dict()
        assert "mcpType" not in data
        assert data["parameters"] == {}

    def test_user_to_dict_is_camel_case(self):
        user = User.from_properties({"id": "u1", "email": "a@x.com", "createdAt": "t0"})
        assert user.to_dict() == {
            "id": "u1",
            "name": None,
            "email": "a@x.com",
            "team": None,
            "createdAt": "t0",
        }

    def test_mcp_service(self):
        mcp = McpService.from_properties({"id": "m1", "type": "Jira", "name": "Jira Cloud"})
        assert mcp.to_dict()["type"] == "Jira"
