"""Tests for similar action search (key-set Jaccard overlap)."""

import json

import pytest

from actiongraph.tracker.similarity import SimilarityEngine, jaccard_similarity, rank_similar


def _seed(graph, parameters, timestamp, action_type="post_creation", mcp_type="Mattermost", **kw):
    return graph.seed_action(
        user_id=kw.pop("user_id", "u1"),
        mcp_id=kw.pop("mcp_id", f"mcp-{mcp_type.lower()}"),
        mcp_type=mcp_type,
        action_type=action_type,
        action_name=kw.pop("action_name", "mattermost_create_post"),
        timestamp=timestamp,
        parameters=json.dumps(parameters),
        **kw,
    )


class TestJaccardSimilarity:
    """Test the overlap score."""

    def test_half_overlap(self):
        assert jaccard_similarity({"channelId"}, {"channelId", "message"}) == 0.5

    def test_disjoint(self):
        assert jaccard_similarity({"a"}, {"b"}) == 0.0

    def test_identical_sets(self):
        """Identical key sets score 1.0 regardless of values."""
        assert jaccard_similarity({"a", "b"}, {"b", "a"}) == 1.0

    def test_both_empty(self):
        assert jaccard_similarity(set(), set()) == 0.0

    def test_range(self):
        for a, b in [({"a"}, {"a", "b", "c"}), ({"a", "b"}, {"b", "c"}), ({"x"}, {"x"})]:
            assert 0.0 <= jaccard_similarity(a, b) <= 1.0


class TestRankSimilar:
    """Test scoring, filtering and ordering of candidates."""

    def _candidate(self, action_id, parameters, timestamp):
        action = {
            "id": action_id,
            "type": "t",
            "name": "n",
            "parameters": json.dumps(parameters),
            "result": "{}",
            "status": "success",
            "timestamp": timestamp,
        }
        return action, {"id": "m1", "type": "Mattermost", "name": "mm"}

    def test_threshold_is_exclusive(self):
        """A score of exactly the threshold is dropped."""
        candidates = [self._candidate("a1", {"a": 1}, "t1")]
        # {"a"} vs {"a", "b", "c"} = 1/3; with threshold 1/3 it is excluded
        assert rank_similar(candidates, {"a": 1, "b": 2, "c": 3}, 5, threshold=1 / 3) == []

    def test_at_or_below_default_threshold_dropped(self):
        candidates = [self._candidate("a1", {"a": 1}, "t1")]
        assert rank_similar(candidates, {"a": 1, "b": 2, "c": 3, "d": 4}, 5) == []

    def test_empty_candidate_parameters_dropped(self):
        candidates = [self._candidate("a1", {}, "t1")]
        assert rank_similar(candidates, {"a": 1}, 5) == []

    def test_empty_input_parameters(self):
        candidates = [self._candidate("a1", {"a": 1}, "t1")]
        assert rank_similar(candidates, {}, 5) == []

    def test_ties_broken_by_recency(self):
        candidates = [
            self._candidate("old", {"a": 1}, "2024-05-01T10:00:00.000Z"),
            self._candidate("new", {"a": 2}, "2024-05-01T11:00:00.000Z"),
            self._candidate("best", {"a": 1, "b": 1}, "2024-04-01T09:00:00.000Z"),
        ]
        ranked = rank_similar(candidates, {"a": 0, "b": 0}, 5)
        assert [r["action"]["id"] for r in ranked] == ["best", "new", "old"]

    def test_limit(self):
        candidates = [self._candidate(f"a{i}", {"a": i}, f"t{i}") for i in range(10)]
        assert len(rank_similar(candidates, {"a": 0}, 3)) == 3


class TestSimilarityEngine:
    """Test the full query through a backend."""

    @pytest.mark.asyncio
    async def test_half_overlap_scenario(self, graph):
        _seed(graph, {"channelId": "c1"}, "2024-05-01T10:00:00.000Z")

        result = await SimilarityEngine(graph).find_similar_actions(
            "Mattermost", "post_creation", {"channelId": "c1", "message": "hi"}
        )

        assert result["success"] is True
        [match] = result["similarActions"]
        assert match["similarity"] == 0.5
        assert match["action"]["parameters"] == {"channelId": "c1"}
        assert match["mcp"]["type"] == "Mattermost"

    @pytest.mark.asyncio
    async def test_values_ignored(self, graph):
        _seed(graph, {"channelId": "other", "message": "bye"}, "2024-05-01T10:00:00.000Z")

        result = await SimilarityEngine(graph).find_similar_actions(
            "Mattermost", "post_creation", {"channelId": "c1", "message": "hi"}
        )

        assert result["similarActions"][0]["similarity"] == 1.0

    @pytest.mark.asyncio
    async def test_restricted_to_mcp_and_action_type(self, graph):
        _seed(graph, {"channelId": "c1"}, "2024-05-01T10:00:00.000Z", mcp_type="Jira")
        _seed(graph, {"channelId": "c1"}, "2024-05-01T10:00:00.000Z", action_type="reaction_add")

        result = await SimilarityEngine(graph).find_similar_actions(
            "Mattermost", "post_creation", {"channelId": "c1"}
        )

        assert result == {"success": True, "similarActions": []}

    @pytest.mark.asyncio
    async def test_custom_threshold(self, graph):
        _seed(graph, {"channelId": "c1"}, "2024-05-01T10:00:00.000Z")

        result = await SimilarityEngine(graph, threshold=0.6).find_similar_actions(
            "Mattermost", "post_creation", {"channelId": "c1", "message": "hi"}
        )

        assert result["similarActions"] == []

    @pytest.mark.asyncio
    async def test_query_failure(self, graph):
        graph.fail_with = RuntimeError("timeout")

        result = await SimilarityEngine(graph).find_similar_actions("Mattermost", "x", {"a": 1})

        assert result == {"success": False, "message": "Failed to find similar actions: timeout"}

    @pytest.mark.asyncio
    async def test_invalid_limit(self, graph):
        result = await SimilarityEngine(graph).find_similar_actions(
            "Mattermost", "x", {"a": 1}, limit=0
        )
        assert result["success"] is False
