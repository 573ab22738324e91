"""Action tracking and recommendation over the action graph.

Components (all share one graph backend):
- recorder.py: ActionRecorder - one Action per tool invocation
- similarity.py: SimilarityEngine - key-set Jaccard similarity search
- history.py: HistoryReader - a user's actions, newest first
- sequence.py: SequencePredictor - next-action suggestions
- directory.py: UserDirectory - user lookup by email
- recommendations.py: ActionRecommender - context text search
- hooks.py: track_call - record tool handler operations
- tracker.py: ActionTracker façade and connect_action_tracker
"""

from actiongraph.tracker.hooks import Caller, ServiceIdentity, TrackedCall, track_call
from actiongraph.tracker.similarity import jaccard_similarity
from actiongraph.tracker.tracker import ActionTracker, connect_action_tracker

__all__ = [
    "ActionTracker",
    "Caller",
    "ServiceIdentity",
    "TrackedCall",
    "connect_action_tracker",
    "jaccard_similarity",
    "track_call",
]
