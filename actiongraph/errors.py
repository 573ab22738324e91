"""Exception types for ActionGraph.

Per-operation failures are returned as ``{"success": False, "message": ...}``
payloads and never raised; these exceptions cover the conditions that are
not per-operation: using the tracker while it is disabled or unconnected.
"""


class ActionGraphError(Exception):
    """Base class for ActionGraph errors."""


class TrackerUnavailableError(ActionGraphError):
    """Action tracking is disabled (missing configuration or failed connect)."""

    def __init__(self, detail: str = "Action tracker not available"):
        self.detail = detail
        super().__init__(detail)


class TrackerNotConnectedError(ActionGraphError):
    """A graph operation was attempted before connect() or after close()."""

    def __init__(self, backend: str):
        self.backend = backend
        super().__init__(f"{backend} backend is not connected; call connect() first")
