"""State management errors."""


class StateError(Exception):
    """Base exception for favorites store operations."""


class MissingStateError(StateError):
    """Raised when no favorites store exists on disk."""
