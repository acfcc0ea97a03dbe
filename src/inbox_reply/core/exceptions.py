"""Exception hierarchy for the reply-prediction pipeline."""

from __future__ import annotations


class InboxReplyError(Exception):
    """Base exception for pipeline errors."""


class FeatureError(InboxReplyError):
    """A feature was used before it was configured."""

    def __init__(self, message: str, feature: str | None = None) -> None:
        """Initialize feature error.

        Args:
            message: Error description.
            feature: Name of the feature that caused the error.
        """
        super().__init__(message)
        self.feature = feature


class ThreadingNotComputedError(InboxReplyError):
    """Conversation reply data was read before ``rebuild()`` ran."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(
            f"Conversation {conversation_id!r} changed since its threading was "
            "last computed; call rebuild() first"
        )
        self.conversation_id = conversation_id


class ContractViolationError(InboxReplyError):
    """A caller broke a precondition of the operation."""
