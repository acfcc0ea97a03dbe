"""Tests for inbox_reply.core.exceptions."""

from __future__ import annotations

from inbox_reply.core.exceptions import (
    ContractViolationError,
    FeatureError,
    InboxReplyError,
    ThreadingNotComputedError,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self) -> None:
        for error in (FeatureError, ThreadingNotComputedError, ContractViolationError):
            assert issubclass(error, InboxReplyError)

    def test_feature_error_carries_feature(self) -> None:
        error = FeatureError("not configured", feature="Sender")

        assert str(error) == "not configured"
        assert error.feature == "Sender"

    def test_threading_error_names_conversation(self) -> None:
        error = ThreadingNotComputedError("conv-1")

        assert error.conversation_id == "conv-1"
        assert "conv-1" in str(error)
        assert "rebuild()" in str(error)
