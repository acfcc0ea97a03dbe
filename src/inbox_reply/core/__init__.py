"""Core configuration, types and errors."""

from inbox_reply.core.config import Config
from inbox_reply.core.exceptions import (
    ContractViolationError,
    FeatureError,
    InboxReplyError,
    ThreadingNotComputedError,
)

__all__ = [
    "Config",
    "ContractViolationError",
    "FeatureError",
    "InboxReplyError",
    "ThreadingNotComputedError",
]
