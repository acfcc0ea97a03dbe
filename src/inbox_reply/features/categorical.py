"""One-of-N features over fixed bucket lists."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any

from inbox_reply.features.base import FeatureBucket, FeatureType, OneOfNFeature

if TYPE_CHECKING:
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User

SUBJECT_PREFIXES = [["no prefix"], ["re"], ["fw", "fwd"]]

POSITIONS_SHORT = [
    "NotOnToOrCcLine",
    "FirstOnToLine",
    "SecondOnToLine",
    "ThirdOrLaterOnToLine",
    "FirstOnCcLine",
    "SecondOrLaterOnCcLine",
]

PREVIOUS_UNREAD_STRINGS = ["NoPrevious", "NoUnread", "OneUnread", "TwoUnread", "ThreeOrMoreUnread"]

TO_CC_NEITHER = ["Neither", "To", "Cc"]


class Position(IntEnum):
    """Where the owner appears on a message's address lines."""

    PART_OF_LIST = 0
    FIRST_IN_TO_LINE = 1
    SECOND_IN_TO_LINE = 2
    THIRD_OR_MORE_IN_TO_LINE = 3
    FIRST_IN_CC_LINE = 4
    NOT_FIRST_IN_CC_LINE = 5


def get_position(message: Message) -> Position:
    """The owner's position; a Cc-line match overrides a To-line match."""
    position = Position.PART_OF_LIST
    for i, cd in enumerate(message.sent_to or []):
        if cd.is_me:
            position = (
                Position.FIRST_IN_TO_LINE
                if i == 0
                else Position.SECOND_IN_TO_LINE
                if i == 1
                else Position.THIRD_OR_MORE_IN_TO_LINE
            )
            break
    cc = message.cc_position
    if cc != -1:
        position = Position.FIRST_IN_CC_LINE if cc == 0 else Position.NOT_FIRST_IN_CC_LINE
    return position


class _NamedBuckets(OneOfNFeature):
    names: list[str] = []

    def __init__(self, names: list[str] | None = None) -> None:
        super().__init__()
        self.bucket_names_config = [[n] for n in (names if names is not None else self.names)]


class ToCcPosition(_NamedBuckets):
    feature_type = FeatureType.TO_CC_POSITION
    description = "Your position on the To or Cc lines"
    names = POSITIONS_SHORT

    def _bucket_item(self, names: list[str], i: int) -> Any:
        return Position(i)

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        position = get_position(message)
        return next(b for b in self.buckets if b.item == position)


class ToCcNeither(_NamedBuckets):
    feature_type = FeatureType.TO_CC_NEITHER
    description = "Whether you are on the To or Cc lines"
    names = TO_CC_NEITHER

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        if message.to_line:
            return self.buckets[1]
        if message.cc_line:
            return self.buckets[2]
        return self.buckets[0]


class PreviousUnread(_NamedBuckets):
    feature_type = FeatureType.PREVIOUS_UNREAD
    description = "The number of unread messages prior to this one"
    names = PREVIOUS_UNREAD_STRINGS

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        conversation = user.conversation_of(message)
        previous = conversation.previous_messages(message) if conversation is not None else []
        if not previous:
            return self.buckets[0]
        unread = sum(1 for m in previous if not m.is_from_me and not m.is_read)
        return self.buckets[unread + 1] if unread < self.count - 2 else self.buckets[-1]


class SubjectPrefix(OneOfNFeature):
    """Which known prefix (if any) the subject starts with.

    The first bucket is taken when there is no prefix and the trailing
    "Other" bucket for unrecognised prefixes.
    """

    feature_type = FeatureType.SUBJECT_PREFIX
    description = "Subject starts with <{0}>"
    include_other = True

    def __init__(self, prefixes: list[list[str]] | None = None) -> None:
        super().__init__()
        self.bucket_names_config = [list(p) for p in (prefixes if prefixes is not None else SUBJECT_PREFIXES)]

    def _bucket_item(self, names: list[str], i: int) -> Any:
        return tuple(names)

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        prefix = message.subject_prefix
        if not prefix:
            return self.buckets[0]
        for bucket in self.buckets[1:-1]:
            if prefix in bucket.item:
                return bucket
        return self.buckets[-1]

    def __str__(self) -> str:
        return self.description.format(", ".join(self.bucket_names[1:]) if self.buckets else "...")
