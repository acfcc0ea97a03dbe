"""Single-bucket features: bias and yes/no properties of a message."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from inbox_reply.features.base import BinaryFeature, Feature, FeatureBucket, FeatureOutput, FeatureType

if TYPE_CHECKING:
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User

DEFAULT_BIAS = -math.sqrt(10)

AUTOMATED_SENDER_MARKERS = ("noreply", "no-reply", "notreply", "not-reply", "auto")


class Bias(Feature):
    """Constant input carrying the classifier's offset."""

    feature_type = FeatureType.BIAS
    description = "Bias"

    def __init__(self, value: float = DEFAULT_BIAS) -> None:
        super().__init__()
        self.value = value

    def _initial_buckets(self) -> list[FeatureBucket]:
        return [self._make_bucket(0, "Bias", self.value)]

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_configured()
        return [(self.buckets[0], self.buckets[0].item)]


class FromMe(BinaryFeature):
    feature_type = FeatureType.FROM_ME
    description = "Whether the message is from you"

    def compute_feature(self, user: User, message: Message) -> bool:
        return message.is_from_me


class FromManager(BinaryFeature):
    feature_type = FeatureType.FROM_MANAGER
    description = "Whether the message is from your manager"

    def compute_feature(self, user: User, message: Message) -> bool:
        if message.sender is None or user.me.manager_id is None:
            return False
        return user.person_of(message.sender).person_id == user.me.manager_id


class IsAutomatedSender(BinaryFeature):
    feature_type = FeatureType.IS_AUTOMATED_SENDER
    description = "Whether the message appears to be from an automated sender"

    def compute_feature(self, user: User, message: Message) -> bool:
        if message.sender is None:
            return False
        email = str(message.sender.email).lower()
        name = str(message.sender.name).lower()
        return any(marker in email or marker in name for marker in AUTOMATED_SENDER_MARKERS)


class ReplyToMe(BinaryFeature):
    feature_type = FeatureType.REPLY_TO_ME
    description = "Whether this message is a reply to an earlier message from you"

    def compute_feature(self, user: User, message: Message) -> bool:
        if message.sender is None or message.is_from_me:
            return False
        conversation = user.conversation_of(message)
        if conversation is None:
            return False
        sender_key = message.sender.person_key
        return any(
            m.is_from_me and sender_key in (m.recipients or [])
            for m in conversation.previous_messages(message)
        )


class ToLine(BinaryFeature):
    feature_type = FeatureType.TO_LINE
    description = "Whether or not you are on the To line"

    def compute_feature(self, user: User, message: Message) -> bool:
        return message.to_line


class ToCcLine(BinaryFeature):
    feature_type = FeatureType.TO_CC_LINE
    description = "Whether or not you are on the To line or Cc line"

    def compute_feature(self, user: User, message: Message) -> bool:
        return message.to_line or message.cc_line


class HasAttachments(BinaryFeature):
    feature_type = FeatureType.HAS_ATTACHMENTS
    description = "Whether the message has attachments"

    def compute_feature(self, user: User, message: Message) -> bool:
        return message.has_attachments
