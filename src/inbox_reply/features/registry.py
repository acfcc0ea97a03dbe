"""Constructors for every feature, keyed by feature type."""

from __future__ import annotations

from collections.abc import Callable

from inbox_reply.core.exceptions import FeatureError
from inbox_reply.features.base import ConfigurableFeature, Feature, FeatureType
from inbox_reply.features.binary import (
    Bias,
    FromManager,
    FromMe,
    HasAttachments,
    IsAutomatedSender,
    ReplyToMe,
    ToCcLine,
    ToLine,
)
from inbox_reply.features.categorical import PreviousUnread, SubjectPrefix, ToCcNeither, ToCcPosition
from inbox_reply.features.contacts import Recipient, Sender, SenderToCc
from inbox_reply.features.numeric import BodyLength, BodyWordCount, SubjectLength, SubjectWordCount

FEATURE_CONSTRUCTORS: dict[FeatureType, Callable[[], Feature]] = {
    FeatureType.BIAS: Bias,
    FeatureType.FROM_ME: FromMe,
    FeatureType.FROM_MANAGER: FromManager,
    FeatureType.IS_AUTOMATED_SENDER: IsAutomatedSender,
    FeatureType.REPLY_TO_ME: ReplyToMe,
    FeatureType.TO_LINE: ToLine,
    FeatureType.TO_CC_LINE: ToCcLine,
    FeatureType.HAS_ATTACHMENTS: HasAttachments,
    FeatureType.TO_CC_POSITION: ToCcPosition,
    FeatureType.TO_CC_NEITHER: ToCcNeither,
    FeatureType.PREVIOUS_UNREAD: PreviousUnread,
    FeatureType.SUBJECT_PREFIX: SubjectPrefix,
    FeatureType.BODY_LENGTH: BodyLength,
    FeatureType.BODY_WORD_COUNT: BodyWordCount,
    FeatureType.SUBJECT_LENGTH: SubjectLength,
    FeatureType.SUBJECT_WORD_COUNT: SubjectWordCount,
    FeatureType.SENDER: Sender,
    FeatureType.SENDER_TO_CC: SenderToCc,
    FeatureType.RECIPIENT: Recipient,
}

CONFIGURABLE_TYPES = frozenset(
    ft for ft, ctor in FEATURE_CONSTRUCTORS.items() if isinstance(ctor, type) and issubclass(ctor, ConfigurableFeature)
)


def create_feature(feature_type: FeatureType) -> Feature:
    """Instantiate and configure the fixed buckets of a feature.

    Raises:
        FeatureError: If no constructor is registered for the type.
    """
    try:
        constructor = FEATURE_CONSTRUCTORS[feature_type]
    except KeyError:
        raise FeatureError(f"No feature registered for {feature_type!r}") from None
    feature = constructor()
    feature.configure()
    return feature


def is_configurable(feature_type: FeatureType) -> bool:
    return feature_type in CONFIGURABLE_TYPES
