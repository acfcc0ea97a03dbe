"""Length and word-count features binned into fixed ranges."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inbox_reply.features.base import MAX_BIN, FeatureType, NumericFeature

if TYPE_CHECKING:
    from inbox_reply.models.message import Message

BODY_CHAR_LENGTH_BINS = [0, 4, 8, 16, 32, 64, 128, 256, 512, 1023, MAX_BIN]
BODY_WORD_COUNT_BINS = [0, 1, 2, 3, 4, 6, 8, 16, 32, 64, 128, MAX_BIN]
SUBJECT_WORD_COUNT_BINS = [0, 1, 2, 4, 8, MAX_BIN]
SUBJECT_CHAR_LENGTH_BINS = [0, 2, 4, 8, 16, 32, 64, MAX_BIN]


class BodyLength(NumericFeature):
    feature_type = FeatureType.BODY_LENGTH
    description = "The number of new characters in the body text"
    bins = BODY_CHAR_LENGTH_BINS

    def compute_value(self, message: Message) -> int:
        return len(message.new_text)


class BodyWordCount(NumericFeature):
    feature_type = FeatureType.BODY_WORD_COUNT
    description = "The number of new words in the body text"
    bins = BODY_WORD_COUNT_BINS

    def compute_value(self, message: Message) -> int:
        return message.new_text_length


class SubjectLength(NumericFeature):
    feature_type = FeatureType.SUBJECT_LENGTH
    description = "The number of characters in the subject"
    bins = SUBJECT_CHAR_LENGTH_BINS

    def compute_value(self, message: Message) -> int:
        return len(message.subject_without_prefix)


class SubjectWordCount(NumericFeature):
    feature_type = FeatureType.SUBJECT_WORD_COUNT
    description = "The number of words in the subject"
    bins = SUBJECT_WORD_COUNT_BINS

    def compute_value(self, message: Message) -> int:
        return len(message.subject_words)
