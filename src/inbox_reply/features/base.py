"""Feature base classes and buckets.

A feature maps a (user, message) pair to a sparse list of
``(bucket, value)`` pairs. Each feature owns the ordered list of buckets it
can emit; the bucket is the atomic column of a feature vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from inbox_reply.core.exceptions import FeatureError

if TYPE_CHECKING:
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User

# Upper bin boundary meaning "anything larger"
MAX_BIN = 2**31 - 1


class FeatureType(str, Enum):
    """Closed set of feature identifiers; the value is the display name."""

    BIAS = "Bias"
    FROM_ME = "FromMe"
    FROM_MANAGER = "FromManager"
    IS_AUTOMATED_SENDER = "IsAutomatedSender"
    REPLY_TO_ME = "ReplyToMe"
    TO_LINE = "ToLine"
    TO_CC_LINE = "ToCcLine"
    HAS_ATTACHMENTS = "HasAttachments"
    TO_CC_POSITION = "ToCcPosition"
    TO_CC_NEITHER = "ToCcNeither"
    PREVIOUS_UNREAD = "PreviousUnread"
    SUBJECT_PREFIX = "SubjectPrefix"
    BODY_LENGTH = "BodyLength"
    BODY_WORD_COUNT = "BodyWordCount"
    SUBJECT_LENGTH = "SubjectLength"
    SUBJECT_WORD_COUNT = "SubjectWordCount"
    SENDER = "Sender"
    SENDER_TO_CC = "SenderToCc"
    RECIPIENT = "Recipient"


class Sparsity(str, Enum):
    SPARSE = "sparse"
    DENSE = "dense"


@dataclass(frozen=True, slots=True)
class FeatureBucket:
    """One output slot of a feature, identified by feature, index and name."""

    feature_type: FeatureType
    index: int
    name: str
    item: Any = field(default=None, compare=False)
    is_shared: bool = field(default=True, compare=False)

    def __str__(self) -> str:
        if self.name == self.feature_type.value:
            return self.name
        return f"{self.feature_type.value}[{self.name}]"


FeatureOutput = list[tuple[FeatureBucket, float]]


class Feature(ABC):
    """Base class for all features.

    Subclasses set ``feature_type`` and ``description``. ``configure()``
    establishes the fixed bucket list and must run before ``compute()``.
    """

    feature_type: FeatureType
    description: str = ""
    is_shared: bool = True
    string_format: str = "{0}"

    def __init__(self) -> None:
        self.buckets: list[FeatureBucket] = []
        self._configured = False

    @property
    def name(self) -> str:
        return self.feature_type.value

    @property
    def count(self) -> int:
        return len(self.buckets)

    @property
    def bucket_names(self) -> list[str]:
        return [b.name for b in self.buckets]

    @property
    def is_configurable(self) -> bool:
        return isinstance(self, ConfigurableFeature)

    def _make_bucket(self, index: int, name: str, item: Any = None) -> FeatureBucket:
        return FeatureBucket(
            feature_type=self.feature_type, index=index, name=name, item=item, is_shared=self.is_shared
        )

    def configure(self) -> None:
        """Build the fixed bucket list. Calling it again has no effect."""
        if self._configured:
            return
        self.buckets = self._initial_buckets()
        self._configured = True

    def _initial_buckets(self) -> list[FeatureBucket]:
        return []

    def _require_configured(self) -> None:
        if not self._configured:
            raise FeatureError("Feature was not configured", feature=self.name)

    @abstractmethod
    def compute(self, user: User, message: Message) -> FeatureOutput:
        """Emit the active buckets and their values for one message."""

    def get_description(self, i: int) -> str:
        if self.count > 1:
            return self.string_format.format(self.buckets[i].name)
        return self.string_format.format(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return (
            self.feature_type == other.feature_type
            and self.is_shared == other.is_shared
            and self.buckets == other.buckets
        )

    def __hash__(self) -> int:
        return hash(self.feature_type)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"{type(self).__name__}(buckets={self.count})"


class ConfigurableFeature(ABC):
    """Mixin for features whose buckets depend on one user's history."""

    feature_type: FeatureType
    _configured_user: str | None = None

    @abstractmethod
    def configure_for(self, user: User) -> None:
        """Derive user-specific buckets. Must run once before computing."""

    def _require_user(self, user: User) -> None:
        if self._configured_user is None:
            raise FeatureError("Feature was not configured for any user", feature=self.feature_type.value)
        if self._configured_user != user.user_name:
            raise FeatureError(
                f"Feature was configured for {self._configured_user!r}, not {user.user_name!r}",
                feature=self.feature_type.value,
            )


class BinaryFeature(Feature):
    """A feature with a single bucket valued 1.0 or 0.0."""

    def _initial_buckets(self) -> list[FeatureBucket]:
        return [self._make_bucket(0, self.name)]

    @abstractmethod
    def compute_feature(self, user: User, message: Message) -> bool:
        """Whether the property holds for this message."""

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_configured()
        return [(self.buckets[0], 1.0 if self.compute_feature(user, message) else 0.0)]


class OneOfNFeature(Feature):
    """A feature emitting exactly one active bucket valued 1.0."""

    bucket_names_config: list[list[str]] | None = None
    include_other: bool = False

    def _bucket_item(self, names: list[str], i: int) -> Any:
        return None

    def _initial_buckets(self) -> list[FeatureBucket]:
        buckets = [
            self._make_bucket(i, names[0], self._bucket_item(names, i))
            for i, names in enumerate(self.bucket_names_config or [])
        ]
        if self.include_other:
            buckets.append(self._make_bucket(len(buckets), "Other"))
        return buckets

    @abstractmethod
    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        """The single active bucket for this message."""

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_configured()
        return [(self.compute_feature(user, message), 1.0)]


class MofNFeature(ConfigurableFeature, Feature):
    """A configurable feature that may emit several active buckets."""

    @abstractmethod
    def compute_feature(self, user: User, message: Message) -> FeatureOutput:
        """The active buckets and their values."""

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_configured()
        self._require_user(user)
        return self.compute_feature(user, message)


def get_length_strings(bins: list[int], i: int) -> str:
    """Readable name for bin ``i``, e.g. "5-8" or ">1023"."""
    if i == 0:
        return str(bins[0])
    if bins[i] - bins[i - 1] == 1:
        return str(bins[i])
    if bins[i] < MAX_BIN:
        return f"{bins[i - 1] + 1}-{bins[i]}"
    return f">{bins[i - 1]}"


def bin_index(value: int, bins: list[int]) -> int:
    """First index whose boundary is at least ``value``, else the last index."""
    for i, boundary in enumerate(bins):
        if value <= boundary:
            return i
    return len(bins) - 1


class NumericFeature(Feature):
    """A count mapped onto one of a fixed ascending list of bins."""

    bins: list[int] = []

    def __init__(self, bins: list[int] | None = None) -> None:
        super().__init__()
        if bins is not None:
            self.bins = list(bins)

    def _initial_buckets(self) -> list[FeatureBucket]:
        return [self._make_bucket(i, get_length_strings(self.bins, i), b) for i, b in enumerate(self.bins)]

    @abstractmethod
    def compute_value(self, message: Message) -> int:
        """The raw count to be binned."""

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_configured()
        return [(self.buckets[bin_index(self.compute_value(message), self.bins)], 1.0)]
