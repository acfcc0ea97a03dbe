"""Ordered collections of features defining a classifier's input space."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from inbox_reply.features.base import ConfigurableFeature, Feature, FeatureBucket, FeatureType, Sparsity
from inbox_reply.features.registry import create_feature, is_configurable

if TYPE_CHECKING:
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User


class FeatureSetType(str, Enum):
    """Predefined feature lists."""

    SINGLE = "single"
    SEPARATE = "separate"
    INITIAL = "initial"
    WITH_SUBJECT_PREFIX = "with_subject_prefix"
    WITH_RECIPIENT = "with_recipient"
    WITH_RECIPIENT2 = "with_recipient2"
    COMBINED = "combined"


_INITIAL = [
    FeatureType.FROM_ME,
    FeatureType.TO_CC_POSITION,
    FeatureType.HAS_ATTACHMENTS,
    FeatureType.BODY_LENGTH,
    FeatureType.SUBJECT_LENGTH,
]
_WITH_SUBJECT_PREFIX = [*_INITIAL, FeatureType.SUBJECT_PREFIX, FeatureType.SENDER]

FEATURE_SETS: dict[FeatureSetType, list[FeatureType]] = {
    FeatureSetType.SINGLE: [FeatureType.TO_LINE],
    FeatureSetType.SEPARATE: [FeatureType.TO_LINE, FeatureType.FROM_MANAGER],
    FeatureSetType.INITIAL: [*_INITIAL, FeatureType.SENDER],
    FeatureSetType.WITH_SUBJECT_PREFIX: _WITH_SUBJECT_PREFIX,
    FeatureSetType.WITH_RECIPIENT: [*_WITH_SUBJECT_PREFIX, FeatureType.RECIPIENT],
    FeatureSetType.WITH_RECIPIENT2: [*_WITH_SUBJECT_PREFIX, FeatureType.RECIPIENT, FeatureType.BIAS],
}
FEATURE_SETS[FeatureSetType.COMBINED] = list(dict.fromkeys(ft for fts in FEATURE_SETS.values() for ft in fts))


def _user_feature(user: User, feature_type: FeatureType) -> Feature:
    """The user's configured instance of a feature, created on first use."""
    if feature_type not in user.feature_cache:
        feature = create_feature(feature_type)
        user.feature_cache[feature_type] = feature
        if isinstance(feature, ConfigurableFeature):
            feature.configure_for(user)
    return user.feature_cache[feature_type]


class FeatureSet:
    """An ordered, deduplicated list of features.

    ``feature_buckets`` concatenates the buckets of all member features and
    defines the index of every column in the feature vectors built against
    this set. Configurable features can add buckets while computing, so the
    bucket list is rebuilt whenever the total bucket count changes.
    """

    def __init__(
        self,
        features: list[Feature] | None = None,
        name: str | None = None,
        sparsity: Sparsity = Sparsity.SPARSE,
    ) -> None:
        self.features: list[Feature] = list(dict.fromkeys(features or []))
        self.name = name
        self.sparsity = sparsity
        self._buckets: list[FeatureBucket] | None = None
        self._bucket_index: dict[FeatureBucket, int] = {}

    @classmethod
    def create(cls, feature_set_type: FeatureSetType) -> FeatureSet:
        """Fresh features with only their fixed buckets configured."""
        return cls(
            [create_feature(ft) for ft in FEATURE_SETS[feature_set_type]],
            name=feature_set_type.value,
        )

    @classmethod
    def for_user(cls, user: User, feature_set_type: FeatureSetType) -> FeatureSet:
        """Features configured for ``user``, shared through the user's feature cache."""
        return cls(
            [_user_feature(user, ft) for ft in FEATURE_SETS[feature_set_type]],
            name=feature_set_type.value,
        )

    @classmethod
    def community_set(cls, feature_set_type: FeatureSetType) -> FeatureSet:
        """The non-configurable features of a set, usable across users."""
        return cls(
            [create_feature(ft) for ft in FEATURE_SETS[feature_set_type] if not is_configurable(ft)],
            name=feature_set_type.value,
        )

    @classmethod
    def personal_set(cls, community: FeatureSet, user: User, feature_set_type: FeatureSetType) -> FeatureSet:
        """A community set extended with the user's configurable features."""
        personal = [_user_feature(user, ft) for ft in FEATURE_SETS[feature_set_type] if is_configurable(ft)]
        return cls([*community.features, *personal], name=feature_set_type.value)

    @property
    def shared_features(self) -> list[Feature]:
        return [f for f in self.features if f.is_shared]

    @property
    def non_shared_features(self) -> list[Feature]:
        return [f for f in self.features if not f.is_shared]

    @property
    def feature_vector_length(self) -> int:
        return sum(f.count for f in self.features)

    @property
    def shared_feature_vector_length(self) -> int:
        return sum(f.count for f in self.shared_features)

    @property
    def non_shared_feature_vector_length(self) -> int:
        return sum(f.count for f in self.non_shared_features)

    def _refresh_buckets(self) -> None:
        if self._buckets is None or len(self._buckets) != self.feature_vector_length:
            self._buckets = list(dict.fromkeys(b for f in self.features for b in f.buckets))
            self._bucket_index = {b: i for i, b in enumerate(self._buckets)}

    @property
    def feature_buckets(self) -> list[FeatureBucket]:
        self._refresh_buckets()
        return self._buckets  # type: ignore[return-value]

    def bucket_index(self, bucket: FeatureBucket) -> int:
        """Column of ``bucket`` in feature vectors built against this set."""
        self._refresh_buckets()
        return self._bucket_index[bucket]

    @property
    def feature_descriptions(self) -> dict[str, dict[str, object]]:
        return {
            f.name: {
                "Description": str(f),
                "#Buckets": "(varies)" if f.is_configurable else f.count,
            }
            for f in self.features
        }

    def compute_feature_values(
        self, user: User, message: Message, include_shared_features: bool = True
    ) -> dict[FeatureBucket, float]:
        """Sparse feature map for one message.

        Feature outputs are memoized in ``user.feature_bucket_cache`` by
        message id and feature type.

        Args:
            user: Owner of the message and of the caches.
            message: Message to featurize.
            include_shared_features: When False, only shared features are
                computed (used for community models).

        Returns:
            Mapping from active bucket to value.
        """
        values: dict[FeatureBucket, float] = {}
        for feature in self.features:
            if not include_shared_features and not feature.is_shared:
                continue
            key = (message.message_id, feature.feature_type)
            if key not in user.feature_bucket_cache:
                user.feature_bucket_cache[key] = feature.compute(user, message)
            for bucket, value in user.feature_bucket_cache[key]:
                values[bucket] = value
        return values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureSet):
            return NotImplemented
        return self.name == other.name and self.sparsity == other.sparsity and self.features == other.features

    def __hash__(self) -> int:
        return hash((self.name, self.sparsity))

    def __str__(self) -> str:
        if self.name:
            return self.name
        return ",".join(f.name for f in self.features)

    def __repr__(self) -> str:
        return f"FeatureSet({self.name!r}, features={len(self.features)})"
