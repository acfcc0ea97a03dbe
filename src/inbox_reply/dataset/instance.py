"""Labelled training examples."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from inbox_reply.features.base import FeatureBucket

if TYPE_CHECKING:
    from inbox_reply.features.feature_set import FeatureSet
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User

# Largest difference at which two feature values still count as equal
VALUE_TOLERANCE = float(np.finfo(float).eps)

LABEL_TRUE_PROBABILITY = 0.99


@dataclass(eq=False)
class Instance:
    """One message as a sparse feature map plus its reply label.

    Buckets absent from ``feature_values`` have value 0.0.
    """

    feature_set: FeatureSet
    feature_values: dict[FeatureBucket, float] = field(default_factory=dict)
    label: bool = False

    @classmethod
    def from_message(
        cls,
        message: Message,
        user: User,
        feature_set: FeatureSet,
        include_shared_features: bool = True,
    ) -> Instance:
        """Featurize a message and freeze its current reply status as the label."""
        return cls(
            feature_set=feature_set,
            feature_values=feature_set.compute_feature_values(user, message, include_shared_features),
            label=user.is_replied_to(message),
        )

    @property
    def probability_label_true(self) -> float:
        return LABEL_TRUE_PROBABILITY if self.label else 1.0 - LABEL_TRUE_PROBABILITY

    @property
    def probability_label_false(self) -> float:
        return 1.0 - self.probability_label_true

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instance):
            return NotImplemented
        if self is other:
            return True
        if self.label != other.label or self.feature_set != other.feature_set:
            return False
        if self.feature_values.keys() != other.feature_values.keys():
            return False
        return all(
            abs(value - other.feature_values[bucket]) <= VALUE_TOLERANCE
            for bucket, value in self.feature_values.items()
        )

    def __hash__(self) -> int:
        return hash((self.label, frozenset(self.feature_values)))
