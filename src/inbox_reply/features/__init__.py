"""Features computed from messages and the feature sets grouping them."""

from inbox_reply.features.base import (
    BinaryFeature,
    ConfigurableFeature,
    Feature,
    FeatureBucket,
    FeatureType,
    MofNFeature,
    NumericFeature,
    OneOfNFeature,
    Sparsity,
)
from inbox_reply.features.feature_set import FEATURE_SETS, FeatureSet, FeatureSetType
from inbox_reply.features.registry import FEATURE_CONSTRUCTORS, create_feature, is_configurable

__all__ = [
    "FEATURE_CONSTRUCTORS",
    "FEATURE_SETS",
    "BinaryFeature",
    "ConfigurableFeature",
    "Feature",
    "FeatureBucket",
    "FeatureSet",
    "FeatureSetType",
    "FeatureType",
    "MofNFeature",
    "NumericFeature",
    "OneOfNFeature",
    "Sparsity",
    "create_feature",
    "is_configurable",
]
