"""Named collections of instances and the arrays derived from them.

Derived views are computed on first access and cached for the lifetime of
the data set. They are not refreshed if the feature set gains buckets
afterwards, so a feature set must not change once data sets built against
it have been read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

import numpy as np

from inbox_reply.core.text import split_camel_case
from inbox_reply.dataset.instance import Instance
from inbox_reply.features.base import BinaryFeature, Feature, NumericFeature, OneOfNFeature
from inbox_reply.features.feature_set import FeatureSet


# Features with more buckets than this only report their busiest buckets
MAX_HISTOGRAM_BUCKETS = 100
TOP_HISTOGRAM_BUCKETS = 20


@dataclass
class Counter:
    """Positive and negative label counts for one histogram cell."""

    description: str = ""
    positive: int = 0
    negative: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative

    @property
    def fraction(self) -> float:
        return 0.0 if self.total == 0 else self.positive / self.total


@dataclass(eq=False)
class DataSet:
    """An ordered list of instances sharing one feature set."""

    name: str
    feature_set: FeatureSet
    instances: list[Instance] = field(default_factory=list)

    def __post_init__(self) -> None:
        for instance in self.instances:
            instance.feature_set = self.feature_set

    @property
    def count(self) -> int:
        return len(self.instances)

    def __len__(self) -> int:
        return len(self.instances)

    @cached_property
    def labels(self) -> np.ndarray:
        return np.array([i.label for i in self.instances], dtype=bool)

    @cached_property
    def positive_instances(self) -> list[Instance]:
        return [i for i in self.instances if i.label]

    @cached_property
    def negative_instances(self) -> list[Instance]:
        return [i for i in self.instances if not i.label]

    # Sparse views, split by whether the bucket's feature is shared

    def _sparse_indices(self, shared: bool) -> list[np.ndarray]:
        return [
            np.array(
                [self.feature_set.bucket_index(b) for b in i.feature_values if b.is_shared == shared],
                dtype=np.int64,
            )
            for i in self.instances
        ]

    def _sparse_values(self, shared: bool) -> list[np.ndarray]:
        return [
            np.array([v for b, v in i.feature_values.items() if b.is_shared == shared], dtype=np.float64)
            for i in self.instances
        ]

    @cached_property
    def personal_sparse_indices(self) -> list[np.ndarray]:
        return self._sparse_indices(shared=False)

    @cached_property
    def personal_sparse_values(self) -> list[np.ndarray]:
        return self._sparse_values(shared=False)

    @cached_property
    def personal_sparse_counts(self) -> np.ndarray:
        return np.array([len(a) for a in self.personal_sparse_indices], dtype=np.int64)

    @cached_property
    def shared_sparse_indices(self) -> list[np.ndarray]:
        return self._sparse_indices(shared=True)

    @cached_property
    def shared_sparse_values(self) -> list[np.ndarray]:
        return self._sparse_values(shared=True)

    @cached_property
    def shared_sparse_counts(self) -> np.ndarray:
        return np.array([len(a) for a in self.shared_sparse_indices], dtype=np.int64)

    @cached_property
    def dense_values(self) -> np.ndarray:
        """Instances x buckets matrix with zeros for inactive buckets."""
        values = np.zeros((self.count, len(self.feature_set.feature_buckets)), dtype=np.float64)
        for row, instance in enumerate(self.instances):
            for bucket, value in instance.feature_values.items():
                values[row, self.feature_set.bucket_index(bucket)] = value
        return values

    # Diagnostics

    def get_feature_histograms(self, features: list[Feature]) -> dict[str, dict[str, Counter]]:
        """Count positive and negative labels per feature bucket.

        Binary features report "False"/"True" cells. One-of-N and numeric
        features report one cell per bucket. Multi-bucket features such as
        recipients are skipped.

        Args:
            features: Features to tabulate.

        Returns:
            Mapping from feature name to cell description to counts.
        """
        histograms: dict[str, dict[str, Counter]] = {}
        for feature in features:
            cells: dict[str, Counter] = {}
            for index, bucket in enumerate(feature.buckets):
                if isinstance(feature, BinaryFeature):
                    for flag in (False, True):
                        key = str(flag)

                        def matches(instance: Instance, flag: bool = flag) -> bool:
                            value = instance.feature_values.get(bucket, 0.0)
                            return value > 0.5 if flag else value < 0.5

                        cells[key] = Counter(
                            description=key,
                            positive=sum(1 for i in self.positive_instances if matches(i)),
                            negative=sum(1 for i in self.negative_instances if matches(i)),
                        )
                elif isinstance(feature, (OneOfNFeature, NumericFeature)):
                    key = split_camel_case(feature.get_description(index))
                    cells[key] = Counter(
                        description=key,
                        positive=sum(1 for i in self.positive_instances if bucket in i.feature_values),
                        negative=sum(1 for i in self.negative_instances if bucket in i.feature_values),
                    )
            if feature.count > MAX_HISTOGRAM_BUCKETS:
                busiest = sorted(cells.items(), key=lambda kv: kv[1].total, reverse=True)
                cells = dict(busiest[:TOP_HISTOGRAM_BUCKETS])
            histograms[feature.name] = cells
        return histograms

    @cached_property
    def histograms(self) -> dict[str, dict[str, Counter]]:
        return self.get_feature_histograms(self.feature_set.features)

    @cached_property
    def feature_histograms(self) -> dict[str, dict[str, float]]:
        """Reply fraction per cell, keyed "<cell> (<total>)"."""
        return {
            name: {f"{c.description} ({c.total})": c.fraction for c in cells.values()}
            for name, cells in self.histograms.items()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataSet):
            return NotImplemented
        return (
            self.name == other.name
            and self.feature_set == other.feature_set
            and self.instances == other.instances
        )

    def __hash__(self) -> int:
        return hash((self.name, self.count))

    def __str__(self) -> str:
        return self.name
