"""Train, validation and test data sets for one user and feature set."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag
from functools import cached_property
from typing import TYPE_CHECKING

import structlog

from inbox_reply.dataset.dataset import Counter, DataSet
from inbox_reply.dataset.instance import Instance
from inbox_reply.features.base import ConfigurableFeature, FeatureBucket, FeatureType
from inbox_reply.features.feature_set import FeatureSet, FeatureSetType

if TYPE_CHECKING:
    from inbox_reply.models.user import User

logger = structlog.get_logger(__name__)

TOP_SENDER_COUNT = 20


class InputMode(Flag):
    """Which partition(s) a data set was drawn from."""

    TRAINING = 1
    VALIDATION = 2
    TESTING = 4
    COMMUNITY_TRAINING = 8
    TRAIN_AND_VALIDATION = 16


InstanceSet = dict[InputMode, list[Instance]]


def get_instances(user: User, feature_set: FeatureSet, include_shared_features: bool = True) -> InstanceSet:
    """Featurize the user's three partitions.

    Raises:
        ContractViolationError: If the user's messages were never split.
    """
    return {
        InputMode.TRAINING: [
            Instance.from_message(m, user, feature_set, include_shared_features) for m in user.train_messages
        ],
        InputMode.VALIDATION: [
            Instance.from_message(m, user, feature_set, include_shared_features) for m in user.validation_messages
        ],
        InputMode.TESTING: [
            Instance.from_message(m, user, feature_set, include_shared_features) for m in user.test_messages
        ],
    }


@dataclass(eq=False)
class Inputs:
    """Everything the inference engine needs to train and evaluate for one user."""

    user_name: str
    feature_set: FeatureSet
    train: DataSet
    validation: DataSet
    test: DataSet

    @classmethod
    def from_user(cls, user: User, feature_set: FeatureSet | FeatureSetType) -> Inputs:
        """Build all three data sets for a user whose messages are already split.

        Args:
            user: User with train/validation/test partitions.
            feature_set: A feature set, or the type of a predefined set to
                configure for this user.

        Returns:
            Inputs with one data set per partition.
        """
        if isinstance(feature_set, FeatureSetType):
            feature_set = FeatureSet.for_user(user, feature_set)
        instances = get_instances(user, feature_set)
        inputs = cls(
            user_name=user.user_name,
            feature_set=feature_set,
            train=DataSet("Training", feature_set, instances[InputMode.TRAINING]),
            validation=DataSet("Validation", feature_set, instances[InputMode.VALIDATION]),
            test=DataSet("Testing", feature_set, instances[InputMode.TESTING]),
        )
        logger.info(
            "inputs_built",
            user=user.user_name,
            feature_set=str(feature_set),
            train=inputs.train.count,
            validation=inputs.validation.count,
            test=inputs.test.count,
        )
        return inputs

    @property
    def id(self) -> str:
        return f"{self.user_name} {self.feature_set}"

    @cached_property
    def train_and_validation(self) -> DataSet:
        return DataSet(
            "Training, Validation",
            self.feature_set,
            [*self.train.instances, *self.validation.instances],
        )

    @property
    def feature_names(self) -> list[str]:
        return [str(b) for f in self.feature_set.features for b in f.buckets]

    @property
    def total_count(self) -> int:
        return self.train.count + self.validation.count + self.test.count

    @property
    def top_senders(self) -> dict[str, float]:
        """Reply fraction of the busiest sender buckets in train and validation."""
        counts: dict[FeatureBucket, Counter] = {}
        for instance in self.train_and_validation.instances:
            for bucket, value in instance.feature_values.items():
                if bucket.feature_type is not FeatureType.SENDER:
                    continue
                counter = counts.setdefault(bucket, Counter(description=bucket.name))
                if instance.label:
                    counter.positive += int(value)
                else:
                    counter.negative += int(value)
        busiest = sorted(counts.values(), key=lambda c: c.total, reverse=True)[:TOP_SENDER_COUNT]
        return {f"{c.description} ({c.total})": c.fraction for c in busiest}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inputs):
            return NotImplemented
        if self is other:
            return True
        return (
            self.id == other.id
            and self.feature_set == other.feature_set
            and self.train == other.train
            and self.validation == other.validation
            and self.test == other.test
        )

    def __hash__(self) -> int:
        return hash((self.id, self.total_count))

    def __str__(self) -> str:
        return (
            f"Training messages: {self.train.count}, "
            f"Validation messages: {self.validation.count}, "
            f"Test messages: {self.test.count}"
        )


@dataclass
class InputsCollection:
    """Inputs for several users, without duplicates, in insertion order."""

    inputs: list[Inputs] = field(default_factory=list)

    def __post_init__(self) -> None:
        given, self.inputs = self.inputs, []
        self.extend(given)

    def add(self, inputs: Inputs | None) -> None:
        if inputs is not None and inputs not in self.inputs:
            self.inputs.append(inputs)

    def extend(self, inputs: list[Inputs] | InputsCollection) -> None:
        items = inputs.inputs if isinstance(inputs, InputsCollection) else inputs
        for item in items:
            self.add(item)

    def __contains__(self, inputs: object) -> bool:
        return inputs in self.inputs

    def __len__(self) -> int:
        return len(self.inputs)

    @property
    def count(self) -> int:
        return len(self.inputs)

    @property
    def data_set_sizes(self) -> dict[str, dict[str, int]]:
        """Partition sizes per user, plus a "Total" row."""
        sizes = {
            i.user_name: {
                "Train": i.train.count,
                "Validation": i.validation.count,
                "Test": i.test.count,
                "User Total": i.total_count,
            }
            for i in self.inputs
        }
        if sizes:
            columns = ("Train", "Validation", "Test", "User Total")
            sizes["Total"] = {c: sum(row[c] for row in list(sizes.values())) for c in columns}
        return sizes

    @property
    def feature_histograms(self) -> dict[str, dict[str, float]]:
        """Reply fractions of the non-configurable features pooled over all users."""
        pooled: dict[str, dict[str, Counter]] = {}
        for inputs in self.inputs:
            data_set = inputs.train_and_validation
            features = [f for f in data_set.feature_set.features if not isinstance(f, ConfigurableFeature)]
            for name, cells in data_set.get_feature_histograms(features).items():
                target = pooled.setdefault(name, {})
                for key, counter in cells.items():
                    total = target.setdefault(key, Counter(description=key))
                    total.positive += counter.positive
                    total.negative += counter.negative
        return {
            name: {f"{c.description} ({c.total})": c.fraction for c in cells.values()}
            for name, cells in pooled.items()
        }
