"""Prior and posterior weight records exchanged with the inference engine.

The engine itself lives elsewhere. These records only carry distribution
parameters keyed by feature bucket, plus the reporting views used to
inspect trained weights.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from inbox_reply.features.base import FeatureBucket, FeatureType
from inbox_reply.features.feature_set import FeatureSet

TOP_WEIGHTS_PER_FEATURE = 15
THRESHOLD_KEY = "Threshold"


@dataclass(frozen=True, slots=True)
class Gaussian:
    mean: float
    variance: float

    @classmethod
    def from_mean_and_variance(cls, mean: float, variance: float) -> Gaussian:
        return cls(mean, variance)

    @classmethod
    def from_mean_and_precision(cls, mean: float, precision: float) -> Gaussian:
        return cls(mean, math.inf if precision == 0 else 1.0 / precision)

    @property
    def precision(self) -> float:
        return math.inf if self.variance == 0 else 1.0 / self.variance

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)


@dataclass(frozen=True, slots=True)
class Gamma:
    """Gamma distribution by shape and scale, or a point mass at ``point``."""

    shape: float
    scale: float
    point: float | None = None

    @classmethod
    def from_shape_and_scale(cls, shape: float, scale: float) -> Gamma:
        return cls(shape, scale)

    @classmethod
    def point_mass(cls, point: float) -> Gamma:
        return cls(math.inf, 0.0, point)

    @property
    def is_point_mass(self) -> bool:
        return self.point is not None

    @property
    def mean(self) -> float:
        if self.point is not None:
            return self.point
        return self.shape * self.scale


class WeightSummary(NamedTuple):
    """A weight's mean with one-spread bounds, for plotting."""

    name: str
    mean: float
    lower: float
    upper: float


def _summary(bucket: FeatureBucket, mean: float, spread: float) -> WeightSummary:
    return WeightSummary(str(bucket), mean, mean - spread, mean + spread)


@dataclass
class Variables:
    """Per-bucket weights plus a decision threshold."""

    weights: dict[FeatureBucket, Gaussian] = field(default_factory=dict)
    threshold: Gaussian = field(default_factory=lambda: Gaussian(0.0, 1.0))

    @property
    def top_weights(self) -> dict[FeatureBucket, Gaussian]:
        """The weights with the largest absolute mean, at most 15 per feature."""
        by_feature: dict[FeatureType, list[FeatureBucket]] = {}
        for bucket in self.weights:
            by_feature.setdefault(bucket.feature_type, []).append(bucket)
        top = {
            bucket
            for buckets in by_feature.values()
            for bucket in sorted(buckets, key=lambda b: abs(self.weights[b].mean), reverse=True)[
                :TOP_WEIGHTS_PER_FEATURE
            ]
        }
        return {b: g for b, g in self.weights.items() if b in top}

    def as_dict(self) -> dict[str, Gaussian]:
        named = {str(b): g for b, g in self.weights.items()}
        named[THRESHOLD_KEY] = self.threshold
        return named


@dataclass
class Priors(Variables):
    noise_variance: float = 1.0

    @classmethod
    def generate(
        cls, buckets: Iterable[FeatureBucket], weight_variance: float, threshold_variance: float
    ) -> Priors:
        """Zero-mean priors for every bucket."""
        return cls(
            weights={b: Gaussian.from_mean_and_variance(0.0, weight_variance) for b in buckets},
            threshold=Gaussian.from_mean_and_variance(0.0, threshold_variance),
            noise_variance=threshold_variance,
        )

    @classmethod
    def from_posteriors(
        cls, posteriors: Posteriors, noise_variance: float, feature_set: FeatureSet | None = None
    ) -> Priors:
        """Seed a new round of training from earlier posteriors.

        With a ``feature_set``, the weights are re-keyed to its buckets and
        buckets the posteriors never saw get a zero-mean prior of
        ``noise_variance``.
        """
        if feature_set is None:
            weights = dict(posteriors.weights)
        else:
            weights = {
                b: posteriors.weights.get(b, Gaussian.from_mean_and_variance(0.0, noise_variance))
                for b in feature_set.feature_buckets
            }
        return cls(weights=weights, threshold=posteriors.threshold, noise_variance=noise_variance)

    @classmethod
    def from_community_posteriors(
        cls, posteriors: CommunityPosteriors, feature_set: FeatureSet, threshold_and_noise_variance: float
    ) -> Priors:
        """Personal priors from the community's learned weight means and precisions."""
        default = Gaussian.from_mean_and_variance(0.0, threshold_and_noise_variance)
        weights = {}
        for bucket in feature_set.feature_buckets:
            if bucket in posteriors.weight_means and bucket in posteriors.weight_precisions:
                weights[bucket] = Gaussian.from_mean_and_precision(
                    posteriors.weight_means[bucket].mean, posteriors.weight_precisions[bucket].mean
                )
            else:
                weights[bucket] = default
        return cls(weights=weights, threshold=default, noise_variance=threshold_and_noise_variance)


@dataclass
class Posteriors(Variables):
    @property
    def means(self) -> dict[str, float]:
        return {str(b): g.mean for b, g in self.top_weights.items()}

    @property
    def means_and_standard_deviations(self) -> list[WeightSummary]:
        return [_summary(b, g.mean, g.standard_deviation) for b, g in self.top_weights.items()]

    @property
    def shared_means(self) -> dict[str, float]:
        return {str(b): g.mean for b, g in self.weights.items() if b.is_shared}

    @property
    def shared_means_and_standard_deviations(self) -> list[WeightSummary]:
        return [_summary(b, g.mean, g.standard_deviation) for b, g in self.weights.items() if b.is_shared]


@dataclass
class CommunityVariables:
    """Community-level weight means and precisions, with per-user thresholds."""

    weight_means: dict[FeatureBucket, Gaussian] = field(default_factory=dict)
    weight_precisions: dict[FeatureBucket, Gamma] = field(default_factory=dict)
    thresholds: dict[str, Gaussian] = field(default_factory=dict)
    posteriors: dict[str, Posteriors] = field(default_factory=dict)

    @property
    def means_dict(self) -> dict[str, Gaussian]:
        return {str(b): g for b, g in self.weight_means.items()}

    @property
    def precision_dict(self) -> dict[str, Gamma]:
        return {str(b): g for b, g in self.weight_precisions.items()}


@dataclass
class CommunityPriors(CommunityVariables):
    noise_variance: float = 1.0

    @classmethod
    def generate(
        cls,
        buckets: Iterable[FeatureBucket],
        precision: Gamma,
        threshold_and_noise_variance: float,
        user_names: Iterable[str],
    ) -> CommunityPriors:
        """Unit-variance weight means with a common precision prior.

        Args:
            buckets: Buckets to create weights for.
            precision: Prior on each weight's precision, either shape/scale
                or a point mass.
            threshold_and_noise_variance: Variance of each user's threshold
                and of the noise.
            user_names: Users in the community.
        """
        buckets = list(buckets)
        return cls(
            weight_means={b: Gaussian.from_mean_and_variance(0.0, 1.0) for b in buckets},
            weight_precisions={b: precision for b in buckets},
            thresholds={u: Gaussian.from_mean_and_variance(0.0, threshold_and_noise_variance) for u in user_names},
            noise_variance=threshold_and_noise_variance,
        )

    @classmethod
    def from_posteriors(
        cls,
        posteriors: CommunityPosteriors,
        feature_set: FeatureSet,
        precision: Gamma,
        threshold_and_noise_variance: float,
        user_names: Iterable[str],
    ) -> CommunityPriors:
        """Re-key community posteriors to a feature set, filling gaps with fresh priors."""
        unit = Gaussian.from_mean_and_variance(0.0, 1.0)
        threshold = Gaussian.from_mean_and_variance(0.0, threshold_and_noise_variance)
        buckets = feature_set.feature_buckets
        return cls(
            weight_means={b: posteriors.weight_means.get(b, unit) for b in buckets},
            weight_precisions={b: posteriors.weight_precisions.get(b, precision) for b in buckets},
            thresholds={u: posteriors.thresholds.get(u, threshold) for u in user_names},
            noise_variance=threshold_and_noise_variance,
        )


@dataclass
class CommunityPosteriors(CommunityVariables):
    def _shared(self) -> list[tuple[FeatureBucket, Gaussian, Gamma]]:
        return [
            (b, g, self.weight_precisions[b])
            for b, g in self.weight_means.items()
            if b.is_shared and b in self.weight_precisions
        ]

    @property
    def shared_means_means(self) -> dict[str, float]:
        return {str(b): g.mean for b, g in self.weight_means.items() if b.is_shared}

    @property
    def shared_mean_and_standard_deviation_means(self) -> list[WeightSummary]:
        return [_summary(b, g.mean, math.sqrt(1.0 / p.mean)) for b, g, p in self._shared()]

    @property
    def shared_mean_and_precision_means(self) -> list[WeightSummary]:
        return [_summary(b, g.mean, p.mean) for b, g, p in self._shared()]

    @property
    def shared_precision_means(self) -> dict[str, float]:
        return {str(b): p.mean for b, p in self.weight_precisions.items() if b.is_shared}

    @property
    def shared_variance_means(self) -> dict[str, float]:
        return {name: 1.0 / mean for name, mean in self.shared_precision_means.items()}
