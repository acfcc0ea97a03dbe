"""Tests for inbox_reply.dataset.variables."""

from __future__ import annotations

import math

import pytest

from inbox_reply.dataset.variables import (
    CommunityPosteriors,
    CommunityPriors,
    Gamma,
    Gaussian,
    Posteriors,
    Priors,
    Variables,
    WeightSummary,
)
from inbox_reply.features.base import FeatureBucket, FeatureType
from inbox_reply.features.feature_set import FeatureSet, FeatureSetType

SHARED = FeatureBucket(FeatureType.TO_LINE, 0, "ToLine")
PERSONAL = FeatureBucket(FeatureType.SENDER, 0, "Alice", is_shared=False)


class TestGaussian:
    """Tests for the Gaussian record."""

    def test_from_precision(self) -> None:
        g = Gaussian.from_mean_and_precision(1.0, 4.0)

        assert g.variance == 0.25
        assert g.precision == 4.0
        assert g.standard_deviation == 0.5

    def test_zero_precision_is_flat(self) -> None:
        assert Gaussian.from_mean_and_precision(0.0, 0.0).variance == math.inf

    def test_point_mass_precision(self) -> None:
        assert Gaussian.from_mean_and_variance(2.0, 0.0).precision == math.inf


class TestGamma:
    """Tests for the Gamma record."""

    def test_mean(self) -> None:
        g = Gamma.from_shape_and_scale(2.0, 3.0)

        assert g.mean == 6.0
        assert not g.is_point_mass

    def test_point_mass(self) -> None:
        g = Gamma.point_mass(5.0)

        assert g.is_point_mass
        assert g.mean == 5.0


class TestVariables:
    """Tests for weight reporting."""

    def test_top_weights_per_feature(self) -> None:
        body = {FeatureBucket(FeatureType.BODY_LENGTH, i, str(i)): Gaussian(float(i), 1.0) for i in range(20)}
        variables = Variables(weights={**body, PERSONAL: Gaussian(-0.1, 1.0)})

        top = variables.top_weights

        assert len(top) == 16
        assert PERSONAL in top
        assert {b.index for b in top if b.feature_type is FeatureType.BODY_LENGTH} == set(range(5, 20))

    def test_top_weights_by_absolute_mean(self) -> None:
        body = {FeatureBucket(FeatureType.BODY_LENGTH, i, str(i)): Gaussian(-float(i), 1.0) for i in range(16)}

        top = Variables(weights=body).top_weights

        assert FeatureBucket(FeatureType.BODY_LENGTH, 0, "0") not in top
        assert FeatureBucket(FeatureType.BODY_LENGTH, 15, "15") in top

    def test_as_dict(self) -> None:
        variables = Variables(weights={SHARED: Gaussian(1.0, 2.0)}, threshold=Gaussian(0.5, 1.0))

        assert variables.as_dict() == {"ToLine": Gaussian(1.0, 2.0), "Threshold": Gaussian(0.5, 1.0)}


class TestPriors:
    """Tests for personal priors."""

    def test_generate(self) -> None:
        priors = Priors.generate([SHARED, PERSONAL], weight_variance=2.0, threshold_variance=10.0)

        assert priors.weights == {SHARED: Gaussian(0.0, 2.0), PERSONAL: Gaussian(0.0, 2.0)}
        assert priors.threshold == Gaussian(0.0, 10.0)
        assert priors.noise_variance == 10.0

    def test_from_posteriors(self) -> None:
        posteriors = Posteriors(weights={SHARED: Gaussian(1.5, 0.1)}, threshold=Gaussian(0.2, 0.3))

        priors = Priors.from_posteriors(posteriors, noise_variance=4.0)

        assert priors.weights == {SHARED: Gaussian(1.5, 0.1)}
        assert priors.threshold == Gaussian(0.2, 0.3)
        assert priors.noise_variance == 4.0

    def test_from_posteriors_rekeyed(self) -> None:
        fs = FeatureSet.create(FeatureSetType.SEPARATE)
        to_line, from_manager = fs.feature_buckets
        posteriors = Posteriors(weights={to_line: Gaussian(1.5, 0.1), PERSONAL: Gaussian(3.0, 1.0)})

        priors = Priors.from_posteriors(posteriors, noise_variance=4.0, feature_set=fs)

        assert priors.weights == {to_line: Gaussian(1.5, 0.1), from_manager: Gaussian(0.0, 4.0)}

    def test_from_community_posteriors(self) -> None:
        fs = FeatureSet.create(FeatureSetType.SEPARATE)
        to_line, from_manager = fs.feature_buckets
        community = CommunityPosteriors(
            weight_means={to_line: Gaussian(2.0, 0.5)},
            weight_precisions={to_line: Gamma.from_shape_and_scale(2.0, 2.0)},
        )

        priors = Priors.from_community_posteriors(community, fs, threshold_and_noise_variance=9.0)

        assert priors.weights[to_line] == Gaussian(2.0, 0.25)
        assert priors.weights[from_manager] == Gaussian(0.0, 9.0)
        assert priors.threshold == Gaussian(0.0, 9.0)


class TestPosteriors:
    """Tests for posterior views."""

    def test_means(self) -> None:
        posteriors = Posteriors(weights={SHARED: Gaussian(1.0, 4.0), PERSONAL: Gaussian(-2.0, 1.0)})

        assert posteriors.means == {"ToLine": 1.0, "Sender[Alice]": -2.0}
        assert posteriors.shared_means == {"ToLine": 1.0}
        assert posteriors.means_and_standard_deviations[0] == WeightSummary("ToLine", 1.0, -1.0, 3.0)
        assert posteriors.shared_means_and_standard_deviations == [WeightSummary("ToLine", 1.0, -1.0, 3.0)]


class TestCommunity:
    """Tests for community priors and posteriors."""

    def test_generate(self) -> None:
        precision = Gamma.point_mass(1.0)

        priors = CommunityPriors.generate([SHARED], precision, 5.0, ["ann", "ben"])

        assert priors.weight_means == {SHARED: Gaussian(0.0, 1.0)}
        assert priors.weight_precisions == {SHARED: precision}
        assert priors.thresholds == {"ann": Gaussian(0.0, 5.0), "ben": Gaussian(0.0, 5.0)}
        assert priors.noise_variance == 5.0

    def test_from_posteriors(self) -> None:
        fs = FeatureSet.create(FeatureSetType.SEPARATE)
        to_line, from_manager = fs.feature_buckets
        precision = Gamma.from_shape_and_scale(1.0, 1.0)
        posteriors = CommunityPosteriors(
            weight_means={to_line: Gaussian(0.7, 0.1)},
            weight_precisions={to_line: Gamma.point_mass(3.0)},
            thresholds={"ann": Gaussian(0.4, 0.2)},
        )

        priors = CommunityPriors.from_posteriors(posteriors, fs, precision, 5.0, ["ann", "ben"])

        assert priors.weight_means == {to_line: Gaussian(0.7, 0.1), from_manager: Gaussian(0.0, 1.0)}
        assert priors.weight_precisions[from_manager] is precision
        assert priors.thresholds == {"ann": Gaussian(0.4, 0.2), "ben": Gaussian(0.0, 5.0)}

    def test_posterior_views(self) -> None:
        posteriors = CommunityPosteriors(
            weight_means={SHARED: Gaussian(1.0, 0.1), PERSONAL: Gaussian(5.0, 0.1)},
            weight_precisions={SHARED: Gamma.point_mass(4.0), PERSONAL: Gamma.point_mass(1.0)},
        )

        assert posteriors.shared_means_means == {"ToLine": 1.0}
        assert posteriors.shared_precision_means == {"ToLine": 4.0}
        assert posteriors.shared_variance_means == {"ToLine": 0.25}
        assert posteriors.shared_mean_and_standard_deviation_means == [WeightSummary("ToLine", 1.0, 0.5, 1.5)]
        assert posteriors.shared_mean_and_precision_means == [WeightSummary("ToLine", 1.0, -3.0, 5.0)]
        assert posteriors.means_dict == {"ToLine": Gaussian(1.0, 0.1), "Sender[Alice]": Gaussian(5.0, 0.1)}
        assert posteriors.precision_dict["Sender[Alice]"] == Gamma.point_mass(1.0)

    @pytest.mark.parametrize("shape", [0.5, 2.0])
    def test_gamma_prior_shapes(self, shape: float) -> None:
        priors = CommunityPriors.generate([SHARED], Gamma.from_shape_and_scale(shape, 1.0), 1.0, [])
        assert priors.weight_precisions[SHARED].mean == shape
