"""
Tests for kernel density estimation.

The estimate at x is mean_i K((x - s_i) / h) / h. It must be non-negative,
integrate to one, and with the rectangular kernel reproduce the normalized
histogram at bin midpoints when the bandwidth equals the bin width.
"""

import math

import numpy as np
import pytest

from conftest import DENSITY_TOL, INTEGRAL_TOL, NORMAL_RTOL, STRICT_RTOL
from distviz import (
    BinSpec,
    InvalidConfiguration,
    InvalidInput,
    compute_histogram,
    compute_kde,
    normalized_histogram,
    scott_bandwidth,
    silverman_bandwidth,
    trapezoid,
)
from distviz.datasets import select_samples
from distviz.estimators import KERNELS


def _phi(u):
    return math.exp(-u * u / 2) / math.sqrt(2 * math.pi)


class TestGaussianKDE:

    def test_concrete_scenario(self):
        kde = compute_kde([10, 12, 14], bandwidth=1)
        expected = (_phi(2) + _phi(0) + _phi(-2)) / 3
        assert kde(12) == pytest.approx(expected, rel=STRICT_RTOL)
        assert kde(12) == pytest.approx(0.169, abs=DENSITY_TOL)

    def test_scalar_and_array_queries(self):
        kde = compute_kde([0.0, 1.0], bandwidth=0.5)
        assert isinstance(kde(0.3), float)
        values = kde(np.array([[0.0, 0.5], [1.0, 2.0]]))
        assert values.shape == (2, 2)
        assert values[0, 0] == pytest.approx(kde(0.0))

    def test_matches_scipy_gaussian_kde(self, cars):
        stats = pytest.importorskip("scipy.stats")
        mpg = select_samples(cars, "mpg")
        kde = compute_kde(mpg, bandwidth=2.5)
        reference = stats.gaussian_kde(mpg, bw_method=2.5 / mpg.std(ddof=1))
        xs = np.linspace(5, 40, 50)
        np.testing.assert_allclose(kde(xs), reference(xs), rtol=NORMAL_RTOL)

    def test_symmetric_samples_give_symmetric_density(self):
        kde = compute_kde([-2.0, -1.0, 1.0, 2.0], bandwidth=0.8)
        xs = np.linspace(0.1, 4, 20)
        np.testing.assert_allclose(kde(xs), kde(-xs), rtol=STRICT_RTOL)


class TestDensityInvariants:

    @pytest.mark.parametrize("kernel", sorted(KERNELS))
    def test_integrates_to_one(self, kernel, rng):
        samples = rng.normal(0, 1, size=100)
        kde = compute_kde(samples, kernel=kernel, bandwidth=0.4)
        xs, ys = kde.evaluate_grid(*kde.default_range(cut=6), resolution=4000)
        assert trapezoid(ys, xs) == pytest.approx(1.0, abs=INTEGRAL_TOL)

    @pytest.mark.parametrize("kernel", sorted(KERNELS))
    def test_non_negative(self, kernel, rng):
        kde = compute_kde(rng.uniform(0, 5, size=40), kernel=kernel)
        _, ys = kde.evaluate_grid(-10, 15, resolution=500)
        assert np.all(ys >= 0)

    def test_default_bandwidth_integrates_to_one(self, cars):
        kde = compute_kde(select_samples(cars, "mpg"))
        xs, ys = kde.evaluate_grid(resolution=1000)
        assert trapezoid(ys, xs) == pytest.approx(1.0, abs=INTEGRAL_TOL)


class TestRectangularKernelMatchesHistogram:

    def test_scenario_midpoints(self):
        samples = [1, 2, 2, 3, 5, 7, 8, 9.5]
        bins = compute_histogram(samples, BinSpec.from_width(2, 0, 10))
        kde = compute_kde(samples, kernel="rectangular", bandwidth=2)
        midpoints = np.array([b.midpoint for b in bins])
        np.testing.assert_allclose(kde(midpoints), normalized_histogram(bins, len(samples)), rtol=STRICT_RTOL)

    def test_random_samples(self, rng):
        samples = rng.uniform(-4.9, 4.9, size=250)
        bins = compute_histogram(samples, BinSpec.from_width(0.5, -5, 5))
        kde = compute_kde(samples, kernel="boxcar", bandwidth=0.5)
        midpoints = np.array([b.midpoint for b in bins])
        np.testing.assert_allclose(kde(midpoints), normalized_histogram(bins, samples.size), rtol=STRICT_RTOL)

    def test_samples_on_interior_edges(self):
        # quarter widths keep every edge and midpoint exact in floating point
        samples = [0.25, 0.5, 0.5, 0.75, 1.25, 1.5, 1.9]
        bins = compute_histogram(samples, BinSpec.from_width(0.25, 0, 2))
        kde = compute_kde(samples, kernel="rectangular", bandwidth=0.25)
        midpoints = np.array([b.midpoint for b in bins])
        np.testing.assert_allclose(kde(midpoints), normalized_histogram(bins, len(samples)), rtol=STRICT_RTOL)
        assert [b.count for b in bins] == [0, 1, 2, 1, 0, 1, 1, 1]


class TestBandwidth:

    def test_silverman_rule(self, cars):
        mpg = select_samples(cars, "mpg")
        q75, q25 = np.percentile(mpg, [75, 25])
        expected = 0.9 * min(mpg.std(ddof=1), (q75 - q25) / 1.349) * len(mpg) ** (-0.2)
        assert silverman_bandwidth(mpg) == pytest.approx(expected, rel=STRICT_RTOL)
        assert compute_kde(mpg).bandwidth == pytest.approx(expected, rel=STRICT_RTOL)

    def test_scott_rule_by_name(self, cars):
        mpg = select_samples(cars, "mpg")
        assert compute_kde(mpg, bandwidth="scott").bandwidth == pytest.approx(scott_bandwidth(mpg))

    def test_explicit_bandwidth_overrides_rule(self):
        assert compute_kde([1.0, 2.0, 3.0], bandwidth=0.25).bandwidth == 0.25

    def test_constant_sample_gets_positive_bandwidth(self):
        kde = compute_kde([4.0, 4.0, 4.0])
        assert kde.bandwidth > 0
        assert kde(4.0) > 0

    def test_single_sample(self):
        kde = compute_kde([3.0])
        assert kde.bandwidth > 0
        xs, ys = kde.evaluate_grid(resolution=500)
        assert trapezoid(ys, xs) == pytest.approx(1.0, abs=INTEGRAL_TOL)


class TestValidation:

    def test_empty_samples_rejected(self):
        with pytest.raises(InvalidInput):
            compute_kde([])

    @pytest.mark.parametrize("bandwidth", [0, -0.5, float("inf")])
    def test_bad_bandwidth_rejected(self, bandwidth):
        with pytest.raises(InvalidConfiguration):
            compute_kde([1.0, 2.0], bandwidth=bandwidth)

    def test_unknown_bandwidth_rule_rejected(self):
        with pytest.raises(InvalidConfiguration):
            compute_kde([1.0, 2.0], bandwidth="guess")

    def test_unknown_kernel_rejected(self):
        with pytest.raises(InvalidConfiguration):
            compute_kde([1.0, 2.0], kernel="triangle")

    def test_bad_resolution_rejected(self):
        kde = compute_kde([1.0, 2.0])
        with pytest.raises(InvalidInput):
            kde.evaluate_grid(0, 1, resolution=1)

    def test_empty_range_rejected(self):
        kde = compute_kde([1.0, 2.0])
        with pytest.raises(InvalidConfiguration):
            kde.evaluate_grid(3, 3)

    def test_samples_are_read_only(self):
        kde = compute_kde([1.0, 2.0])
        with pytest.raises(ValueError):
            kde.samples[0] = 5.0

    def test_trapezoid_shape_mismatch(self):
        with pytest.raises(InvalidInput):
            trapezoid([1.0, 2.0], [0.0])
