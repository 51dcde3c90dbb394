"""Tests for input z-scoring and output range scaling."""

import numpy as np
import pytest

from physlab.data.normalizer import (
    EPSILON,
    NormalizationStats,
    fit_normalizer,
    inverse_transform,
    inverse_transform_output,
    transform,
    transform_output,
)


@pytest.fixture
def inputs(rng):
    return rng.normal(loc=3.0, scale=2.0, size=(40, 10))


class TestFitNormalizer:
    def test_population_std(self, inputs):
        stats = fit_normalizer(inputs)
        np.testing.assert_allclose(stats.input_mean, inputs.mean(axis=0))
        np.testing.assert_allclose(stats.input_std, inputs.std(axis=0, ddof=0))
        assert not stats.has_output_range

    def test_output_range(self, inputs):
        outputs = np.linspace(2.0, 7.0, len(inputs))
        stats = fit_normalizer(inputs, outputs)
        assert stats.has_output_range
        assert stats.output_min == 2.0
        assert stats.output_max == 7.0

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            fit_normalizer(np.empty((0, 10)))


class TestTransform:
    def test_standardized_columns(self, inputs):
        stats = fit_normalizer(inputs)
        z = transform(inputs, stats)
        np.testing.assert_allclose(z.mean(axis=0), 0.0, atol=1e-10)
        np.testing.assert_allclose(z.std(axis=0), 1.0, atol=1e-6)

    def test_inverse(self, inputs):
        stats = fit_normalizer(inputs)
        np.testing.assert_allclose(inverse_transform(transform(inputs, stats), stats), inputs)

    def test_constant_feature_maps_to_zero(self, inputs):
        inputs = inputs.copy()
        inputs[:, 4] = 2.0
        stats = fit_normalizer(inputs)
        z = transform(inputs, stats)
        assert stats.input_std[4] == 0.0
        assert np.all(np.isfinite(z))
        np.testing.assert_allclose(z[:, 4], 0.0, atol=1e-6)

    def test_single_vector(self, inputs):
        stats = fit_normalizer(inputs)
        assert transform(inputs[0], stats).shape == (10,)

    def test_fixed_stats_for_new_values(self, inputs):
        """Stats do not change when transforming data outside the fit set."""
        stats = fit_normalizer(inputs)
        x = np.full(10, 100.0)
        expected = (x - stats.input_mean) / (stats.input_std + EPSILON)
        np.testing.assert_allclose(transform(x, stats), expected)


class TestOutputScaling:
    def test_range_maps_into_unit_interval(self, inputs):
        outputs = np.linspace(20.0, 80.0, len(inputs))
        stats = fit_normalizer(inputs, outputs)
        scaled = transform_output(outputs, stats)
        assert scaled.min() == pytest.approx(0.0)
        assert scaled.max() == pytest.approx(1.0, abs=1e-6)

    def test_inverse(self, inputs):
        outputs = np.linspace(20.0, 80.0, len(inputs))
        stats = fit_normalizer(inputs, outputs)
        assert float(inverse_transform_output(0.0, stats)) == 20.0
        assert float(inverse_transform_output(1.0, stats)) == 80.0
        assert float(inverse_transform_output(0.5, stats)) == pytest.approx(50.0)

    def test_degenerate_range(self, inputs):
        outputs = np.full(len(inputs), 42.0)
        stats = fit_normalizer(inputs, outputs)
        scaled = transform_output(outputs, stats)
        assert np.all(np.isfinite(scaled))
        np.testing.assert_allclose(scaled, 0.0)
        assert float(inverse_transform_output(0.7, stats)) == 42.0

    def test_requires_range(self, inputs):
        stats = NormalizationStats(input_mean=np.zeros(10), input_std=np.ones(10))
        with pytest.raises(ValueError):
            transform_output(1.0, stats)
        with pytest.raises(ValueError):
            inverse_transform_output(1.0, stats)
