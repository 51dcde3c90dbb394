"""Tests for the pendulum ground-truth generator."""
from __future__ import annotations

import math

import numpy as np
import pytest

from physlab.experiments.pendulum import (
    PENDULUM_CATALOG,
    PendulumExperiment,
    damping_factor,
    ideal_period,
    large_angle_factor,
    release_angle_factor,
    stiffness_factor,
)


class TestIdealPeriod:
    def test_reference_temperature(self):
        """No thermal correction at 20 C: T = 2*pi*sqrt(1/9.81)."""
        period = ideal_period(1.0, 9.81, 20)
        assert period == pytest.approx(2 * math.pi * math.sqrt(1 / 9.81), rel=1e-12)
        assert period == pytest.approx(2.0061, abs=1e-4)

    def test_deterministic(self):
        assert ideal_period(2.3, 7.1, 55.0) == ideal_period(2.3, 7.1, 55.0)

    def test_thermal_expansion_lengthens_period(self):
        assert ideal_period(1.0, 9.81, 80) > ideal_period(1.0, 9.81, 20)
        assert ideal_period(1.0, 9.81, -40) < ideal_period(1.0, 9.81, 20)

    def test_thermal_expansion_value(self):
        expected = 2 * math.pi * math.sqrt(1.0 * (1 + 1.2e-5 * 30) / 9.81)
        assert ideal_period(1.0, 9.81, 50) == pytest.approx(expected, rel=1e-12)

    def test_scales_with_sqrt_length(self):
        ratio = ideal_period(4.0, 9.81, 20) / ideal_period(1.0, 9.81, 20)
        assert ratio == pytest.approx(2.0)

    @pytest.mark.parametrize("length,gravity", [(0.0, 9.81), (-1.0, 9.81), (1.0, 0.0)])
    def test_invalid_domain(self, length, gravity):
        with pytest.raises(ValueError):
            ideal_period(length, gravity, 20)


class TestCorrectionFactors:
    def test_large_angle_inactive_below_threshold(self):
        # 11 degrees = 0.192 rad, below the 0.2 rad threshold
        assert large_angle_factor(11.0) == 1.0
        assert large_angle_factor(11.4) == 1.0

    def test_large_angle_active_above_threshold(self):
        theta = math.radians(11.5)
        expected = 1 + theta**2 / 16 + 11 * theta**4 / 3072
        assert large_angle_factor(11.5) == pytest.approx(expected)
        assert large_angle_factor(11.5) > 1.0

    def test_large_angle_grows_with_amplitude(self):
        assert large_angle_factor(80) > large_angle_factor(40) > large_angle_factor(20)

    def test_damping(self):
        assert damping_factor(0.0, 5.0) == 1.0
        assert damping_factor(0.5, 2.0) == pytest.approx(1.01)

    def test_stiffness(self):
        assert stiffness_factor(10000) == 1.0
        assert stiffness_factor(1000) == pytest.approx(0.91)
        assert stiffness_factor(10) == pytest.approx(1 - 9990 / 100000)

    def test_release_angle(self):
        # 0.3 rad is about 17.19 degrees
        assert release_angle_factor(15) == 1.0
        r = math.radians(45)
        assert release_angle_factor(45) == pytest.approx(1 + 0.05 * r)


class TestRealisticPeriod:
    def test_noiseless_equals_ideal_times_factors(self, pendulum):
        params = {
            "length": 2.0, "gravity": 9.81, "temperature": 30.0, "amplitude": 40.0,
            "mass": 1.0, "airResistance": 0.3, "mediumDensity": 2.0,
            "releaseAngle": 50.0, "stringStiffness": 4000, "oscillationCount": 5,
        }
        ideal = ideal_period(2.0, 9.81, 30.0)
        product = (
            large_angle_factor(40.0)
            * damping_factor(0.3, 2.0)
            * stiffness_factor(4000)
            * release_angle_factor(50.0)
        )
        value = pendulum.realistic_output(params, noise_scale=0.0)
        assert value == pytest.approx(ideal * product, rel=1e-12)

    def test_correction_order_and_names(self, pendulum):
        corrections = pendulum.corrections(pendulum.full_params())
        assert [c.name for c in corrections] == [
            "large_angle", "damping", "string_stiffness", "release_angle",
        ]
        assert not any(c.additive for c in corrections)

    def test_mass_and_oscillations_do_not_affect_label(self, pendulum):
        a = pendulum.realistic_output({"mass": 0.1, "oscillationCount": 1}, noise_scale=0.0)
        b = pendulum.realistic_output({"mass": 9.0, "oscillationCount": 40}, noise_scale=0.0)
        assert a == b

    def test_noise_is_bounded(self, pendulum, rng):
        clean = pendulum.realistic_output(noise_scale=0.0)
        noisy = np.array([pendulum.realistic_output(rng=rng) for _ in range(200)])
        assert np.all(np.abs(noisy / clean - 1) <= 0.01 + 1e-12)
        assert noisy.std() > 0

    def test_noise_reproducible_with_seed(self, pendulum):
        a = pendulum.realistic_output(rng=np.random.default_rng(7))
        b = pendulum.realistic_output(rng=np.random.default_rng(7))
        assert a == b

    def test_period_positive_over_catalog_range(self, pendulum, rng):
        for _ in range(100):
            params = PENDULUM_CATALOG.sample_uniform(rng)
            assert pendulum.realistic_output(params, rng=rng) > 0

    def test_missing_params_use_defaults(self, pendulum):
        assert pendulum.realistic_output({}, noise_scale=0.0) == pytest.approx(
            pendulum.realistic_output(PENDULUM_CATALOG.defaults(), noise_scale=0.0)
        )


class TestPendulumExperiment:
    def test_catalog_formula_keys(self):
        assert PENDULUM_CATALOG.formula_keys == ("length", "gravity", "temperature")

    def test_default_policy(self):
        config = PendulumExperiment.default_config()
        assert config.min_samples == 5
        assert config.training.early_stopping is None
        assert config.training.l2_weight == 0.0
        assert config.training.output_activation == "linear"
        assert not config.training.normalize_outputs

    def test_comparison_details_frequency(self, pendulum):
        details = pendulum.comparison_details(2.0, pendulum.full_params())
        assert details["frequency"] == pytest.approx(0.5)
        formula = pendulum.ideal_output(pendulum.full_params())
        assert details["formula_frequency"] == pytest.approx(1 / formula)
