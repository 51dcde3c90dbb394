"""Simple pendulum period experiment.

Formula baseline: T = 2*pi*sqrt(L_eff/g), with thermal expansion of the
string L_eff = L*(1 + alpha*(temperature - 20)).

Real-life corrections (multiplicative, applied in this order):
- large-angle series correction for amplitudes above 0.2 rad
- air damping, proportional to air resistance times medium density
- string stiffness
- release angle above 0.3 rad
"""
from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from physlab.experiments.base import Correction, Experiment
from physlab.experiments.catalog import ParameterCatalog
from physlab.types.experiment import ParameterDescriptor
from physlab.utils.config import ExperimentConfig, TrainingPolicy

THERMAL_EXPANSION = 1.2e-5  # per degree C
REFERENCE_TEMPERATURE = 20.0
NOISE_AMPLITUDE = 0.02  # relative, peak to peak

PENDULUM_CATALOG = ParameterCatalog([
    ParameterDescriptor(key="length", name="Length (m)", min=0.1, max=30, step=0.01,
                        default=1.0, formula=True),
    ParameterDescriptor(key="gravity", name="Gravity (m/s²)", min=0.1, max=50, step=0.01,
                        default=9.81, formula=True),
    ParameterDescriptor(key="temperature", name="Temperature (°C)", min=-50, max=100,
                        step=0.1, default=25, formula=True),
    ParameterDescriptor(key="amplitude", name="Amplitude (°)", min=1, max=85, step=0.1,
                        default=11),
    ParameterDescriptor(key="mass", name="Mass (kg)", min=0.01, max=10, step=0.01,
                        default=0.5),
    ParameterDescriptor(key="airResistance", name="Air Resistance", min=0, max=1,
                        step=0.001, default=0.01),
    ParameterDescriptor(key="mediumDensity", name="Medium Density (kg/m³)", min=0.01,
                        max=20, step=0.01, default=1.23),
    ParameterDescriptor(key="releaseAngle", name="Release Angle (°)", min=1, max=89,
                        step=0.1, default=15),
    ParameterDescriptor(key="stringStiffness", name="String Stiffness (N/m)", min=10,
                        max=10000, step=10, default=1000),
    ParameterDescriptor(key="oscillationCount", name="Oscillation Count", min=1, max=50,
                        step=1, default=10),
])


def ideal_period(length: float, gravity: float, temperature: float) -> float:
    """Small-angle period with thermal expansion of the string, in seconds."""
    if length <= 0:
        raise ValueError(f"Length must be positive, got {length}")
    if gravity <= 0:
        raise ValueError(f"Gravity must be positive, got {gravity}")
    effective_length = length * (1 + THERMAL_EXPANSION * (temperature - REFERENCE_TEMPERATURE))
    return float(2 * np.pi * np.sqrt(effective_length / gravity))


def large_angle_factor(amplitude_deg: float) -> float:
    """Series correction 1 + theta^2/16 + 11*theta^4/3072, active above 0.2 rad."""
    theta = np.deg2rad(amplitude_deg)
    if theta <= 0.2:
        return 1.0
    return 1 + theta**2 / 16 + 11 * theta**4 / 3072


def damping_factor(air_resistance: float, medium_density: float) -> float:
    return 1 + air_resistance * medium_density * 0.01


def stiffness_factor(string_stiffness: float) -> float:
    """Stiffer strings shorten the effective length; 10000 N/m is ideal."""
    return 1 - (10000 - string_stiffness) / 100000


def release_angle_factor(release_angle_deg: float) -> float:
    r = np.deg2rad(release_angle_deg)
    if r <= 0.3:
        return 1.0
    return 1 + r * 0.05


class PendulumExperiment(Experiment):
    """Pendulum period: formula vs. learned model."""

    name = "pendulum"
    output_unit = "s"
    catalog = PENDULUM_CATALOG

    @classmethod
    def default_config(cls) -> ExperimentConfig:
        return ExperimentConfig(
            name=cls.name,
            min_samples=5,
            training=TrainingPolicy(
                learning_rate=1e-3,
                n_epochs=500,
                max_batch_size=32,
                batch_fraction=1.0,
                validation_split=0.2,
                output_activation="linear",
            ),
        )

    def ideal_output(self, params: Mapping[str, float]) -> float:
        return float(ideal_period(params["length"], params["gravity"], params["temperature"]))

    def corrections(self, params: Mapping[str, float]) -> list[Correction]:
        return [
            Correction("large_angle", float(large_angle_factor(params["amplitude"]))),
            Correction("damping", damping_factor(params["airResistance"], params["mediumDensity"])),
            Correction("string_stiffness", stiffness_factor(params["stringStiffness"])),
            Correction("release_angle", float(release_angle_factor(params["releaseAngle"]))),
        ]

    def add_noise(self, value: float, u: float, noise_scale: float) -> float:
        return value * (1 + (u - 0.5) * NOISE_AMPLITUDE * noise_scale)

    def clamp(self, value: float) -> float:
        return max(value, float(np.finfo(np.float64).tiny))

    def comparison_details(
        self, predicted: float, params: Mapping[str, float]
    ) -> dict[str, float]:
        formula = self.ideal_output(self.full_params(params))
        details = {"formula_frequency": 1.0 / formula}
        if predicted > 0:
            details["frequency"] = 1.0 / predicted
        return details
