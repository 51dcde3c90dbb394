"""Iron/sand/salt separation efficiency experiment.

Formula baseline: four sub-scores of at most 25 percentage points each
(magnetic, dissolution, filtration, evaporation), each a saturating ratio
against a fixed optimum.

Real-life corrections (applied in this order):
- particle size: multiplicative, optimum at 100 um
- stirring speed: additive bonus, optimum 200-400 RPM
- temperature: additive, relative to 20 C
- filter pore size: multiplicative, optimum 20-150 um
- impurity: multiplicative
- separation time: multiplicative, saturates at 60 s
- manual skill: multiplicative
"""
from __future__ import annotations

from collections.abc import Mapping

from physlab.experiments.base import Correction, Experiment
from physlab.experiments.catalog import ParameterCatalog
from physlab.types.experiment import Architecture, ParameterDescriptor
from physlab.utils.config import (
    ArchitectureConfig,
    EarlyStoppingConfig,
    ExperimentConfig,
    TrainingPolicy,
)

SUBSCORE_CAP = 25.0
MAGNETIC_SATURATION = 2.0  # T
OPTIMAL_SOLVENT_VOLUME = 30.0  # mL
OPTIMAL_EVAPORATION_RATE = 12.5  # mL/min
FILTRATION_SCORE = 25.0
NOISE_AMPLITUDE = 4.0  # percentage points, peak to peak
MAX_EFFICIENCY = 100.0

SEPARATION_CATALOG = ParameterCatalog([
    ParameterDescriptor(key="magnetic", name="Magnetic Strength (T)", min=0.1, max=2,
                        step=0.01, default=0.5, formula=True),
    ParameterDescriptor(key="solvent", name="Solvent Volume (mL)", min=10, max=500,
                        step=1, default=100, formula=True),
    ParameterDescriptor(key="evaporation", name="Evaporation Rate (mL/min)", min=1,
                        max=20, step=0.1, default=5, formula=True),
    ParameterDescriptor(key="particlesize", name="Particle Size (µm)", min=10, max=1000,
                        step=10, default=100),
    ParameterDescriptor(key="stirring", name="Stirring Speed (RPM)", min=0, max=1000,
                        step=10, default=300),
    ParameterDescriptor(key="temperature", name="Temperature (°C)", min=0, max=100,
                        step=1, default=25),
    ParameterDescriptor(key="filterpore", name="Filter Pore Size (µm)", min=5, max=500,
                        step=5, default=50),
    ParameterDescriptor(key="impurity", name="Impurity (%)", min=0, max=50, step=1,
                        default=5),
    ParameterDescriptor(key="septime", name="Separation Time (s)", min=10, max=300,
                        step=5, default=60),
    ParameterDescriptor(key="manual", name="Manual Efficiency (%)", min=50, max=100,
                        step=1, default=90),
])


def efficiency_breakdown(magnetic: float, solvent: float, evaporation: float) -> dict[str, float]:
    """The four formula sub-scores, in percentage points."""
    return {
        "magnetic": min(SUBSCORE_CAP, magnetic / MAGNETIC_SATURATION * SUBSCORE_CAP),
        "dissolution": min(SUBSCORE_CAP, SUBSCORE_CAP * min(1.0, solvent / OPTIMAL_SOLVENT_VOLUME)),
        "filtration": FILTRATION_SCORE,
        "evaporation": min(
            SUBSCORE_CAP, SUBSCORE_CAP * min(1.0, evaporation / OPTIMAL_EVAPORATION_RATE)
        ),
    }


def ideal_efficiency(magnetic: float, solvent: float, evaporation: float) -> float:
    """Sum of the four capped sub-scores, in [0, 100] for in-range inputs."""
    return sum(efficiency_breakdown(magnetic, solvent, evaporation).values())


def particle_size_factor(particle_size: float) -> float:
    deviation = abs(particle_size - 100) / 100
    return max(0.7, 1 - deviation * 0.15)


def stirring_bonus(rpm: float) -> float:
    if 200 <= rpm <= 400:
        bonus = 5.0
    elif rpm > 400:
        bonus = 3 - (rpm - 400) / 600 * 3
    else:
        bonus = rpm / 200 * 5
    return max(0.0, bonus)


def temperature_bonus(temperature: float) -> float:
    """Up to +8 points at 100 C; negative below 20 C."""
    return (temperature - 20) / 80 * 8


def filter_pore_factor(pore_size: float) -> float:
    if pore_size < 20:
        factor = 0.85 - (20 - pore_size) / 20 * 0.15
    elif pore_size > 150:
        factor = 1 - (pore_size - 150) / 350 * 0.3
    else:
        factor = 1.0
    return max(0.7, factor)


def purity_factor(impurity: float) -> float:
    return max(0.5, (100 - impurity) / 100)


def time_factor(separation_time: float) -> float:
    return max(0.5, min(1.0, separation_time / 60))


def manual_factor(manual: float) -> float:
    return manual / 100


class SeparationExperiment(Experiment):
    """Separation efficiency: formula vs. learned model."""

    name = "separation"
    output_unit = "%"
    catalog = SEPARATION_CATALOG

    @classmethod
    def default_config(cls) -> ExperimentConfig:
        return ExperimentConfig(
            name=cls.name,
            min_samples=10,
            training=TrainingPolicy(
                learning_rate=1e-3,
                n_epochs=500,
                epochs_per_sample=20,
                min_epoch_budget=200,
                max_batch_size=8,
                batch_fraction=0.4,
                validation_split=0.2,
                l2_weight=1e-3,
                normalize_outputs=True,
                output_activation="sigmoid",
                early_stopping=EarlyStoppingConfig(patience=50, min_epochs=100),
            ),
            architectures={
                Architecture.SIMPLE: ArchitectureConfig(
                    hidden_sizes=(16, 8), dropout_rates=(0.1,), n_regularized=2
                ),
                Architecture.DEEP: ArchitectureConfig(
                    hidden_sizes=(32, 24, 16, 8), dropout_rates=(0.15, 0.1), n_regularized=3
                ),
            },
        )

    def ideal_output(self, params: Mapping[str, float]) -> float:
        return ideal_efficiency(params["magnetic"], params["solvent"], params["evaporation"])

    def corrections(self, params: Mapping[str, float]) -> list[Correction]:
        return [
            Correction("particle_size", particle_size_factor(params["particlesize"])),
            Correction("stirring", stirring_bonus(params["stirring"]), additive=True),
            Correction("temperature", temperature_bonus(params["temperature"]), additive=True),
            Correction("filter_pore", filter_pore_factor(params["filterpore"])),
            Correction("impurity", purity_factor(params["impurity"])),
            Correction("separation_time", time_factor(params["septime"])),
            Correction("manual", manual_factor(params["manual"])),
        ]

    def cap_before_noise(self, value: float) -> float:
        return min(MAX_EFFICIENCY, value)

    def add_noise(self, value: float, u: float, noise_scale: float) -> float:
        return value + (u - 0.5) * NOISE_AMPLITUDE * noise_scale

    def clamp(self, value: float) -> float:
        return min(MAX_EFFICIENCY, max(0.0, value))

    def comparison_details(
        self, predicted: float, params: Mapping[str, float]
    ) -> dict[str, float]:
        params = self.full_params(params)
        breakdown = efficiency_breakdown(
            params["magnetic"], params["solvent"], params["evaporation"]
        )
        return {f"formula_{key}": value for key, value in breakdown.items()}
