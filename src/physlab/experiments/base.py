"""Abstract base class for experiment ground-truth generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from physlab.experiments.catalog import ParameterCatalog
from physlab.utils.config import ExperimentConfig


@dataclass(frozen=True)
class Correction:
    """One real-life adjustment applied to the formula value."""

    name: str
    value: float
    additive: bool = False

    def apply(self, x: float) -> float:
        return x + self.value if self.additive else x * self.value


class Experiment(ABC):
    """Base class for the synthetic "real measurement" of an experiment.

    Subclasses provide the closed-form baseline, the ordered real-life
    corrections, and how noise and clamping act on the result. The base class
    composes them into the label generator used for training data.
    """

    name: str = ""
    output_unit: str = ""
    catalog: ParameterCatalog

    def __init__(self, config: ExperimentConfig | None = None) -> None:
        self.config = config or self.default_config()

    @classmethod
    @abstractmethod
    def default_config(cls) -> ExperimentConfig:
        """Built-in data and training defaults for this experiment."""

    @abstractmethod
    def ideal_output(self, params: Mapping[str, float]) -> float:
        """Closed-form value from the formula parameters only. Pure."""

    @abstractmethod
    def corrections(self, params: Mapping[str, float]) -> list[Correction]:
        """Ordered real-life corrections for a full parameter mapping."""

    @abstractmethod
    def add_noise(self, value: float, u: float, noise_scale: float) -> float:
        """Perturb `value` using a uniform draw `u` in [0, 1)."""

    @abstractmethod
    def clamp(self, value: float) -> float:
        """Restrict a noisy value to the physically valid range."""

    def cap_before_noise(self, value: float) -> float:
        return value

    def comparison_details(
        self, predicted: float, params: Mapping[str, float]
    ) -> dict[str, float]:
        """Extra quantities shown next to a prediction."""
        return {}

    def full_params(
        self, params: Mapping[str, float] | Sequence[float] | None = None
    ) -> dict[str, float]:
        """Complete mapping with descriptor defaults for anything missing."""
        return self.catalog.as_mapping(self.catalog.vector_from(params))

    def corrected_output(self, params: Mapping[str, float]) -> float:
        """Ideal value with every correction applied in order, before noise."""
        params = self.full_params(params)
        value = self.ideal_output(params)
        for correction in self.corrections(params):
            value = correction.apply(value)
        return self.cap_before_noise(value)

    def realistic_output(
        self,
        params: Mapping[str, float] | Sequence[float] | None = None,
        rng: np.random.Generator | None = None,
        noise_scale: float | None = None,
    ) -> float:
        """Noisy, clamped value standing in for a real measurement.

        Args:
            params: Parameter mapping (missing keys use defaults) or ordered vector.
            rng: Source of the noise draw. A fresh generator is used if None.
            noise_scale: Multiplier on the noise amplitude. Defaults to the
                config value; 0 disables noise.
        """
        params = self.full_params(params)
        value = self.corrected_output(params)

        scale = self.config.noise_scale if noise_scale is None else noise_scale
        if scale:
            if rng is None:
                rng = np.random.default_rng()
            value = self.add_noise(value, float(rng.random()), scale)

        return self.clamp(value)
