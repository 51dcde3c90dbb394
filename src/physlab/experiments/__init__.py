"""Experiment registry."""

from __future__ import annotations

from physlab.experiments.base import Correction, Experiment
from physlab.experiments.catalog import ParameterCatalog
from physlab.experiments.pendulum import PendulumExperiment
from physlab.experiments.separation import SeparationExperiment

EXPERIMENTS: dict[str, type[Experiment]] = {
    PendulumExperiment.name: PendulumExperiment,
    SeparationExperiment.name: SeparationExperiment,
}


def get_experiment_class(name: str) -> type[Experiment]:
    try:
        return EXPERIMENTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown experiment: {name}. Choose from {sorted(EXPERIMENTS)}"
        ) from None


__all__ = [
    "Correction",
    "Experiment",
    "ParameterCatalog",
    "PendulumExperiment",
    "SeparationExperiment",
    "EXPERIMENTS",
    "get_experiment_class",
]
