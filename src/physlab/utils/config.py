"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from physlab.types.experiment import Architecture

# Default config directory relative to package root
_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_CONFIGS_DIR = _PACKAGE_ROOT / "configs"


class ArchitectureConfig(BaseModel):
    """Hidden layer layout of one selectable network."""

    hidden_sizes: tuple[int, ...]
    dropout_rates: tuple[float, ...] = ()
    n_regularized: int = 0

    @model_validator(mode="after")
    def _check_layout(self) -> ArchitectureConfig:
        if len(self.dropout_rates) > len(self.hidden_sizes):
            raise ValueError("More dropout rates than hidden layers")
        if self.n_regularized > len(self.hidden_sizes):
            raise ValueError("More regularized layers than hidden layers")
        return self

    def dropout_after(self, layer: int) -> float:
        """Dropout rate applied after hidden layer `layer` (0 when unset)."""
        if layer < len(self.dropout_rates):
            return self.dropout_rates[layer]
        return 0.0


class EarlyStoppingConfig(BaseModel):
    """Stop once validation loss has not improved for `patience` epochs."""

    patience: int = 50
    min_epochs: int = 100


class TrainingPolicy(BaseModel):
    """Optimizer, batching and epoch budget for one experiment."""

    learning_rate: float = 1e-3
    n_epochs: int = 500
    epochs_per_sample: int | None = None
    min_epoch_budget: int = 0
    max_batch_size: int = 32
    batch_fraction: float = 1.0
    validation_split: float = Field(default=0.2, ge=0.0, lt=1.0)
    l2_weight: float = 0.0
    normalize_outputs: bool = False
    output_activation: Literal["linear", "sigmoid"] = "linear"
    early_stopping: EarlyStoppingConfig | None = None
    display_every: int = 10
    seed: int = 42

    def epoch_budget(self, n_samples: int) -> int:
        if self.epochs_per_sample is None:
            return self.n_epochs
        scaled = n_samples * self.epochs_per_sample
        return min(self.n_epochs, max(self.min_epoch_budget, scaled))

    def batch_size(self, n_samples: int) -> int:
        return max(1, min(self.max_batch_size, int(n_samples * self.batch_fraction)))


def _default_architectures() -> dict[Architecture, ArchitectureConfig]:
    return {
        Architecture.SIMPLE: ArchitectureConfig(hidden_sizes=(16, 8)),
        Architecture.DEEP: ArchitectureConfig(hidden_sizes=(32, 24, 16, 8)),
    }


class ExperimentConfig(BaseModel):
    """Per-experiment data and training defaults."""

    name: str
    min_samples: int = 5
    noise_scale: float = 1.0
    seed: int | None = None
    training: TrainingPolicy = Field(default_factory=TrainingPolicy)
    architectures: dict[Architecture, ArchitectureConfig] = Field(
        default_factory=_default_architectures
    )


class LabConfig(BaseModel):
    """Top-level configuration."""

    output_dir: str = "output"
    log_level: str = "INFO"
    seed: int | None = None


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_update(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = None) -> LabConfig:
    """Load global config from a YAML file.

    Falls back to configs/default.yaml if no path is given.
    """
    if path is None:
        path = _CONFIGS_DIR / "default.yaml"
    path = Path(path)

    if not path.exists():
        return LabConfig()

    with open(path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    return LabConfig(**raw)


def load_experiment_config(name: str, path: str | Path | None = None) -> ExperimentConfig:
    """Load an experiment config, layering YAML overrides on built-in defaults.

    Falls back to configs/experiments/{name}.yaml if no path is given.
    """
    from physlab.experiments import get_experiment_class

    defaults = get_experiment_class(name).default_config()

    if path is None:
        path = _CONFIGS_DIR / "experiments" / f"{name}.yaml"
    path = Path(path)

    if not path.exists():
        return defaults

    with open(path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    merged = _deep_update(defaults.model_dump(mode="json"), raw)
    merged["name"] = name
    return ExperimentConfig(**merged)
