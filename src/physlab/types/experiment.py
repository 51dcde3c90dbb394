"""Parameter descriptors, samples, and training event types."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class Architecture(str, Enum):
    SIMPLE = "simple"
    DEEP = "deep"


class ParameterDescriptor(BaseModel):
    """A single slider-controlled experiment input."""

    model_config = {"frozen": True}

    key: str
    name: str
    min: float
    max: float
    step: float
    default: float
    formula: bool = False

    @model_validator(mode="after")
    def _check_range(self) -> ParameterDescriptor:
        if self.min > self.max:
            raise ValueError(f"{self.key}: min {self.min} exceeds max {self.max}")
        if not self.min <= self.default <= self.max:
            raise ValueError(
                f"{self.key}: default {self.default} outside [{self.min}, {self.max}]"
            )
        if self.step <= 0:
            raise ValueError(f"{self.key}: step must be positive, got {self.step}")
        return self


class Sample(BaseModel):
    """One labelled data point. Inputs follow catalog order."""

    model_config = {"frozen": True}

    inputs: tuple[float, ...]
    output: float


class LossRecord(BaseModel):
    """Loss pair recorded at the end of an epoch (1-based)."""

    epoch: int
    loss: float
    val_loss: float


class TrainingProgress(BaseModel):
    """Per-epoch progress event emitted by a training run."""

    epoch: int
    n_epochs: int
    loss: float
    val_loss: float
    display: bool = False

    @property
    def fraction(self) -> float:
        return self.epoch / self.n_epochs if self.n_epochs else 1.0


class TrainingResult(BaseModel):
    """Completion event for a training run."""

    architecture: Architecture
    n_samples: int
    epochs_run: int
    n_epochs: int
    final_loss: float
    final_val_loss: float
    best_val_loss: float
    stopped_early: bool = False


class Comparison(BaseModel):
    """Learned prediction next to the formula baseline."""

    predicted: float
    formula: float
    difference: float
    details: dict[str, float] = Field(default_factory=dict)
