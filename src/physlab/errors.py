"""Exceptions surfaced by an experiment session."""

from __future__ import annotations


class InsufficientSamplesError(ValueError):
    """Training was requested before enough samples were collected."""

    def __init__(self, n_samples: int, min_samples: int) -> None:
        self.n_samples = n_samples
        self.min_samples = min_samples
        super().__init__(
            f"Need at least {min_samples} samples to train, have {n_samples}"
        )


class TrainingInProgressError(RuntimeError):
    """A training run is already active for this session."""


class ModelNotTrainedError(RuntimeError):
    """Prediction was requested before any model was published."""
