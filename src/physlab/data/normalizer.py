"""Z-score input normalization and 0-1 output rescaling."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

EPSILON = 1e-7


@dataclass(frozen=True)
class NormalizationStats:
    """Statistics fixed at the start of a training run.

    `input_std` is the population standard deviation; EPSILON is added
    wherever it is divided by, so constant features map to 0.
    """

    input_mean: np.ndarray
    input_std: np.ndarray
    output_min: float | None = None
    output_max: float | None = None

    @property
    def has_output_range(self) -> bool:
        return self.output_min is not None and self.output_max is not None


def fit_normalizer(
    inputs: np.ndarray, outputs: np.ndarray | None = None
) -> NormalizationStats:
    """Compute per-feature mean/std, and the output range if outputs are given.

    Args:
        inputs: Array of shape (n_samples, n_features).
        outputs: Optional array of shape (n_samples,).
    """
    inputs = np.asarray(inputs, dtype=np.float64)
    if inputs.ndim != 2 or inputs.shape[0] == 0:
        raise ValueError(f"Expected a non-empty 2D input array, got shape {inputs.shape}")

    mean = inputs.mean(axis=0)
    std = np.sqrt(np.mean((inputs - mean) ** 2, axis=0))

    if outputs is None:
        return NormalizationStats(input_mean=mean, input_std=std)

    outputs = np.asarray(outputs, dtype=np.float64)
    return NormalizationStats(
        input_mean=mean,
        input_std=std,
        output_min=float(outputs.min()),
        output_max=float(outputs.max()),
    )


def transform(x: np.ndarray, stats: NormalizationStats) -> np.ndarray:
    """(x - mean) / (std + eps), for a single vector or a batch of rows."""
    return (np.asarray(x, dtype=np.float64) - stats.input_mean) / (stats.input_std + EPSILON)


def inverse_transform(z: np.ndarray, stats: NormalizationStats) -> np.ndarray:
    return np.asarray(z, dtype=np.float64) * (stats.input_std + EPSILON) + stats.input_mean


def _require_range(stats: NormalizationStats) -> tuple[float, float]:
    if not stats.has_output_range:
        raise ValueError("Normalization stats carry no output range")
    return stats.output_min, stats.output_max


def transform_output(y: np.ndarray | float, stats: NormalizationStats) -> np.ndarray:
    """Rescale outputs to [0, 1] using the fitted range."""
    lo, hi = _require_range(stats)
    return (np.asarray(y, dtype=np.float64) - lo) / (hi - lo + EPSILON)


def inverse_transform_output(y: np.ndarray | float, stats: NormalizationStats) -> np.ndarray:
    """Map a [0, 1] network output back to the original scale."""
    lo, hi = _require_range(stats)
    return np.asarray(y, dtype=np.float64) * (hi - lo) + lo
