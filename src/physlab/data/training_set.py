"""Append-only collection of labelled samples."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from physlab.types.experiment import Sample


class TrainingSet:
    """Ordered samples in collection order. There is no removal operation."""

    def __init__(self) -> None:
        self._samples: list[Sample] = []

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> Sample:
        return self._samples[index]

    def append(self, inputs: np.ndarray, output: float) -> Sample:
        sample = Sample(inputs=tuple(float(x) for x in inputs), output=float(output))
        self._samples.append(sample)
        return sample

    def inputs_array(self) -> np.ndarray:
        """Copy of all inputs, shape (n_samples, n_features)."""
        if not self._samples:
            return np.empty((0, 0), dtype=np.float64)
        return np.array([s.inputs for s in self._samples], dtype=np.float64)

    def outputs_array(self) -> np.ndarray:
        """Copy of all outputs, shape (n_samples,)."""
        return np.array([s.output for s in self._samples], dtype=np.float64)
