"""Ordered parameter catalog shared by the generator, normalizer and predictor."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence

import numpy as np

from physlab.types.experiment import ParameterDescriptor

N_PARAMETERS = 10


class ParameterCatalog:
    """Fixed, ordered set of the ten inputs of one experiment.

    Vectors built from the catalog are positional: index i always holds the
    value of the i-th descriptor, so training and inference stay aligned.
    """

    def __init__(self, descriptors: Sequence[ParameterDescriptor]) -> None:
        descriptors = tuple(descriptors)
        if len(descriptors) != N_PARAMETERS:
            raise ValueError(
                f"Catalog needs exactly {N_PARAMETERS} parameters, got {len(descriptors)}"
            )
        keys = [d.key for d in descriptors]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate parameter keys in catalog: {keys}")
        self._descriptors = descriptors
        self._index = {d.key: i for i, d in enumerate(descriptors)}

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[ParameterDescriptor]:
        return iter(self._descriptors)

    def __getitem__(self, key: str) -> ParameterDescriptor:
        return self._descriptors[self._index[key]]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(d.key for d in self._descriptors)

    @property
    def formula_keys(self) -> tuple[str, ...]:
        return tuple(d.key for d in self._descriptors if d.formula)

    def defaults(self) -> dict[str, float]:
        return {d.key: d.default for d in self._descriptors}

    def vector_from(
        self,
        params: Mapping[str, float] | Sequence[float] | None = None,
        fill_defaults: bool = True,
    ) -> np.ndarray:
        """Arrange raw parameter values into a catalog-ordered vector.

        Args:
            params: Mapping of key -> value, or a sequence already in catalog order.
            fill_defaults: Substitute descriptor defaults for missing keys.
                When False, a missing key raises ValueError.

        Returns:
            Float64 array of shape (10,).
        """
        if params is None:
            params = {}

        if not isinstance(params, Mapping):
            values = np.asarray(params, dtype=np.float64)
            if values.shape != (N_PARAMETERS,):
                raise ValueError(
                    f"Expected {N_PARAMETERS} ordered values, got shape {values.shape}"
                )
            return values

        unknown = sorted(set(params) - set(self._index))
        if unknown:
            raise ValueError(f"Unknown parameters: {unknown}")

        values = np.empty(N_PARAMETERS, dtype=np.float64)
        for i, d in enumerate(self._descriptors):
            if d.key in params:
                values[i] = float(params[d.key])
            elif fill_defaults:
                values[i] = d.default
            else:
                raise ValueError(f"Missing parameter: {d.key}")
        return values

    def as_mapping(self, vector: Sequence[float]) -> dict[str, float]:
        if len(vector) != N_PARAMETERS:
            raise ValueError(f"Expected {N_PARAMETERS} values, got {len(vector)}")
        return {d.key: float(v) for d, v in zip(self._descriptors, vector)}

    def clip(self, params: Mapping[str, float]) -> dict[str, float]:
        """Clamp each value into its descriptor's [min, max] range."""
        unknown = sorted(set(params) - set(self._index))
        if unknown:
            raise ValueError(f"Unknown parameters: {unknown}")
        return {
            key: float(np.clip(value, self[key].min, self[key].max))
            for key, value in params.items()
        }

    def sample_uniform(self, rng: np.random.Generator) -> dict[str, float]:
        """Draw random slider positions snapped to each descriptor's step."""
        sampled = {}
        for d in self._descriptors:
            n_steps = int(np.floor((d.max - d.min) / d.step + 1e-9))
            value = d.min + rng.integers(0, n_steps + 1) * d.step
            sampled[d.key] = float(np.clip(round(value, 10), d.min, d.max))
        return sampled
