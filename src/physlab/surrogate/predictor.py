"""Inference with a trained network and its attached normalization stats."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import jax
import jax.numpy as jnp
import numpy as np

from physlab.data.normalizer import NormalizationStats, inverse_transform_output, transform
from physlab.experiments.catalog import ParameterCatalog
from physlab.surrogate.network import RegressionMLP
from physlab.types.experiment import Architecture


@dataclass(frozen=True)
class TrainedModel:
    """A fitted network together with the statistics it was trained under."""

    network: RegressionMLP
    stats: NormalizationStats
    architecture: Architecture
    n_samples: int

    def predict_normalized(self, z: np.ndarray) -> np.ndarray:
        """Run inference (no dropout) on already normalized rows."""
        z = jnp.asarray(np.atleast_2d(z), dtype=jnp.float32)
        return np.asarray(jax.vmap(self.network)(z), dtype=np.float64)


def predict(
    model: TrainedModel,
    catalog: ParameterCatalog,
    raw_inputs: Mapping[str, float] | Sequence[float],
) -> float:
    """Predict the experiment output for one full set of raw parameters.

    Every catalog key must be present; the values are reordered into catalog
    order, normalized with the model's statistics, and the network output is
    mapped back to the original scale when the model was trained on a 0-1
    output range.
    """
    x = catalog.vector_from(raw_inputs, fill_defaults=False)
    z = transform(x, model.stats)
    y = model.predict_normalized(z)[0]
    if model.stats.has_output_range:
        y = inverse_transform_output(y, model.stats)
    return float(y)
