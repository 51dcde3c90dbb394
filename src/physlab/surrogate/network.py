"""Feed-forward regression network for the ten experiment inputs."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import equinox as eqx
import jax
import jax.numpy as jnp

from physlab.utils.config import ArchitectureConfig


def _init_linear(
    in_size: int, out_size: int, initializer: Callable, *, key: jax.Array
) -> eqx.nn.Linear:
    """Linear layer with `initializer` weights and zero bias."""
    wkey, lkey = jax.random.split(key)
    linear = eqx.nn.Linear(in_size, out_size, key=lkey)
    # Initializers expect (fan_in, fan_out); equinox stores (out, in)
    weight = initializer(wkey, (in_size, out_size)).T
    return eqx.tree_at(lambda l: (l.weight, l.bias), linear, (weight, jnp.zeros(out_size)))


class RegressionMLP(eqx.Module):
    """ReLU MLP with a single output unit.

    Hidden layers use He-normal weights. Dropout follows each hidden layer
    (rate 0 disables it) and is only active when a PRNG key is passed.
    """

    hidden: list
    dropouts: list
    head: eqx.nn.Linear
    output_activation: str = eqx.field(static=True)
    n_regularized: int = eqx.field(static=True)

    def __init__(
        self,
        in_size: int,
        hidden_sizes: Sequence[int],
        dropout_rates: Sequence[float] = (),
        n_regularized: int = 0,
        output_activation: str = "linear",
        *,
        key: jax.Array,
    ) -> None:
        hidden = []
        dropouts = []
        size = in_size
        for i, width in enumerate(hidden_sizes):
            key, subkey = jax.random.split(key)
            hidden.append(_init_linear(size, width, jax.nn.initializers.he_normal(), key=subkey))
            rate = dropout_rates[i] if i < len(dropout_rates) else 0.0
            dropouts.append(eqx.nn.Dropout(p=rate))
            size = width
        key, subkey = jax.random.split(key)
        self.head = _init_linear(size, 1, jax.nn.initializers.glorot_uniform(), key=subkey)
        self.hidden = hidden
        self.dropouts = dropouts
        self.output_activation = output_activation
        self.n_regularized = n_regularized

    @classmethod
    def from_config(
        cls,
        arch: ArchitectureConfig,
        in_size: int = 10,
        output_activation: str = "linear",
        *,
        key: jax.Array,
    ) -> RegressionMLP:
        return cls(
            in_size=in_size,
            hidden_sizes=arch.hidden_sizes,
            dropout_rates=arch.dropout_rates,
            n_regularized=arch.n_regularized,
            output_activation=output_activation,
            key=key,
        )

    def __call__(self, x: jax.Array, *, key: jax.Array | None = None) -> jax.Array:
        """Map one normalized input vector to a scalar prediction."""
        inference = key is None
        keys = [None] * len(self.hidden) if inference else jax.random.split(key, len(self.hidden))
        for layer, dropout, k in zip(self.hidden, self.dropouts, keys):
            x = jax.nn.relu(layer(x))
            x = dropout(x, key=k, inference=inference)
        out = self.head(x)[0]
        if self.output_activation == "sigmoid":
            out = jax.nn.sigmoid(out)
        return out

    def l2_penalty(self) -> jax.Array:
        """Sum of squared kernel weights of the first `n_regularized` hidden layers."""
        penalty = jnp.float32(0.0)
        for layer in self.hidden[: self.n_regularized]:
            penalty += jnp.sum(layer.weight**2)
        return penalty
