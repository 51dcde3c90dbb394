"""Training loop for the experiment regression networks."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import equinox as eqx
import jax
import jax.numpy as jnp
import numpy as np
import optax

from physlab.data.normalizer import fit_normalizer, transform, transform_output
from physlab.surrogate.network import RegressionMLP
from physlab.surrogate.predictor import TrainedModel
from physlab.types.experiment import Architecture, TrainingProgress, TrainingResult
from physlab.utils.config import ArchitectureConfig, TrainingPolicy

logger = logging.getLogger(__name__)


def _train_loss(
    model: RegressionMLP, x: jax.Array, y: jax.Array, key: jax.Array, l2_weight: float
) -> jax.Array:
    """MSE with dropout active, plus the L2 kernel penalty."""
    keys = jax.random.split(key, x.shape[0])
    preds = jax.vmap(lambda xi, ki: model(xi, key=ki))(x, keys)
    return jnp.mean((preds - y) ** 2) + l2_weight * model.l2_penalty()


@eqx.filter_jit
def _eval_loss(model: RegressionMLP, x: jax.Array, y: jax.Array, l2_weight: float) -> jax.Array:
    """MSE in inference mode, plus the L2 kernel penalty."""
    preds = jax.vmap(model)(x)
    return jnp.mean((preds - y) ** 2) + l2_weight * model.l2_penalty()


def _make_step(optimizer: optax.GradientTransformation):
    @eqx.filter_jit
    def step(model, opt_state, x, y, key, l2_weight):
        loss, grads = eqx.filter_value_and_grad(_train_loss)(model, x, y, key, l2_weight)
        updates, opt_state = optimizer.update(grads, opt_state, eqx.filter(model, eqx.is_array))
        model = eqx.apply_updates(model, updates)
        return model, opt_state, loss

    return step


class Trainer:
    """One training run of a freshly initialized network.

    Handles:
    - Normalization statistics, fixed for the whole run
    - Validation split from the tail of the data, per-epoch shuffling
    - Adam on mean squared error (+ optional L2 penalty and dropout)
    - Early stopping as an explicit loop condition

    `fit` is a generator yielding one TrainingProgress per epoch. Once it is
    exhausted, `trained` and `result` hold the fitted model and the summary.
    """

    def __init__(
        self,
        policy: TrainingPolicy,
        arch_config: ArchitectureConfig,
        architecture: Architecture = Architecture.SIMPLE,
        *,
        key: jax.Array | None = None,
    ) -> None:
        self.policy = policy
        self.arch_config = arch_config
        self.architecture = Architecture(architecture)
        self._key = key if key is not None else jax.random.PRNGKey(policy.seed)
        self.optimizer = optax.adam(policy.learning_rate)
        self.trained: TrainedModel | None = None
        self.result: TrainingResult | None = None

    def fit(self, inputs: np.ndarray, outputs: np.ndarray) -> Iterator[TrainingProgress]:
        """Train on (n_samples, n_features) inputs and (n_samples,) outputs."""
        policy = self.policy
        inputs = np.array(inputs, dtype=np.float64)
        outputs = np.array(outputs, dtype=np.float64)
        n_samples = len(inputs)

        stats = fit_normalizer(inputs, outputs if policy.normalize_outputs else None)
        targets = transform_output(outputs, stats) if policy.normalize_outputs else outputs

        # Keras-style split: validation rows are the tail, taken before shuffling
        split_at = int(np.floor(n_samples * (1 - policy.validation_split)))
        split_at = min(max(split_at, 1), n_samples)
        arrays = {
            "x_train": transform(inputs[:split_at], stats).astype(np.float32),
            "y_train": targets[:split_at].astype(np.float32),
            "x_val": transform(inputs[split_at:], stats).astype(np.float32),
            "y_val": targets[split_at:].astype(np.float32),
        }
        n_train = split_at
        n_val = n_samples - split_at

        n_epochs = policy.epoch_budget(n_samples)
        batch_size = policy.batch_size(n_samples)
        early = policy.early_stopping
        l2_weight = policy.l2_weight

        key, model_key = jax.random.split(self._key)
        model = RegressionMLP.from_config(
            self.arch_config,
            in_size=inputs.shape[1],
            output_activation=policy.output_activation,
            key=model_key,
        )
        opt_state = self.optimizer.init(eqx.filter(model, eqx.is_array))
        step = _make_step(self.optimizer)
        rng = np.random.default_rng(policy.seed)

        logger.info(
            f"Training {self.architecture.value} network: {n_samples} samples "
            f"({n_train} train / {n_val} val), {n_epochs} epochs, batch_size={batch_size}"
        )

        best_val_loss = float("inf")
        patience_counter = 0
        epoch_loss = val_loss = float("nan")
        epochs_run = 0
        stopped_early = False

        try:
            for epoch in range(n_epochs):
                perm = rng.permutation(n_train)
                total = 0.0
                for start in range(0, n_train, batch_size):
                    idx = perm[start:start + batch_size]
                    key, step_key = jax.random.split(key)
                    model, opt_state, loss = step(
                        model,
                        opt_state,
                        jnp.asarray(arrays["x_train"][idx]),
                        jnp.asarray(arrays["y_train"][idx]),
                        step_key,
                        l2_weight,
                    )
                    total += float(loss) * len(idx)
                epoch_loss = total / n_train

                if n_val:
                    val_loss = float(_eval_loss(
                        model, jnp.asarray(arrays["x_val"]), jnp.asarray(arrays["y_val"]), l2_weight
                    ))
                else:
                    val_loss = epoch_loss

                if val_loss < best_val_loss:
                    best_val_loss = val_loss
                    patience_counter = 0
                else:
                    patience_counter += 1

                epochs_run = epoch + 1
                stop = (
                    early is not None
                    and patience_counter >= early.patience
                    and epoch > early.min_epochs
                )
                display = (
                    epochs_run % policy.display_every == 0
                    or epochs_run == n_epochs
                    or stop
                )
                if display:
                    logger.debug(
                        f"  Epoch {epochs_run}/{n_epochs}: loss={epoch_loss:.6f}, "
                        f"val_loss={val_loss:.6f}"
                    )

                yield TrainingProgress(
                    epoch=epochs_run,
                    n_epochs=n_epochs,
                    loss=epoch_loss,
                    val_loss=val_loss,
                    display=display,
                )

                if stop:
                    stopped_early = True
                    logger.info(f"Early stopping triggered at epoch {epochs_run}")
                    break
        finally:
            arrays.clear()

        self.trained = TrainedModel(
            network=model,
            stats=stats,
            architecture=self.architecture,
            n_samples=n_samples,
        )
        self.result = TrainingResult(
            architecture=self.architecture,
            n_samples=n_samples,
            epochs_run=epochs_run,
            n_epochs=n_epochs,
            final_loss=epoch_loss,
            final_val_loss=val_loss,
            best_val_loss=best_val_loss,
            stopped_early=stopped_early,
        )
        logger.info(
            f"Training complete after {epochs_run} epochs: loss={epoch_loss:.6f}, "
            f"best_val_loss={best_val_loss:.6f}"
        )
