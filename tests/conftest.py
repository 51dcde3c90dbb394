"""Shared test fixtures for physlab."""

import numpy as np
import pytest

from physlab.experiments import PendulumExperiment, SeparationExperiment


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def pendulum():
    return PendulumExperiment()


@pytest.fixture
def separation():
    return SeparationExperiment()


def _fast_config(experiment_cls, **training_overrides):
    """Default experiment config with a small epoch budget for quick tests."""
    config = experiment_cls.default_config()
    overrides = {"n_epochs": 20, "epochs_per_sample": None}
    overrides.update(training_overrides)
    training = config.training.model_copy(update=overrides)
    return config.model_copy(update={"training": training})


@pytest.fixture
def fast_pendulum():
    return PendulumExperiment(_fast_config(PendulumExperiment))


@pytest.fixture
def fast_separation():
    return SeparationExperiment(
        _fast_config(SeparationExperiment, early_stopping=None)
    )


@pytest.fixture
def fast_config():
    """Factory: fast_config(ExperimentClass, **training_overrides)."""
    return _fast_config
