"""Model readiness of an experiment session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from physlab.surrogate.predictor import TrainedModel


@dataclass(frozen=True)
class Untrained:
    """No model has been published yet."""


@dataclass(frozen=True)
class Training:
    """A run is in progress; `previous` stays usable until it completes."""

    previous: TrainedModel | None = None


@dataclass(frozen=True)
class Ready:
    model: TrainedModel


ModelState = Union[Untrained, Training, Ready]


def active_model(state: ModelState) -> TrainedModel | None:
    """The model predictions should use in `state`, if any."""
    if isinstance(state, Ready):
        return state.model
    if isinstance(state, Training):
        return state.previous
    if isinstance(state, Untrained):
        return None
    raise TypeError(f"Unknown model state: {state!r}")
