"""Per-experiment session: training data, model lifecycle and predictions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence

import numpy as np

from physlab.data.training_set import TrainingSet
from physlab.errors import (
    InsufficientSamplesError,
    ModelNotTrainedError,
    TrainingInProgressError,
)
from physlab.experiments import Experiment, ParameterCatalog, get_experiment_class
from physlab.surrogate.predictor import TrainedModel, predict
from physlab.surrogate.state import ModelState, Ready, Training, Untrained, active_model
from physlab.surrogate.trainer import Trainer
from physlab.types.experiment import (
    Architecture,
    Comparison,
    LossRecord,
    Sample,
    TrainingProgress,
    TrainingResult,
)
from physlab.utils.config import ExperimentConfig

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[TrainingProgress], None]


class TrainingRun:
    """Iterator over the progress events of one training run.

    The session is busy from the moment the run is created. Exhausting the
    iterator publishes the new model; closing it early (or an error inside
    the loop) discards the run and restores the previous model state.
    """

    def __init__(
        self,
        session: ExperimentSession,
        trainer: Trainer,
        inputs: np.ndarray,
        outputs: np.ndarray,
        previous: TrainedModel | None,
    ) -> None:
        self._session = session
        self._trainer = trainer
        self._previous = previous
        self._fit_events = trainer.fit(inputs, outputs)
        self._events = self._run()
        self._finished = False

    def __iter__(self) -> Iterator[TrainingProgress]:
        return self

    def __enter__(self) -> TrainingRun:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __next__(self) -> TrainingProgress:
        return next(self._events)

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def result(self) -> TrainingResult | None:
        """Completion summary, available once the run has been exhausted."""
        return self._trainer.result if self._finished else None

    def close(self) -> None:
        """Abandon the run if it has not completed."""
        self._events.close()
        if not self._finished:
            self._finish(completed=False)

    def _run(self) -> Iterator[TrainingProgress]:
        completed = False
        try:
            for event in self._fit_events:
                self._session.loss_history.append(
                    LossRecord(epoch=event.epoch, loss=event.loss, val_loss=event.val_loss)
                )
                yield event
            completed = True
        finally:
            self._finish(completed)

    def _finish(self, completed: bool) -> None:
        if self._finished:
            return
        # Release the run's arrays before the session accepts a new run
        self._fit_events.close()
        self._finished = True
        if completed:
            self._session._publish(self._trainer.trained, self._trainer.result)
        else:
            self._session._abandon(self._previous)


class ExperimentSession:
    """State of one experiment page, from data collection to prediction.

    Created per experiment and discarded or `reset()` explicitly; nothing is
    persisted. Model readiness is tracked as Untrained | Training | Ready.
    """

    def __init__(
        self,
        experiment: Experiment | str,
        config: ExperimentConfig | None = None,
        seed: int | None = None,
    ) -> None:
        if isinstance(experiment, str):
            experiment = get_experiment_class(experiment)(config)
        elif config is not None:
            experiment = type(experiment)(config)
        self.experiment = experiment
        self.config = experiment.config
        self._rng = np.random.default_rng(seed if seed is not None else self.config.seed)
        self._init_state()

    def _init_state(self) -> None:
        self.training_set = TrainingSet()
        self.loss_history: list[LossRecord] = []
        self.state: ModelState = Untrained()
        self.last_result: TrainingResult | None = None

    @property
    def catalog(self) -> ParameterCatalog:
        return self.experiment.catalog

    @property
    def n_samples(self) -> int:
        return len(self.training_set)

    @property
    def min_samples(self) -> int:
        return self.config.min_samples

    @property
    def can_train(self) -> bool:
        return self.n_samples >= self.min_samples and not self.is_training

    @property
    def is_training(self) -> bool:
        return isinstance(self.state, Training)

    @property
    def model(self) -> TrainedModel | None:
        return active_model(self.state)

    def reset(self) -> None:
        """Discard samples, loss history and model."""
        if self.is_training:
            raise TrainingInProgressError("Cannot reset while training is in progress")
        self._init_state()
        logger.info(f"{self.experiment.name}: session reset")

    def add_sample(
        self, params: Mapping[str, float] | Sequence[float] | None = None
    ) -> Sample:
        """Label the current parameter values and append them to the training set.

        Missing parameters take their descriptor defaults.
        """
        x = self.catalog.vector_from(params)
        y = self.experiment.realistic_output(x, rng=self._rng)
        sample = self.training_set.append(x, y)
        logger.debug(
            f"{self.experiment.name}: sample {self.n_samples} -> "
            f"{sample.output:.4f}{self.experiment.output_unit}"
        )
        return sample

    def train(self, architecture: Architecture | str = Architecture.SIMPLE) -> TrainingRun:
        """Start a training run on a snapshot of the current training set.

        Raises:
            TrainingInProgressError: A run is already active.
            InsufficientSamplesError: Fewer samples than the experiment minimum.
        """
        architecture = Architecture(architecture)
        if self.is_training:
            logger.warning(f"{self.experiment.name}: training already in progress")
            raise TrainingInProgressError("Training already in progress")
        if self.n_samples < self.min_samples:
            logger.warning(
                f"{self.experiment.name}: {self.n_samples} samples, "
                f"need {self.min_samples} to train"
            )
            raise InsufficientSamplesError(self.n_samples, self.min_samples)

        trainer = Trainer(
            self.config.training,
            self.config.architectures[architecture],
            architecture,
        )
        previous = self.model
        self.loss_history.clear()
        self.state = Training(previous=previous)
        return TrainingRun(
            self,
            trainer,
            self.training_set.inputs_array(),
            self.training_set.outputs_array(),
            previous,
        )

    def fit(
        self,
        architecture: Architecture | str = Architecture.SIMPLE,
        observer: ProgressObserver | None = None,
    ) -> TrainingResult:
        """Run training to completion, passing each progress event to `observer`."""
        with self.train(architecture) as run:
            for event in run:
                if observer is not None:
                    observer(event)
        return run.result

    def predict(self, params: Mapping[str, float] | Sequence[float]) -> float:
        """Learned prediction for a full set of parameters.

        Raises:
            ModelNotTrainedError: No model has been published yet.
        """
        model = self.model
        if model is None:
            raise ModelNotTrainedError("Model not trained yet")
        return predict(model, self.catalog, params)

    def formula_baseline(
        self, params: Mapping[str, float] | Sequence[float] | None = None
    ) -> float:
        return self.experiment.ideal_output(self.experiment.full_params(params))

    def compare(self, params: Mapping[str, float] | Sequence[float]) -> Comparison:
        """Learned prediction, formula baseline and their absolute difference."""
        predicted = self.predict(params)
        formula = self.formula_baseline(params)
        return Comparison(
            predicted=predicted,
            formula=formula,
            difference=abs(predicted - formula),
            details=self.experiment.comparison_details(predicted, params),
        )

    def _publish(self, model: TrainedModel, result: TrainingResult) -> None:
        self.state = Ready(model)
        self.last_result = result
        logger.info(
            f"{self.experiment.name}: published {result.architecture.value} model "
            f"({result.n_samples} samples, final loss {result.final_loss:.6f})"
        )

    def _abandon(self, previous: TrainedModel | None) -> None:
        self.state = Ready(previous) if previous is not None else Untrained()
        logger.info(f"{self.experiment.name}: training run discarded")
