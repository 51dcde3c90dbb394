"""physlab: formula baselines vs. live-trained neural networks for physics lab demos."""

__version__ = "0.1.0"

from physlab.session import ExperimentSession, TrainingRun

__all__ = ["ExperimentSession", "TrainingRun", "__version__"]
