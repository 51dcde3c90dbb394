"""Core data types for the physlab pipeline."""

from physlab.types.experiment import (
    Architecture,
    Comparison,
    LossRecord,
    ParameterDescriptor,
    Sample,
    TrainingProgress,
    TrainingResult,
)

__all__ = [
    "Architecture",
    "ParameterDescriptor",
    "Sample",
    "LossRecord",
    "TrainingProgress",
    "TrainingResult",
    "Comparison",
]
