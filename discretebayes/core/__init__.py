"""Core module for discretebayes.

This module contains the discrete variable and assignment types, the
potential table the conditionals are built on, the error hierarchy, and
the generator state used for sampling.
"""

from .types import Assignment, DiscreteKey
from .exceptions import (
    DiscreteInferenceError,
    MissingEvidenceError,
    UnsupportedArityError,
)
from .config import DEFAULT_CONFIG, InferenceConfig
from .context import SamplingContext, get_rng, reset_default_rng
from .potential import Potential

__all__ = [
    "Assignment",
    "DiscreteKey",
    "DiscreteInferenceError",
    "MissingEvidenceError",
    "UnsupportedArityError",
    "DEFAULT_CONFIG",
    "InferenceConfig",
    "SamplingContext",
    "get_rng",
    "reset_default_rng",
    "Potential",
]
