"""discretebayes: exact inference over discrete Bayes trees.

This package provides discrete conditional probability tables with
evidence restriction, MPE solving and sampling, and Bayes trees that
combine per-clique conditionals into the joint probability of a complete
assignment.
"""

try:
    from discretebayes._version import version as __version__
except ImportError:
    __version__ = "0.1.0"

from .core.types import Assignment, DiscreteKey
from .core.exceptions import (
    DiscreteInferenceError,
    MissingEvidenceError,
    UnsupportedArityError,
)
from .core.context import SamplingContext
from .core.potential import Potential
from .distributions.signature import Signature
from .distributions.conditional import DiscreteConditional
from .inference.bayes_tree import BayesTree, Clique

__all__ = [
    "Assignment",
    "DiscreteKey",
    "DiscreteInferenceError",
    "MissingEvidenceError",
    "UnsupportedArityError",
    "SamplingContext",
    "Potential",
    "Signature",
    "DiscreteConditional",
    "BayesTree",
    "Clique",
]
