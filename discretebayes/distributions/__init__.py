"""Conditional distributions for discretebayes.

This module contains the discrete conditional probability table and the
direct table specification it can be built from.
"""

from .signature import Signature
from .conditional import DiscreteConditional

__all__ = [
    "Signature",
    "DiscreteConditional",
]
