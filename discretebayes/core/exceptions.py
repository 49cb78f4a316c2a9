"""Exception hierarchy for discretebayes."""

from __future__ import annotations

from typing import Hashable, Optional


class DiscreteInferenceError(Exception):
    """Base class for errors raised by discretebayes operations."""


class MissingEvidenceError(DiscreteInferenceError, KeyError):
    """An operation needed a value for a variable absent from the assignment."""

    def __init__(self, variable: Hashable, operation: Optional[str] = None):
        self.variable = variable
        self.operation = operation
        where = f"{operation}: " if operation else ""
        super().__init__(f"{where}no value for variable {variable!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class UnsupportedArityError(DiscreteInferenceError, ValueError):
    """An operation that requires exactly one frontal variable got more."""

    def __init__(self, n_frontals: int, operation: Optional[str] = None):
        self.n_frontals = n_frontals
        self.operation = operation
        where = f"{operation}: " if operation else ""
        super().__init__(
            f"{where}expected exactly one frontal variable, "
            f"conditional has {n_frontals}"
        )
