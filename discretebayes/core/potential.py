"""Dense potential tables over discrete variables.

Provides :class:`Potential`, a non-negative table indexed by the joint
values of a set of discrete variables, with the operations exact
inference needs:

* evaluation at an assignment,
* restriction of one variable to a fixed value,
* pointwise combination (product / quotient) of two tables,
* elimination of variables by sum or max.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, List, Mapping, Sequence, Union

import numpy as np

from discretebayes.core.config import DEFAULT_CONFIG
from discretebayes.core.exceptions import MissingEvidenceError
from discretebayes.core.types import Assignment, DiscreteKey

_ELIMINATION_OPS = {
    "sum": np.sum,
    "max": np.max,
}


def _safe_divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Pointwise ``a / b`` with every division by zero mapped to 0."""
    a, b = np.broadcast_arrays(a, b)
    out = np.zeros(a.shape, dtype=np.float64)
    np.divide(a, b, out=out, where=b != 0)
    return out


_COMBINE_OPS = {
    "multiply": np.multiply,
    "divide": _safe_divide,
}


# ------------------------------------------------------------------ #
#  Potential
# ------------------------------------------------------------------ #

class Potential:
    """A discrete potential function over a set of variables.

    Parameters
    ----------
    variables : list of hashable
        Variable names that index the axes of *values*.
    cardinalities : list of int
        Number of states for each variable (same order as *variables*).
    values : numpy.ndarray
        An N-dimensional array whose shape equals *cardinalities*.
    """

    def __init__(
        self,
        variables: Sequence[Hashable],
        cardinalities: Sequence[int],
        values: Any,
    ) -> None:
        values = np.asarray(values, dtype=np.float64)
        expected = tuple(int(c) for c in cardinalities)
        if values.shape != expected:
            raise ValueError(
                f"Potential shape {values.shape} does not match "
                f"cardinalities {expected}"
            )
        if len(set(variables)) != len(variables):
            raise ValueError(f"Duplicate variables in {list(variables)}")
        self.variables: List[Hashable] = list(variables)
        self.cardinalities: List[int] = list(expected)
        self.values: np.ndarray = values

    # ----- factory helpers ------------------------------------------------

    @classmethod
    def from_keys(cls, keys: Sequence[DiscreteKey], values: Any) -> "Potential":
        """Build a :class:`Potential` from a list of :class:`DiscreteKey`."""
        return cls(
            [k.name for k in keys],
            [k.cardinality for k in keys],
            values,
        )

    # ----- accessors ------------------------------------------------------

    @property
    def keys(self) -> List[DiscreteKey]:
        return [
            DiscreteKey(v, c)
            for v, c in zip(self.variables, self.cardinalities)
        ]

    @property
    def size(self) -> int:
        """Number of variables the table is defined over."""
        return len(self.variables)

    def cardinality(self, var: Hashable) -> int:
        """Return the number of states of *var*."""
        if var not in self.variables:
            raise ValueError(f"Variable {var!r} not in potential")
        return self.cardinalities[self.variables.index(var)]

    # ----- core operations ------------------------------------------------

    def evaluate(self, assignment: Mapping[Hashable, int]) -> float:
        """Return the table value at *assignment*.

        Entries of *assignment* for variables outside the table are
        ignored.

        Raises
        ------
        MissingEvidenceError
            If *assignment* has no value for one of the table's variables.
            A value of ``None`` counts as missing.
        """
        index = []
        for var, card in zip(self.variables, self.cardinalities):
            if assignment.get(var) is None:
                raise MissingEvidenceError(var, "evaluate")
            index.append(self._check_value(var, card, assignment[var]))
        return float(self.values[tuple(index)])

    def __call__(self, assignment: Mapping[Hashable, int]) -> float:
        return self.evaluate(assignment)

    def restrict(self, var: Hashable, value: int) -> "Potential":
        """Fix *var* to *value* (slice the table).

        Returns a new :class:`Potential` without *var*.
        """
        if var not in self.variables:
            raise ValueError(f"Variable {var!r} not in potential")
        axis = self.variables.index(var)
        value = self._check_value(var, self.cardinalities[axis], value)
        slices: List[Union[slice, int]] = [slice(None)] * len(self.variables)
        slices[axis] = value
        new_values = self.values[tuple(slices)]
        new_vars = [v for v in self.variables if v != var]
        new_cards = [c for v, c in zip(self.variables, self.cardinalities)
                     if v != var]
        return Potential(new_vars, new_cards, np.array(new_values))

    def combine(self, other: "Potential", op: str = "multiply") -> "Potential":
        """Pointwise combination of two potentials.

        Shared variables are aligned; non-shared variables are broadcast.
        *op* is ``"multiply"`` or ``"divide"``; division by zero yields 0.
        Returns a new :class:`Potential`.
        """
        if op not in _COMBINE_OPS:
            raise ValueError(
                f"Unknown combine op '{op}'. Use 'multiply' or 'divide'."
            )
        combined_vars: List[Hashable] = list(self.variables)
        combined_cards: List[int] = list(self.cardinalities)
        for v, c in zip(other.variables, other.cardinalities):
            if v in combined_vars:
                if combined_cards[combined_vars.index(v)] != c:
                    raise ValueError(
                        f"Variable {v!r} has cardinality "
                        f"{combined_cards[combined_vars.index(v)]} and {c}"
                    )
            else:
                combined_vars.append(v)
                combined_cards.append(c)

        a = self._broadcast_into(combined_vars)
        b = other._broadcast_into(combined_vars)
        values = _COMBINE_OPS[op](a, b)
        return Potential(
            combined_vars,
            combined_cards,
            np.broadcast_to(values, tuple(combined_cards)).copy(),
        )

    def __mul__(self, other: "Potential") -> "Potential":
        return self.combine(other, "multiply")

    def __truediv__(self, other: "Potential") -> "Potential":
        return self.combine(other, "divide")

    def marginalize(
        self,
        variables: Sequence[Hashable],
        op: str = "sum",
    ) -> "Potential":
        """Eliminate *variables* by summing (``op="sum"``) or maximizing.

        Returns a new :class:`Potential` over the remaining variables.
        """
        if op not in _ELIMINATION_OPS:
            raise ValueError(f"Unknown elimination op '{op}'. Use 'sum' or 'max'.")
        for var in variables:
            if var not in self.variables:
                raise ValueError(f"Variable {var!r} not in potential")
        axes = tuple(self.variables.index(v) for v in variables)
        new_values = _ELIMINATION_OPS[op](self.values, axis=axes)
        new_vars = [v for v in self.variables if v not in variables]
        new_cards = [c for v, c in zip(self.variables, self.cardinalities)
                     if v not in variables]
        return Potential(new_vars, new_cards, np.asarray(new_values))

    def sum(self, n: int) -> "Potential":
        """Sum out the first *n* variables."""
        return self.marginalize(self.variables[:n], "sum")

    def max(self, n: int) -> "Potential":
        """Max out the first *n* variables."""
        return self.marginalize(self.variables[:n], "max")

    def equals(self, other: Any, tol: float = DEFAULT_CONFIG.tolerance) -> bool:
        """Compare table values within *tol*.

        Returns False, rather than raising, when *other* is not a
        :class:`Potential` or is defined over different variables.
        """
        if not isinstance(other, Potential):
            return False
        if set(self.variables) != set(other.variables):
            return False
        for v, c in zip(self.variables, self.cardinalities):
            if other.cardinality(v) != c:
                return False
        aligned = other._broadcast_into(self.variables)
        return bool(np.all(np.abs(self.values - aligned) <= tol))

    # ----- helpers --------------------------------------------------------

    @staticmethod
    def _check_value(var: Hashable, card: int, value: Any) -> int:
        value = int(value)
        if not 0 <= value < card:
            raise ValueError(
                f"Value {value} out of range for variable {var!r} "
                f"with cardinality {card}"
            )
        return value

    def _broadcast_into(self, target_vars: List[Hashable]) -> np.ndarray:
        """Reshape values so axes align with *target_vars* (size-1 for missing)."""
        src_axes = [self.variables.index(tv) for tv in target_vars
                    if tv in self.variables]
        extra_axes = [i for i, tv in enumerate(target_vars)
                      if tv not in self.variables]

        transposed = np.transpose(self.values, src_axes)
        for ea in extra_axes:
            transposed = np.expand_dims(transposed, axis=ea)
        return transposed

    def to_string(self, formatter: Callable[[Any], str] = str) -> str:
        """Tabular rendering, one row per joint value (first variable fastest)."""
        lines = []
        for assignment in Assignment.cartesian_product(self.keys):
            row = " ".join(
                f"{formatter(v)}={assignment[v]}" for v in self.variables
            )
            lines.append(f"  {row} : {self.evaluate(assignment):.6g}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Potential(variables={self.variables}, "
            f"shape={self.values.shape})"
        )
