"""Core types for discretebayes models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Sequence


# ---------------------------------------------------------------------------
# Discrete variables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DiscreteKey:
    """A discrete random variable with a finite domain ``0..cardinality-1``."""

    name: Hashable
    cardinality: int

    def __post_init__(self) -> None:
        if int(self.cardinality) < 1:
            raise ValueError(
                f"Variable {self.name!r} must have cardinality >= 1, "
                f"got {self.cardinality}"
            )

    @property
    def num_states(self) -> int:
        return int(self.cardinality)


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------

class Assignment(dict):
    """Mapping from variable name to a selected domain index.

    An assignment may be partial or complete.  Solving and sampling
    operations fill in frontal variables in place.
    """

    @staticmethod
    def cartesian_product(keys: Sequence[DiscreteKey]) -> List["Assignment"]:
        """Enumerate every joint value of *keys* in mixed-radix order.

        The first key varies fastest.  This order is fixed and is what
        makes MPE tie-breaking reproducible.
        """
        if not keys:
            return [Assignment()]

        current = Assignment({k.name: 0 for k in keys})
        product: List[Assignment] = []
        while True:
            product.append(Assignment(current))
            for key in keys:
                current[key.name] += 1
                if current[key.name] < key.cardinality:
                    break
                current[key.name] = 0
            else:
                return product

    def to_string(self, formatter: Callable[[Any], str] = str) -> str:
        """Render the assignment as ``name=value`` pairs, one per line."""
        return "\n".join(
            f"{formatter(name)}={value}" for name, value in self.items()
        )

    def __repr__(self) -> str:
        return f"Assignment({dict.__repr__(self)})"
