"""Direct conditional probability table specifications."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import numpy as np

from ..core.types import DiscreteKey


class Signature:
    """The CPT of one variable given its parents, written out directly.

    Parameters
    ----------
    key : DiscreteKey
        The variable the table describes.
    parents : sequence of DiscreteKey, optional
        The conditioning variables.
    table : array-like
        Shape ``(parent_1_card, ..., parent_k_card, key_card)``: one row of
        weights per parent combination.  Each row is normalized to sum to 1.

    Raises
    ------
    ValueError
        If the table shape does not match the keys, a weight is negative,
        or a row sums to zero.
    """

    def __init__(
        self,
        key: DiscreteKey,
        parents: Optional[Sequence[DiscreteKey]] = None,
        table: Any = None,
    ) -> None:
        self.key = key
        self.parents: List[DiscreteKey] = list(parents or [])
        if table is None:
            raise ValueError("table must be provided")

        rows = np.asarray(table, dtype=np.float64)
        expected = tuple(p.cardinality for p in self.parents) + (
            key.cardinality,
        )
        if rows.shape != expected:
            raise ValueError(
                f"Table shape {rows.shape} does not match "
                f"cardinalities {expected}"
            )
        if np.any(rows < 0):
            raise ValueError("All probabilities must be non-negative.")
        totals = rows.sum(axis=-1, keepdims=True)
        if np.any(totals == 0):
            raise ValueError("Every row of the table must have positive mass.")
        self.table: np.ndarray = rows / totals

    def discrete_keys(self) -> List[DiscreteKey]:
        """Return ``[key, *parents]``, the axis order of :meth:`cpt`."""
        return [self.key] + list(self.parents)

    def cpt(self) -> np.ndarray:
        """Return the normalized table laid out along :meth:`discrete_keys`."""
        return np.moveaxis(self.table, -1, 0).copy()

    def __repr__(self) -> str:
        parents = ", ".join(str(p.name) for p in self.parents)
        return f"Signature({self.key.name!r} | {parents})"
