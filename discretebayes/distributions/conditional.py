"""Discrete conditional probability distributions.

A :class:`DiscreteConditional` is a :class:`~discretebayes.core.potential.Potential`
jointly defined over *frontal* variables (the variables it describes) and
*parent* variables (the variables it is conditioned on).  For every joint
value of the parents, the table sums to one over the frontals.

Example
-------
>>> from discretebayes.core.types import DiscreteKey
>>> from discretebayes.distributions.signature import Signature
>>> from discretebayes.distributions.conditional import DiscreteConditional
>>>
>>> A, B = DiscreteKey("A", 2), DiscreteKey("B", 2)
>>> p_b_given_a = DiscreteConditional.from_signature(
...     Signature(B, [A], [[0.8, 0.2], [0.1, 0.9]])
... )
>>> p_b_given_a.solve({"A": 1})
1
>>> value = p_b_given_a.sample({"A": 0})
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..core.context import draw_categorical
from ..core.exceptions import MissingEvidenceError, UnsupportedArityError
from ..core.potential import Potential
from ..core.types import Assignment, DiscreteKey
from .signature import Signature

logger = logging.getLogger(__name__)


class DiscreteConditional(Potential):
    """Conditional distribution ``P(frontals | parents)`` over discrete variables.

    The first *n_frontals* variables of the table are the frontals, the
    remaining ones the parents.  The table is assumed normalized; use the
    ``from_*`` constructors to build one from a joint.

    Parameters
    ----------
    n_frontals : int
        Number of leading variables that are frontal.
    variables : list of hashable
        Variable names, frontals first.
    cardinalities : list of int
        Number of states of each variable.
    values : numpy.ndarray
        Table of shape *cardinalities*.

    Raises
    ------
    ValueError
        If *n_frontals* is not between 1 and the number of variables, or
        the table shape does not match *cardinalities*.
    """

    def __init__(
        self,
        n_frontals: int,
        variables: Sequence[Hashable],
        cardinalities: Sequence[int],
        values: Any,
    ) -> None:
        super().__init__(variables, cardinalities, values)
        if not 1 <= int(n_frontals) <= len(self.variables):
            raise ValueError(
                f"n_frontals must be between 1 and {len(self.variables)}, "
                f"got {n_frontals}"
            )
        self.n_frontals: int = int(n_frontals)

    # --------------------------------------------------------------------- #
    #  Construction
    # --------------------------------------------------------------------- #

    @classmethod
    def from_joint(cls, n_frontals: int, joint: Potential) -> "DiscreteConditional":
        """Normalize *joint* over its first *n_frontals* variables.

        The remaining variables of *joint* become the parents.
        """
        conditional = joint / joint.sum(n_frontals)
        logger.debug(
            "Conditional on %s from joint over %s",
            joint.variables[:n_frontals], joint.variables,
        )
        return cls(
            n_frontals,
            conditional.variables,
            conditional.cardinalities,
            conditional.values,
        )

    @classmethod
    def from_joint_and_marginal(
        cls,
        joint: Potential,
        marginal: Potential,
        ordered_keys: Optional[Sequence[Union[DiscreteKey, Hashable]]] = None,
    ) -> "DiscreteConditional":
        """Build ``joint / marginal`` where *marginal* is over the parents.

        The frontals are the variables of *joint* absent from *marginal*,
        in *joint* order; their count is ``|vars(joint)| - |vars(marginal)|``.

        Parameters
        ----------
        joint : Potential
            Joint table over frontals and parents.
        marginal : Potential
            Marginal table over the parents only.
        ordered_keys : sequence, optional
            Permutation of the joint's variables (names or
            :class:`DiscreteKey`) overriding the reported variable order.
            The first ``n_frontals`` entries are then the frontals.

        Raises
        ------
        ValueError
            If *marginal* mentions a variable *joint* does not, if no
            frontal variable remains, or if *ordered_keys* is not a
            permutation of the joint's variables.
        """
        unknown = [v for v in marginal.variables if v not in joint.variables]
        if unknown:
            raise ValueError(
                f"Marginal variables {unknown} are not in the joint"
            )
        n_frontals = joint.size - marginal.size
        if n_frontals < 1:
            raise ValueError("Joint and marginal leave no frontal variable")

        frontals = [v for v in joint.variables if v not in marginal.variables]
        parents = [v for v in joint.variables if v in marginal.variables]
        order = frontals + parents
        if ordered_keys is not None:
            order = [
                k.name if isinstance(k, DiscreteKey) else k
                for k in ordered_keys
            ]
            if len(order) != joint.size or set(order) != set(joint.variables):
                raise ValueError(
                    f"ordered_keys {order} is not a permutation of "
                    f"{joint.variables}"
                )

        quotient = joint / marginal
        logger.debug(
            "Conditional P(%s | %s) from joint/marginal pair",
            order[:n_frontals], order[n_frontals:],
        )
        return cls(
            n_frontals,
            order,
            [quotient.cardinality(v) for v in order],
            quotient._broadcast_into(order),
        )

    @classmethod
    def from_signature(cls, signature: Signature) -> "DiscreteConditional":
        """Build a single-frontal conditional from a literal CPT."""
        return cls.from_keys_and_table(signature.discrete_keys(), signature.cpt())

    @classmethod
    def from_keys_and_table(
        cls,
        keys: Sequence[DiscreteKey],
        values: Any,
    ) -> "DiscreteConditional":
        """Build a single-frontal conditional over ``[frontal, *parents]``."""
        return cls(
            1,
            [k.name for k in keys],
            [k.cardinality for k in keys],
            values,
        )

    # --------------------------------------------------------------------- #
    #  Accessors
    # --------------------------------------------------------------------- #

    @property
    def frontals(self) -> List[Hashable]:
        return self.variables[:self.n_frontals]

    @property
    def parents(self) -> List[Hashable]:
        return self.variables[self.n_frontals:]

    @property
    def n_parents(self) -> int:
        return len(self.variables) - self.n_frontals

    @property
    def frontal_keys(self) -> List[DiscreteKey]:
        return self.keys[:self.n_frontals]

    @property
    def parent_keys(self) -> List[DiscreteKey]:
        return self.keys[self.n_frontals:]

    @property
    def first_frontal_key(self) -> Hashable:
        return self.variables[0]

    # --------------------------------------------------------------------- #
    #  Evidence restriction
    # --------------------------------------------------------------------- #

    def choose(self, evidence: Mapping[Hashable, int]) -> Potential:
        """Restrict to the parent values in *evidence*.

        Parents are fixed one at a time in the conditional's parent order;
        the result is ``P(frontals | parents=evidence)`` over the frontals.

        Raises
        ------
        MissingEvidenceError
            If *evidence* has no value for one of the parents (``None``
            counts as missing).
        """
        table = Potential(self.variables, self.cardinalities, self.values)
        for j in self.parents:
            if evidence.get(j) is None:
                logger.debug(
                    "choose: parent %r missing from evidence %r", j, dict(evidence)
                )
                raise MissingEvidenceError(j, "choose")
            table = table.restrict(j, evidence[j])
        return table

    def choose_as_factor(self, evidence: Mapping[Hashable, int]) -> Potential:
        """Restrict to *evidence* and return a standalone factor over the frontal.

        Raises
        ------
        UnsupportedArityError
            If the conditional has more than one frontal variable.
        MissingEvidenceError
            If *evidence* has no value for one of the parents.
        """
        self._require_single_frontal("choose_as_factor")
        table = self.choose(evidence)
        key = self.frontal_keys[0]
        return Potential.from_keys([key], table.values.copy())

    # --------------------------------------------------------------------- #
    #  MPE
    # --------------------------------------------------------------------- #

    def solve(self, evidence: Mapping[Hashable, int]) -> int:
        """Return the most probable value of the single frontal variable.

        Ties go to the lowest value.

        Raises
        ------
        UnsupportedArityError
            If the conditional has more than one frontal variable.
        MissingEvidenceError
            If *evidence* has no value for one of the parents.
        """
        self._require_single_frontal("solve")
        p_fs = self.choose(evidence)
        j = self.first_frontal_key

        mpe = 0
        max_p = p_fs({j: 0})
        for value in range(1, self.cardinalities[0]):
            p_value = p_fs({j: value})
            if p_value > max_p:
                max_p = p_value
                mpe = value
        return mpe

    def solve_in_place(self, assignment: Assignment) -> None:
        """Write the MPE of all frontals given the parents in *assignment*.

        Frontal values are enumerated with the first frontal varying
        fastest; a candidate replaces the best only on strict improvement,
        so the first-encountered maximizer wins ties.  Only the frontal
        entries of *assignment* are written.
        """
        p_fs = self.choose(assignment)

        mpe: Optional[Assignment] = None
        max_p = 0.0
        for candidate in Assignment.cartesian_product(self.frontal_keys):
            p_value = p_fs(candidate)
            if mpe is None or p_value > max_p:
                max_p = p_value
                mpe = candidate

        for j in self.frontals:
            assignment[j] = mpe[j]

    # --------------------------------------------------------------------- #
    #  Sampling
    # --------------------------------------------------------------------- #

    def sample(
        self,
        evidence: Mapping[Hashable, int],
        rng: Optional[np.random.Generator] = None,
    ) -> int:
        """Draw a value of the single frontal variable given *evidence*.

        If some value has probability exactly 1 it is returned without
        drawing.  Otherwise one draw is taken from *rng*, or from the
        active :class:`~discretebayes.core.context.SamplingContext`, or
        from the shared fixed-seed generator.

        Raises
        ------
        UnsupportedArityError
            If the conditional has more than one frontal variable.
        MissingEvidenceError
            If *evidence* has no value for one of the parents.
        """
        self._require_single_frontal("sample")
        p_fs = self.choose(evidence)
        key = self.first_frontal_key

        p = np.empty(self.cardinalities[0], dtype=np.float64)
        for value in range(len(p)):
            p[value] = p_fs({key: value})
            if p[value] == 1.0:
                logger.debug("sample: %r is certain, value %d", key, value)
                return value
        return draw_categorical(p, rng)

    def sample_in_place(
        self,
        assignment: Assignment,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """Sample the frontal given *assignment* and store it there."""
        self._require_single_frontal("sample_in_place")
        assignment[self.first_frontal_key] = self.sample(assignment, rng)

    # --------------------------------------------------------------------- #
    #  Helpers
    # --------------------------------------------------------------------- #

    def _require_single_frontal(self, operation: str) -> None:
        if self.n_frontals != 1:
            raise UnsupportedArityError(self.n_frontals, operation)

    def to_string(self, formatter: Callable[[Any], str] = str) -> str:
        """Render as ``P( frontals | parents )`` followed by the table."""
        header = " ".join(formatter(v) for v in self.frontals)
        if self.n_parents:
            header += " | " + " ".join(formatter(v) for v in self.parents)
        return f"P( {header} )\n{super().to_string(formatter)}"

    def __repr__(self) -> str:
        return (
            f"DiscreteConditional(frontals={self.frontals}, "
            f"parents={self.parents})"
        )
