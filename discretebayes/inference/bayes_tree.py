"""Discrete Bayes trees.

A :class:`BayesTree` is a forest of cliques.  Each clique owns one
:class:`~discretebayes.distributions.conditional.DiscreteConditional`
``P(frontals | parents)`` and an ordered list of child cliques; the
product of all clique conditionals is the joint distribution of the
network.

The forest is stored in a :class:`networkx.DiGraph` whose integer node
ids are clique handles and whose edges point from parent to child.
:class:`Clique` objects are lightweight views onto that graph: they do
not own anything, and the upward ``parent`` link is for traversal only.

Queries:

* :meth:`BayesTree.evaluate` – joint probability of a complete
  assignment, as the product of every clique's conditional value.
* :meth:`BayesTree.optimize` – top-down MPE assignment, solving each
  clique given its already-solved ancestors.
* :meth:`BayesTree.sample` – top-down ancestral sample.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Iterator, List, Mapping, Optional, Union

import networkx as nx
import numpy as np

from discretebayes.core.config import DEFAULT_CONFIG
from discretebayes.core.types import Assignment, DiscreteKey
from discretebayes.distributions.conditional import DiscreteConditional
from discretebayes.inference.traversal import (
    depth_first_postorder,
    depth_first_preorder,
    format_tree,
    trees_equal,
)

logger = logging.getLogger(__name__)


class Clique:
    """View of one node of a :class:`BayesTree`.

    Parameters
    ----------
    tree : BayesTree
        The tree that owns the clique.
    handle : int
        The clique's node id in the tree.
    """

    __slots__ = ("tree", "handle")

    def __init__(self, tree: "BayesTree", handle: int) -> None:
        self.tree = tree
        self.handle = handle

    @property
    def conditional(self) -> DiscreteConditional:
        return self.tree._graph.nodes[self.handle]["conditional"]

    @property
    def parent(self) -> Optional["Clique"]:
        """The parent clique, or None for a root."""
        for handle in self.tree._graph.predecessors(self.handle):
            return Clique(self.tree, handle)
        return None

    @property
    def children(self) -> List["Clique"]:
        return [
            Clique(self.tree, handle)
            for handle in self.tree._graph.successors(self.handle)
        ]

    @property
    def is_root(self) -> bool:
        return self.tree._graph.in_degree(self.handle) == 0

    def evaluate(self, assignment: Mapping[Hashable, int]) -> float:
        """Product of the conditional values of this clique's subtree.

        Raises
        ------
        MissingEvidenceError
            If *assignment* lacks a variable of any conditional in the
            subtree.
        """
        return self.tree.evaluate_clique(self.handle, assignment)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Clique):
            return NotImplemented
        return self.tree is other.tree and self.handle == other.handle

    def __hash__(self) -> int:
        return hash((id(self.tree), self.handle))

    def __repr__(self) -> str:
        return f"Clique(handle={self.handle}, conditional={self.conditional!r})"


class BayesTree:
    """Forest of cliques whose conditionals factor a joint distribution.

    Cliques are added top-down with :meth:`add_clique`; every variable
    must be frontal in exactly one clique.

    Examples
    --------
    >>> tree = BayesTree()
    >>> root = tree.add_clique(p_a)
    >>> tree.add_clique(p_b_given_a, parent=root)
    >>> tree.evaluate({"A": 0, "B": 0})
    0.24
    """

    def __init__(self) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()
        self._roots: List[int] = []
        # frontal variable -> handle of the clique that owns it
        self._owners: Dict[Hashable, int] = {}

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    def add_clique(
        self,
        conditional: DiscreteConditional,
        parent: Optional[Union[Clique, int]] = None,
    ) -> Clique:
        """Add a clique owning *conditional* below *parent*.

        Parameters
        ----------
        conditional : DiscreteConditional
            The clique's normalized conditional.
        parent : Clique or int, optional
            Parent clique (or its handle).  ``None`` adds a new root.

        Returns
        -------
        Clique
            View of the new clique.

        Raises
        ------
        ValueError
            If *parent* is not in this tree or a frontal variable of
            *conditional* is already owned by another clique.
        """
        if isinstance(parent, Clique):
            if parent.tree is not self:
                raise ValueError("Parent clique belongs to another tree")
            parent = parent.handle
        if parent is not None and parent not in self._graph:
            raise ValueError(f"Unknown parent clique {parent!r}")

        owned = [v for v in conditional.frontals if v in self._owners]
        if owned:
            raise ValueError(
                f"Variables {owned} are already frontal in another clique"
            )

        handle = self._graph.number_of_nodes()
        self._graph.add_node(handle, conditional=conditional)
        if parent is None:
            self._roots.append(handle)
        else:
            self._graph.add_edge(parent, handle)
        for v in conditional.frontals:
            self._owners[v] = handle

        logger.debug(
            "Added clique %d for P(%s | %s) under %s",
            handle, conditional.frontals, conditional.parents, parent,
        )
        return Clique(self, handle)

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    @property
    def roots(self) -> List[Clique]:
        return [Clique(self, handle) for handle in self._roots]

    def clique(self, handle: int) -> Clique:
        """Return the clique with *handle*."""
        if handle not in self._graph:
            raise KeyError(f"Unknown clique {handle!r}")
        return Clique(self, handle)

    def cliques(self) -> Iterator[Clique]:
        """Iterate over all cliques, parents before children."""
        return depth_first_preorder(self.roots)

    def clique_for(self, variable: Hashable) -> Clique:
        """Return the clique in which *variable* is frontal."""
        if variable not in self._owners:
            raise KeyError(f"Variable {variable!r} is not in the tree")
        return Clique(self, self._owners[variable])

    @property
    def frontal_keys(self) -> List[DiscreteKey]:
        """Every variable of the tree, in pre-order of the owning cliques."""
        return [
            key for clique in self.cliques()
            for key in clique.conditional.frontal_keys
        ]

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, variable: Hashable) -> bool:
        return variable in self._owners

    # ------------------------------------------------------------------ #
    #  Evaluation
    # ------------------------------------------------------------------ #

    def evaluate_clique(
        self,
        handle: int,
        assignment: Mapping[Hashable, int],
    ) -> float:
        """Product of the conditional values in the subtree at *handle*."""
        result = 1.0
        for clique in depth_first_postorder([Clique(self, handle)]):
            result *= clique.conditional(assignment)
        return result

    def evaluate(self, assignment: Mapping[Hashable, int]) -> float:
        """Joint probability of the complete *assignment*.

        Raises
        ------
        MissingEvidenceError
            If *assignment* lacks any variable covered by the forest.
        """
        result = 1.0
        for root in self._roots:
            result *= self.evaluate_clique(root, assignment)
        return result

    def __call__(self, assignment: Mapping[Hashable, int]) -> float:
        return self.evaluate(assignment)

    def optimize(self) -> Assignment:
        """Solve every clique top-down and return the resulting assignment.

        Each clique is solved given the values already chosen for its
        parents, so the result is the MPE when the conditionals came from
        max-product elimination.
        """
        values = Assignment()
        for clique in self.cliques():
            clique.conditional.solve_in_place(values)
        return values

    def sample(self, rng: Optional[np.random.Generator] = None) -> Assignment:
        """Draw one joint sample by ancestral sampling, root to leaves.

        Raises
        ------
        UnsupportedArityError
            If a clique has more than one frontal variable.
        """
        values = Assignment()
        for clique in self.cliques():
            clique.conditional.sample_in_place(values, rng)
        return values

    # ------------------------------------------------------------------ #
    #  Comparison and printing
    # ------------------------------------------------------------------ #

    def equals(self, other: Any, tol: float = DEFAULT_CONFIG.tolerance) -> bool:
        """Structural equality: same forest shape and equal conditionals."""
        if not isinstance(other, BayesTree):
            return False
        return trees_equal(self.roots, other.roots, tol)

    def to_string(self, formatter: Callable[[Any], str] = str) -> str:
        return format_tree(self.roots, formatter)

    def __repr__(self) -> str:
        return f"BayesTree(cliques={len(self)}, roots={self._roots})"
