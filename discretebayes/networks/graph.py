"""Network construction utilities for discretebayes."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from discretebayes.core.types import DiscreteKey
from discretebayes.distributions.conditional import DiscreteConditional
from discretebayes.distributions.signature import Signature
from discretebayes.inference.bayes_tree import BayesTree


def _random_conditional(
    rng: np.random.Generator,
    key: DiscreteKey,
    parent: Optional[DiscreteKey],
) -> DiscreteConditional:
    """P(key | parent) with Dirichlet-distributed rows."""
    num_states = key.cardinality
    if parent is None:
        table = rng.dirichlet(np.ones(num_states))
        return DiscreteConditional.from_signature(Signature(key, [], table))
    # CPT shape: (parent_states, child_states)
    table = np.empty((parent.cardinality, num_states))
    for s in range(parent.cardinality):
        table[s] = rng.dirichlet(np.ones(num_states))
    return DiscreteConditional.from_signature(Signature(key, [parent], table))


def build_tree(
    num_nodes: int,
    num_states: int = 2,
    seed: Optional[int] = None,
) -> Tuple[BayesTree, List[DiscreteKey]]:
    """Build a balanced, tree-structured Bayes tree.

    Returns the tree and the keys of all its variables.  Variable ``Xi``
    is frontal in its own clique, whose children hold ``X(2i+1)`` and
    ``X(2i+2)`` conditioned on ``Xi``.
    """
    rng = np.random.default_rng(seed)
    keys = [DiscreteKey(f"X{i}", num_states) for i in range(num_nodes)]
    tree = BayesTree()
    if not keys:
        return tree, keys

    cliques = {0: tree.add_clique(_random_conditional(rng, keys[0], None))}
    for i in range(num_nodes):
        for child_idx in [2 * i + 1, 2 * i + 2]:
            if child_idx < num_nodes:
                conditional = _random_conditional(rng, keys[child_idx], keys[i])
                cliques[child_idx] = tree.add_clique(
                    conditional, parent=cliques[i]
                )

    return tree, keys


def build_chain(
    num_nodes: int,
    num_states: int = 2,
    seed: Optional[int] = None,
) -> Tuple[BayesTree, List[DiscreteKey]]:
    """Build a chain-structured Bayes tree (Markov chain)."""
    rng = np.random.default_rng(seed)
    keys = [DiscreteKey(f"X{i}", num_states) for i in range(num_nodes)]
    tree = BayesTree()

    parent = None
    for i, key in enumerate(keys):
        parent_key = keys[i - 1] if i > 0 else None
        parent = tree.add_clique(
            _random_conditional(rng, key, parent_key), parent=parent
        )

    return tree, keys
