"""Inference over clique trees for discretebayes."""

from discretebayes.inference.bayes_tree import BayesTree, Clique
from discretebayes.inference.traversal import (
    depth_first_postorder,
    depth_first_preorder,
    format_tree,
    trees_equal,
)

__all__ = [
    "BayesTree",
    "Clique",
    "depth_first_postorder",
    "depth_first_preorder",
    "format_tree",
    "trees_equal",
]
