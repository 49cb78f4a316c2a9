"""Random network builders for examples and tests."""

from discretebayes.networks.graph import build_chain, build_tree

__all__ = ["build_chain", "build_tree"]
