"""Generic traversal, equality and printing for clique trees.

These helpers work with any node type exposing an ordered ``children``
sequence and a ``conditional`` with ``equals(other, tol)`` and
``to_string(formatter)`` methods.  They do not assume discrete variables.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Tuple


def depth_first_preorder(roots: Iterable[Any]) -> Iterator[Any]:
    """Yield every node reachable from *roots*, parents before children.

    Roots and children are visited in their stored order.
    """
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children)))


def depth_first_postorder(roots: Iterable[Any]) -> Iterator[Any]:
    """Yield every node reachable from *roots*, children before parents."""
    stack: List[Tuple[Any, bool]] = [(r, False) for r in reversed(list(roots))]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        stack.extend((c, False) for c in reversed(list(node.children)))


def trees_equal(
    roots_a: Iterable[Any],
    roots_b: Iterable[Any],
    tol: float = 1e-9,
) -> bool:
    """Structural equality of two forests.

    Both forests must have the same shape (number of roots, ordered child
    counts) and every pair of corresponding conditionals must be equal
    within *tol*.
    """
    roots_a, roots_b = list(roots_a), list(roots_b)
    if len(roots_a) != len(roots_b):
        return False
    stack = list(zip(roots_a, roots_b))
    while stack:
        a, b = stack.pop()
        children_a, children_b = list(a.children), list(b.children)
        if len(children_a) != len(children_b):
            return False
        if not a.conditional.equals(b.conditional, tol):
            return False
        stack.extend(zip(children_a, children_b))
    return True


def format_tree(
    roots: Iterable[Any],
    formatter: Callable[[Any], str] = str,
    indent: str = "  ",
) -> str:
    """Render a forest as text, each clique indented under its parent."""
    lines: List[str] = []
    stack: List[Tuple[Any, int]] = [(r, 0) for r in reversed(list(roots))]
    while stack:
        node, depth = stack.pop()
        prefix = indent * depth
        for line in node.conditional.to_string(formatter).splitlines():
            lines.append(prefix + line)
        stack.extend((c, depth + 1) for c in reversed(list(node.children)))
    return "\n".join(lines)
