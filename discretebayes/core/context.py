"""Pseudo-random generator state used by conditional sampling."""

from __future__ import annotations

import threading
from typing import Optional, Sequence

import numpy as np

from .config import DEFAULT_CONFIG, InferenceConfig

_default_rng: Optional[np.random.Generator] = None
_default_lock = threading.Lock()
# active SamplingContext of each thread
_local = threading.local()


def default_rng() -> np.random.Generator:
    """Return the process-wide generator, creating it on first use.

    The generator is seeded once with ``DEFAULT_CONFIG.seed`` so that
    runs are reproducible.  It is shared by every sampling call that is
    not given its own generator.
    """
    global _default_rng
    with _default_lock:
        if _default_rng is None:
            _default_rng = np.random.default_rng(DEFAULT_CONFIG.seed)
        return _default_rng


def reset_default_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Re-seed the process-wide generator.

    Args:
        seed: New seed.  Defaults to ``DEFAULT_CONFIG.seed``.

    Returns:
        The fresh shared generator.

    Raises:
        ValueError: If *seed* is negative.
    """
    global _default_rng
    config = DEFAULT_CONFIG if seed is None else InferenceConfig(
        seed=seed, tolerance=DEFAULT_CONFIG.tolerance
    )
    config.validate()
    with _default_lock:
        _default_rng = np.random.default_rng(config.seed)
        return _default_rng


class SamplingContext:
    """Context manager that scopes a generator for sampling calls.

    Inside the ``with`` block, :func:`get_rng` returns this context's
    generator instead of the shared process-wide one.  Contexts nest, and
    are tracked per thread: a context entered in one thread does not
    affect sampling in another.

    Example:
        >>> with SamplingContext(seed=7):
        ...     value = conditional.sample({"A": 1})
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize a new sampling context.

        Args:
            seed: Seed for a new generator.  Ignored when *rng* is given.
            rng: An existing generator to use.
        """
        self.rng: np.random.Generator = (
            rng if rng is not None else np.random.default_rng(seed)
        )
        self._parent_context: Optional['SamplingContext'] = None

    def __enter__(self) -> 'SamplingContext':
        self._parent_context = SamplingContext.get_active_context()
        _local.active = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        _local.active = self._parent_context
        return False

    @classmethod
    def get_active_context(cls) -> Optional['SamplingContext']:
        """Get the currently active sampling context, if any."""
        return getattr(_local, "active", None)

    @classmethod
    def is_active(cls) -> bool:
        """Check if a sampling context is currently active."""
        return cls.get_active_context() is not None


def get_rng() -> np.random.Generator:
    """Return the active context's generator, else the shared default."""
    context = SamplingContext.get_active_context()
    if context is not None:
        return context.rng
    return default_rng()


def draw_categorical(
    weights: Sequence[float],
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Draw one index from the categorical distribution given by *weights*.

    Args:
        weights: Non-negative, not necessarily normalized, weights.
        rng: Generator to draw from.  When omitted, the active context's
            generator is used, else the shared one (under its lock).

    Returns:
        The sampled index.

    Raises:
        ValueError: If a weight is negative or all weights are zero.
    """
    p = np.asarray(weights, dtype=np.float64)
    if np.any(p < 0):
        raise ValueError("Weights must be non-negative.")
    total = p.sum()
    if not total > 0:
        raise ValueError("Weights must not all be zero.")
    p = p / total

    if rng is None:
        context = SamplingContext.get_active_context()
        if context is None:
            shared = default_rng()
            with _default_lock:
                return int(shared.choice(len(p), p=p))
        rng = context.rng
    return int(rng.choice(len(p), p=p))
