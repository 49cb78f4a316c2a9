"""
Configuration for inference defaults.

A frozen dataclass is provided as a stable, typed surface for the few
package-wide defaults: the seed of the shared pseudo-random generator
and the tolerance used by structural equality.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InferenceConfig:
    """
    Package-wide inference defaults.
    """

    seed: int = 2
    tolerance: float = 1e-9

    def validate(self) -> None:
        """
        Configuration validation is performed.

        Raises:
            ValueError: If the seed or the tolerance is negative.
        """
        if int(self.seed) < 0:
            raise ValueError("seed must be non-negative")
        if float(self.tolerance) < 0.0:
            raise ValueError("tolerance must be non-negative")


DEFAULT_CONFIG = InferenceConfig()
DEFAULT_CONFIG.validate()
