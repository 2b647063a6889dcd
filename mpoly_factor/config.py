"""Configuration dataclass for the factorization driver.

All knobs that shape the evaluation-point retry loop live here as a single
frozen dataclass, so a factorization is reproducible from (input, config).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class FactorConfig:
    """Frozen settings for the evaluation-point search.

    Groups:
        Retry:       max_attempts
        Sampling:    eval_bound, eval_growth, seed
    """

    # --- Retry ---
    max_attempts: int = 32      # evaluation points tried per squarefree component

    # --- Sampling ---
    eval_bound: int = 3         # initial half-width of the integer sampling range
    eval_growth: int = 2        # widening of the range after each rejected point
    seed: int = 42

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.eval_bound < 1:
            raise ValueError(f"eval_bound must be positive, got {self.eval_bound}")
        if self.eval_growth < 0:
            raise ValueError(f"eval_growth must be non-negative, got {self.eval_growth}")

    def eval_range(self, attempt: int) -> Tuple[int, int]:
        """Inclusive (low, high) sampling range for the given 0-indexed attempt."""
        bound = self.eval_bound + attempt * self.eval_growth
        return -bound, bound


DEFAULT_CONFIG = FactorConfig()
