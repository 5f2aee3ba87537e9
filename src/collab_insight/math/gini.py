"""Gini coefficient for inequality measurement.

Applied to per-author contribution totals, the Gini coefficient tells how
unevenly work is spread across a team.

    G = 0: perfect equality (every author contributed the same)
    G = 1: perfect inequality (one author did everything)

Reference: Gini (1912) - Variabilita e Mutabilita

Formula (mean absolute difference form):
    G = sum_i sum_j |x_i - x_j| / (2 * n * sum(x_i))

For sorted values x_1 <= ... <= x_n this equals
    G = (2 * sum(i * x_i)) / (n * sum(x_i)) - (n + 1) / n
which is what we evaluate, in O(n log n).
"""

from typing import Iterable, List, Union

import numpy as np


class Gini:
    """Gini coefficient calculations for inequality measurement."""

    @staticmethod
    def gini_coefficient(
        values: Union[List[float], List[int]],
        zero_total: float = 1.0,
    ) -> float:
        """Compute the Gini coefficient of non-negative totals.

        Args:
            values: Per-author totals. Must not be empty.
            zero_total: Value returned when every total is zero. Defaults to
                1.0 (nobody contributed, treated as total inequality).

        Returns:
            Gini coefficient in [0, (n-1)/n].

        Raises:
            ValueError: If values is empty or contains negative values.
        """
        if not values:
            raise ValueError("Cannot compute Gini for empty list")

        if any(v < 0 for v in values):
            raise ValueError("Gini requires non-negative values")

        if len(values) == 1:
            return 0.0

        arr = np.sort(np.asarray(values, dtype=float))
        total = float(arr.sum())
        if total == 0:
            return zero_total

        n = arr.size
        ranks = np.arange(1, n + 1, dtype=float)
        gini = (2.0 * float(np.dot(ranks, arr))) / (n * total) - (n + 1.0) / n

        return max(0.0, min(1.0, gini))

    @staticmethod
    def balance_score(values: Iterable[float]) -> float:
        """Map a distribution to a 0-100 balance score: 100 * (1 - G)."""
        return 100.0 * (1.0 - Gini.gini_coefficient(list(values)))
