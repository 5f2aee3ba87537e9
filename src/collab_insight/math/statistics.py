"""Descriptive statistics used by the CQI components."""

import math
from typing import Sequence

import numpy as np


class Statistics:
    """Statistical helpers over plain float sequences."""

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """Compute arithmetic mean."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(values))

    @staticmethod
    def population_stdev(values: Sequence[float]) -> float:
        """Compute population standard deviation (divides by n)."""
        if len(values) == 0:
            return 0.0
        return float(np.std(values))

    @staticmethod
    def coefficient_of_variation(values: Sequence[float]) -> float:
        """CV = stdev / mean, using the population stdev.

        Returns NaN when the mean is zero; callers decide the neutral value.
        """
        mean_val = Statistics.mean(values)
        if mean_val == 0:
            return math.nan
        return Statistics.population_stdev(values) / mean_val

    @staticmethod
    def clamp(value: float, low: float, high: float) -> float:
        """Clamp value into [low, high]."""
        return max(low, min(high, value))
