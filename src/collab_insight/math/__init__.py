"""Mathematical utilities for contribution analysis."""

from .gini import Gini
from .statistics import Statistics

__all__ = [
    "Gini",
    "Statistics",
]
