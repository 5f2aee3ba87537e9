"""Collaboration Quality Index computation."""

from .aggregator import CqiAggregator
from .models import ComponentScores, CqiResult, Penalty, PenaltyType
from .penalties import PenaltyDetector

__all__ = [
    "CqiAggregator",
    "ComponentScores",
    "CqiResult",
    "Penalty",
    "PenaltyType",
    "PenaltyDetector",
]
