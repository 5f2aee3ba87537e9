"""Exception hierarchy for Collab Insight."""

from .analysis import (
    AnalysisCancelledError,
    AnalysisError,
    DiffSourceError,
    JudgeError,
)
from .base import CollabInsightError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "CollabInsightError",
    "AnalysisError",
    "AnalysisCancelledError",
    "DiffSourceError",
    "JudgeError",
    "ConfigurationError",
    "InvalidConfigError",
]
