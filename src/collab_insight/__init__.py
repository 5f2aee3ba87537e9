"""
Collab Insight - Team Contribution Fairness Analysis

Scores how evenly a student team shared the work in its repository. Commits
are grouped into reviewable chunks, trivial changes are filtered out, the
remaining work is rated by an external effort judge, and the ratings are
combined into a Collaboration Quality Index (0-100) with fairness flags.
"""

__version__ = "0.1.0"

from .api import analyze
from .cancellation import CancellationToken
from .config import AnalysisConfig, load_config
from .cqi import CqiResult
from .orchestrator import FairnessOrchestrator, TeamJob
from .report import ReportStatus, TeamReport
from .roster import TeamMember, TeamRoster

__all__ = [
    "analyze",  # Main entry point
    "FairnessOrchestrator",  # Batch / advanced usage
    "TeamJob",
    "TeamReport",
    "ReportStatus",
    "CqiResult",
    "TeamMember",
    "TeamRoster",
    "AnalysisConfig",
    "load_config",
    "CancellationToken",
]
