"""Analysis-related exceptions: diff access, judge calls, cancellation."""

from typing import Optional

from .base import CollabInsightError


class AnalysisError(CollabInsightError):
    """Base class for analysis-related errors."""
    pass


class DiffSourceError(AnalysisError):
    """Raised when commit content cannot be read from the repository."""

    def __init__(self, repo_path: str, reason: str, commit: Optional[str] = None):
        details = {"repo_path": repo_path, "reason": reason}
        if commit:
            details["commit"] = commit
        super().__init__(f"Cannot read diffs from {repo_path}", details=details)
        self.repo_path = repo_path
        self.reason = reason
        self.commit = commit


class JudgeError(AnalysisError):
    """Raised by a judge client when the external call fails."""

    def __init__(self, reason: str, model: Optional[str] = None):
        details = {"reason": reason}
        if model:
            details["model"] = model
        super().__init__(f"Effort judge call failed: {reason}", details=details)
        self.reason = reason
        self.model = model


class AnalysisCancelledError(CollabInsightError):
    """Raised when a caller cancels an analysis run.

    Not a subclass of AnalysisError: handlers that absorb ordinary failures
    must let cancellation through.
    """

    def __init__(self, stage: str):
        super().__init__(f"Analysis cancelled {stage}", details={"stage": stage})
        self.stage = stage
