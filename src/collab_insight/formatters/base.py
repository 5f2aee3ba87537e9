"""Base formatter interface for team report rendering."""

from abc import ABC, abstractmethod
from typing import List

from ..report import TeamReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, reports: List[TeamReport]) -> None:
        """Render reports to stderr/stdout as appropriate."""

    @abstractmethod
    def format(self, reports: List[TeamReport]) -> str:
        """Return formatted string representation of reports."""
