"""Quiet formatter: one "team<TAB>cqi<TAB>status" line per team."""

from typing import List

from ..report import TeamReport
from .base import BaseFormatter


class QuietFormatter(BaseFormatter):
    def render(self, reports: List[TeamReport]) -> None:
        print(self.format(reports))

    def format(self, reports: List[TeamReport]) -> str:
        return "\n".join(f"{r.team}\t{r.score:.1f}\t{r.status.value}" for r in reports)
