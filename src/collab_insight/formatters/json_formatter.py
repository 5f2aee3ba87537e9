"""JSON formatter for Collab Insight."""

import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, List

from ..report import TeamReport
from .base import BaseFormatter


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(_jsonable(k)): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def report_to_dict(report: TeamReport) -> dict[str, Any]:
    """Plain-data view of a report; CQI rounded to one decimal."""
    data = _jsonable(asdict(report))
    data["score"] = round(report.score, 1)
    data["requires_review"] = report.requires_review
    if data.get("cqi") is not None:
        data["cqi"]["cqi"] = round(report.cqi.cqi, 1)
    return data


class JsonFormatter(BaseFormatter):
    """Render reports as JSON."""

    def render(self, reports: List[TeamReport]) -> None:
        print(self.format(reports))

    def format(self, reports: List[TeamReport]) -> str:
        return json.dumps([report_to_dict(r) for r in reports], indent=2)
