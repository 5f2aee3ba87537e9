"""The four CQI component scores.

Each component maps to 0-100, higher meaning better shared work:

    effort balance    100 * (1 - Gini) over per-author weighted effort
    LoC balance       100 * (1 - Gini) over per-author changed lines
    temporal spread   100 * (1 - min(CV / 2, 1)) over weekly effort
    ownership spread  share of the possible authors on frequently
                      touched files

Functions here take plain (key, value) pairs so that both rated and
unrated chunks can feed them.
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..math import Gini, Statistics
from ..models import wall_clock

NEUTRAL_TEMPORAL = 50.0
NEUTRAL_OWNERSHIP = 75.0


def totals_by_author(items: Iterable[tuple[Optional[str], float]]) -> dict[str, float]:
    """Sum values per author, ignoring items without an author."""
    totals: dict[str, float] = defaultdict(float)
    for author, value in items:
        if author is not None:
            totals[author] += value
    return dict(totals)


def balance_score(totals: dict[str, float]) -> float:
    """100 * (1 - G) over per-author totals; 0 with fewer than 2 authors."""
    if len(totals) <= 1:
        return 0.0
    return Gini.balance_score(list(totals.values()))


def project_days(start: Optional[datetime], end: Optional[datetime]) -> int:
    """Whole days between start and end (0 when either is missing)."""
    if start is None or end is None:
        return 0
    return (wall_clock(end) - wall_clock(start)).days


def weekly_totals(
    items: Iterable[tuple[Optional[datetime], float]],
    start: datetime,
    total_days: int,
    week_days: int = 7,
) -> list[float]:
    """Bucket values into consecutive weeks starting at start.

    Values before the start land in the first week, values after the end
    in the last one. Items without a timestamp are skipped.
    """
    weeks = max(1, math.ceil(total_days / week_days))
    buckets = [0.0] * weeks
    origin = wall_clock(start)
    for ts, value in items:
        if ts is None:
            continue
        days = (wall_clock(ts) - origin).days
        index = int(Statistics.clamp(days // week_days, 0, weeks - 1))
        buckets[index] += value
    return buckets


def temporal_spread(
    items: Sequence[tuple[Optional[datetime], float]],
    start: Optional[datetime],
    end: Optional[datetime],
    week_days: int = 7,
    neutral: float = NEUTRAL_TEMPORAL,
) -> float:
    """Evenness of effort over the project's weeks.

    Neutral when there is nothing to bucket, the project bounds are unknown
    or empty, or no week has any effort.
    """
    if not items or start is None or end is None:
        return neutral
    total_days = project_days(start, end)
    if total_days <= 0:
        return neutral

    buckets = weekly_totals(items, start, total_days, week_days)
    cv = Statistics.coefficient_of_variation(buckets)
    if math.isnan(cv):
        return neutral
    normalized = min(cv / 2.0, 1.0)
    return 100.0 * (1.0 - normalized)


def ownership_spread(
    items: Iterable[tuple[Optional[str], Iterable[str]]],
    team_size: int,
    min_chunks: int = 3,
    team_cap: int = 4,
    neutral: float = NEUTRAL_OWNERSHIP,
) -> float:
    """How many team members share the files the team works on most.

    Only files touched by at least min_chunks chunks count. Each such file
    scores its distinct author count, capped at min(team_size, team_cap).
    """
    if team_size <= 1:
        return 0.0

    authors_by_file: dict[str, set[Optional[str]]] = defaultdict(set)
    touches: dict[str, int] = defaultdict(int)
    for author, files in items:
        for path in files:
            authors_by_file[path].add(author)
            touches[path] += 1

    significant = [f for f, n in touches.items() if n >= min_chunks]
    if not significant:
        return neutral

    cap = min(team_size, team_cap)
    shared = sum(min(len(authors_by_file[f]), cap) for f in significant)
    return 100.0 * shared / (len(significant) * cap)


def late_period_start(start: datetime, total_days: int, fraction: float = 0.8) -> datetime:
    """Start of the project's final (1 - fraction) period, on a whole day."""
    return wall_clock(start) + timedelta(days=math.floor(total_days * fraction))
