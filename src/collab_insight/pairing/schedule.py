"""Team tutorial schedules.

Schedules are loaded in bulk between analysis runs and read during a run.
The registry hands out immutable snapshots; the pairing calculator only
ever sees a snapshot, never the registry itself.

CSV format, one slot per line::

    # team,weekday,slot
    Team4,Monday,10:00-12:00
    Team7,wed,14:00-16:00
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from ..logging_config import get_logger
from .models import DEFAULT_SESSION_DURATION, ScheduledSession

logger = get_logger(__name__)

_WEEKDAYS = {
    "monday": 0, "mon": 0, "1": 0,
    "tuesday": 1, "tue": 1, "2": 1,
    "wednesday": 2, "wed": 2, "3": 2,
    "thursday": 3, "thu": 3, "4": 3,
    "friday": 4, "fri": 4, "5": 4,
    "saturday": 5, "sat": 5, "6": 5,
    "sunday": 6, "sun": 6, "7": 6,
}


def normalize_team_name(name: str) -> str:
    return name.strip().lower()


def parse_weekday(value: str) -> int:
    """Parse "Monday", "mon" or "1" into a date.weekday() index."""
    try:
        return _WEEKDAYS[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown day of week: {value}")


def parse_slot_start(slot: str) -> time:
    """Start time of an "HH:MM-HH:MM" slot."""
    start = slot.split("-", 1)[0].strip()
    try:
        return datetime.strptime(start, "%H:%M").time()
    except ValueError:
        raise ValueError(f"Invalid time slot: {slot}")


def weekly_starts(
    weekday: int, start_time: time, semester_start: date, semester_end: date
) -> list[datetime]:
    """Session start times for every matching weekday in [start, end]."""
    starts = []
    current = semester_start
    while current <= semester_end:
        if current.weekday() == weekday:
            starts.append(datetime.combine(current, start_time))
        current += timedelta(days=1)
    return starts


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Immutable view of all team sessions at one point in time."""

    sessions: Mapping[str, tuple[ScheduledSession, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def sessions_for(self, team_name: Optional[str]) -> tuple[ScheduledSession, ...]:
        if team_name is None:
            return ()
        return self.sessions.get(normalize_team_name(team_name), ())

    @property
    def teams(self) -> list[str]:
        return sorted(self.sessions)

    @classmethod
    def empty(cls) -> "ScheduleSnapshot":
        return cls()


class ScheduleRegistry:
    """Mutable schedule store; mutations are serialised by a lock."""

    def __init__(self, session_duration: timedelta = DEFAULT_SESSION_DURATION):
        self.session_duration = session_duration
        self._lock = threading.Lock()
        self._sessions: dict[str, tuple[ScheduledSession, ...]] = {}

    def register(self, team_name: str, starts: list[datetime]) -> None:
        sessions = tuple(
            ScheduledSession(start=s, duration=self.session_duration) for s in sorted(starts)
        )
        with self._lock:
            self._sessions[normalize_team_name(team_name)] = sessions
        logger.info(f"Registered {len(sessions)} sessions for team {team_name}")

    def register_weekly(
        self,
        team_name: str,
        weekday: int,
        start_time: time,
        semester_start: date,
        semester_end: date,
    ) -> None:
        """Register a weekly slot for every matching day in the semester."""
        self.register(
            team_name, weekly_starts(weekday, start_time, semester_start, semester_end)
        )

    def load_csv(self, text: str, semester_start: date, semester_end: date) -> int:
        """Replace all schedules with the ones in a CSV document.

        Blank lines and lines starting with '#' are ignored. Malformed
        lines are skipped with a warning.

        Returns:
            Number of teams registered.
        """
        parsed: dict[str, list[datetime]] = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = [p.strip() for p in line.split(",")]
            if len(parts) < 3:
                logger.warning(f"Invalid schedule line, skipping: {line}")
                continue
            team, day, slot = parts[0], parts[1], parts[2]
            try:
                weekday = parse_weekday(day)
                start_time = parse_slot_start(slot)
            except ValueError as e:
                logger.warning(f"Skipping schedule for team {team}: {e}")
                continue
            parsed.setdefault(team, []).extend(
                weekly_starts(weekday, start_time, semester_start, semester_end)
            )

        with self._lock:
            self._sessions = {
                normalize_team_name(team): tuple(
                    ScheduledSession(start=s, duration=self.session_duration)
                    for s in sorted(starts)
                )
                for team, starts in parsed.items()
            }
        logger.info(f"Loaded schedules for {len(parsed)} teams")
        return len(parsed)

    def clear(self) -> None:
        with self._lock:
            self._sessions = {}

    def snapshot(self) -> ScheduleSnapshot:
        with self._lock:
            return ScheduleSnapshot(MappingProxyType(dict(self._sessions)))
