"""Pairing-signal types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..models import wall_clock

DEFAULT_SESSION_DURATION = timedelta(minutes=90)


@dataclass(frozen=True)
class ScheduledSession:
    """A co-presence window (tutorial slot) for one team."""

    start: datetime
    duration: timedelta = DEFAULT_SESSION_DURATION

    @property
    def end(self) -> datetime:
        return self.start + self.duration

    def contains(self, ts: datetime) -> bool:
        """True when ts falls in [start, start + duration)."""
        local = wall_clock(ts)
        start = wall_clock(self.start)
        return start <= local < start + self.duration


@dataclass(frozen=True)
class PairingSignal:
    """Alternation and co-editing rates (0-1) and composite score (0-100)."""

    alternation_rate: float
    co_editing_rate: float
    score: float
    weak_signal_penalty: bool = False

    @classmethod
    def none(cls) -> "PairingSignal":
        return cls(0.0, 0.0, 0.0)

    def to_dict(self) -> dict[str, float | bool]:
        return {
            "alternation_rate": self.alternation_rate,
            "co_editing_rate": self.co_editing_rate,
            "score": self.score,
            "weak_signal_penalty": self.weak_signal_penalty,
        }
