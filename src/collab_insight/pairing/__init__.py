"""Pair-programming signals from commit timing."""

from .calculator import PairingSignalCalculator
from .models import PairingSignal, ScheduledSession
from .schedule import ScheduleRegistry, ScheduleSnapshot

__all__ = [
    "PairingSignalCalculator",
    "PairingSignal",
    "ScheduledSession",
    "ScheduleRegistry",
    "ScheduleSnapshot",
]
