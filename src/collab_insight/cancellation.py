"""Cooperative cancellation shared between a caller and running analyses."""

import threading

from .exceptions import AnalysisCancelledError


class CancellationToken:
    """Flag a caller sets to stop analysis at the next external-call boundary."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise AnalysisCancelledError if cancel() has been called."""
        if self._event.is_set():
            raise AnalysisCancelledError(stage)
