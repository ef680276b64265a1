"""Named stopwatches scoped to one loop run."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class _TimerRecord:
    started_at: float
    ended_at: float | None = None
    duration_ms: int | None = None


class Timer:
    """Start/stop registry keyed by identifier (``"total"``, ``"iteration-3"``)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._records: dict[str, _TimerRecord] = {}

    def start(self, timer_id: str) -> None:
        """Start (or restart) the stopwatch ``timer_id``."""

        self._records[timer_id] = _TimerRecord(started_at=self._clock())

    def end(self, timer_id: str) -> int:
        """Stop ``timer_id`` and return elapsed milliseconds."""

        record = self._records.get(timer_id)
        if record is None:
            raise KeyError(f"Timer with id {timer_id!r} not found")
        record.ended_at = self._clock()
        record.duration_ms = int((record.ended_at - record.started_at) * 1000)
        return record.duration_ms

    def duration(self, timer_id: str) -> int | None:
        record = self._records.get(timer_id)
        return record.duration_ms if record is not None else None

    def clear(self, timer_id: str | None = None) -> None:
        if timer_id is None:
            self._records.clear()
            return
        self._records.pop(timer_id, None)


def format_duration(milliseconds: int) -> str:
    """Render a duration as ``850ms``, ``12s`` or ``3m 5s``."""

    if milliseconds < 1000:
        return f"{milliseconds}ms"
    seconds = milliseconds // 1000
    minutes = seconds // 60
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"
