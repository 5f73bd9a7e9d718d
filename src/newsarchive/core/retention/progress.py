# src/newsarchive/core/retention/progress.py
"""Progress reporting for retention purges.

Reporters are pure observers: they render engine events and never feed
anything back into the engine.
"""

from dataclasses import dataclass
from typing import Any, Literal, Protocol

PurgePhase = Literal["found", "batch", "estimate", "done"]
PurgeMode = Literal["age", "trim"]


@dataclass(frozen=True)
class PurgeEvent:
    """A progress event emitted by PurgeEngine.

    Attributes:
        phase: found (candidates counted), batch (one delete round finished),
            estimate (one-time ETA from the sample round), done (run finished)
        mode: Purge mode that emitted the event
        total: Number of candidate rows for the run
        deleted: Cumulative rows deleted so far
        batch_deleted: Rows deleted by the round that emitted a batch event
        seconds_remaining: Estimated seconds left (estimate events only)
    """

    phase: PurgePhase
    mode: PurgeMode
    total: int
    deleted: int = 0
    batch_deleted: int = 0
    seconds_remaining: float | None = None


class ProgressReporter(Protocol):
    """Receives purge progress events."""

    def report(self, event: PurgeEvent) -> None: ...


class NullProgressReporter:
    """Reporter that discards every event."""

    def report(self, event: PurgeEvent) -> None:
        pass


def format_duration(seconds: float) -> str:
    """Render a duration as a compact human string, e.g. "1h 02m 03s"."""
    total = max(0, round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class LogProgressReporter:
    """Render purge events as structured log lines."""

    def __init__(self, logger: Any | None = None) -> None:
        if logger is None:
            from newsarchive.core.logging import get_logger

            logger = get_logger(__name__)
        self._logger = logger

    def report(self, event: PurgeEvent) -> None:
        if event.phase == "found":
            self._logger.info(
                f"Found {event.total} articles eligible for deletion",
                mode=event.mode,
                total=event.total,
            )
        elif event.phase == "batch":
            percent = 100.0 * event.deleted / event.total if event.total else 100.0
            self._logger.info(
                f"Deleted batch of {event.batch_deleted} articles "
                f"({event.deleted}/{event.total}, {percent:.1f}%)",
                mode=event.mode,
                batch_deleted=event.batch_deleted,
                deleted=event.deleted,
                total=event.total,
            )
        elif event.phase == "estimate":
            remaining = event.seconds_remaining or 0.0
            self._logger.info(
                f"Estimated time remaining: {format_duration(remaining)}",
                mode=event.mode,
                seconds_remaining=round(remaining, 2),
            )
        elif event.phase == "done":
            self._logger.info(
                f"Purge complete: deleted {event.deleted} of {event.total} articles",
                mode=event.mode,
                deleted=event.deleted,
                total=event.total,
            )
