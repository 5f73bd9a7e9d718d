# src/newsarchive/core/retention/purge.py
"""Batched purge engine for article retention.

Deletes unprotected articles in bounded-size batches so that no single
transaction holds locks on, or logs, an unbounded number of rows. Two
modes share the protection rule and batching:

- Age mode walks a monotonic id cursor and removes every unprotected
  article published before a cutoff date. When the run is larger than one
  batch, the first round is a smaller timed sample used to estimate the
  remaining time once.
- Trim mode removes an exact number of the oldest unprotected articles,
  ordered by publish date with id as tie-break.

Each batch commits on its own. An interrupted run leaves already-deleted
batches deleted, and re-running the same operation picks up what remains.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter
from typing import TYPE_CHECKING, Any

from newsarchive.core.archive.store import ArticleStore, FetchOrder
from newsarchive.core.logging import get_logger
from newsarchive.core.retention.eligibility import (
    age_cutoff_predicate,
    compute_cutoff_date,
    format_cutoff,
    trim_predicate,
)
from newsarchive.core.retention.progress import (
    NullProgressReporter,
    ProgressReporter,
    PurgeEvent,
)
from newsarchive.core.retention.protection import resolve_protected_ids

if TYPE_CHECKING:
    from newsarchive.core.config import PurgeSettings

DEFAULT_BATCH_SIZE = 5000
DEFAULT_SAMPLE_SIZE = 1000

logger = get_logger(__name__)


@dataclass(frozen=True)
class AgePurgeResult:
    """Result of an age-based purge."""

    deleted_count: int
    cutoff_date: str
    duration_seconds: float = 0.0


@dataclass(frozen=True)
class TrimPurgeResult:
    """Result of a count-based trim purge."""

    requested_count: int
    found_count: int
    deleted_count: int
    duration_seconds: float = 0.0


def _require_non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


class PurgeEngine:
    """Deletes eligible articles in bounded batches.

    Only purge_by_age and purge_by_count are public. Cursor position,
    batch sizing and the protected-id snapshot live only for the duration
    of one call.
    """

    def __init__(
        self,
        store: ArticleStore,
        reporter: ProgressReporter | None = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        clock: Callable[[], float] = perf_counter,
    ) -> None:
        """Initialize PurgeEngine.

        Args:
            store: Article store the engine reads from and deletes through
            reporter: Receives progress events (defaults to a no-op reporter)
            batch_size: Maximum ids per delete statement
            sample_size: Ids in the first, timed round of a large age purge
            clock: Monotonic clock in seconds, used for timing and the ETA

        Raises:
            ValueError: If sizes are not positive or sample_size > batch_size
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        if sample_size <= 0:
            raise ValueError(f"sample_size must be > 0, got {sample_size}")
        if sample_size > batch_size:
            raise ValueError(
                f"sample_size ({sample_size}) cannot exceed batch_size ({batch_size})"
            )
        self._store = store
        self._reporter = reporter if reporter is not None else NullProgressReporter()
        self._batch_size = batch_size
        self._sample_size = sample_size
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        store: ArticleStore,
        settings: "PurgeSettings",
        reporter: ProgressReporter | None = None,
    ) -> "PurgeEngine":
        """Build an engine with batch sizing taken from PurgeSettings."""
        return cls(
            store,
            reporter,
            batch_size=settings.batch_size,
            sample_size=settings.sample_size,
        )

    def purge_by_age(
        self,
        days_old_threshold: int,
        *,
        as_of: datetime | None = None,
    ) -> AgePurgeResult:
        """Delete every unprotected article published before the cutoff.

        The cutoff is today (UTC) minus days_old_threshold, computed once.
        Rounds walk ids in ascending order behind a cursor, so an id the
        cursor has passed is never revisited, and the run never deletes
        more rows than were counted up front.

        Args:
            days_old_threshold: Articles published before today minus this
                many days are eligible
            as_of: Reference time for the cutoff (defaults to now)

        Returns:
            AgePurgeResult with rows deleted and the ISO cutoff date

        Raises:
            ValueError: If days_old_threshold is not a non-negative integer
        """
        _require_non_negative_int(days_old_threshold, "days_old_threshold")
        started = self._clock()

        cutoff = compute_cutoff_date(days_old_threshold, as_of)
        cutoff_date = format_cutoff(cutoff)
        protected_ids = resolve_protected_ids(self._store)
        predicate = age_cutoff_predicate(cutoff, protected_ids)

        total = self._store.count_eligible(predicate)
        self._emit(PurgeEvent(phase="found", mode="age", total=total))

        deleted = 0
        if total > 0:
            sampling = total > self._batch_size
            round_size = self._sample_size if sampling else self._batch_size
            last_id = 0

            while deleted < total:
                limit = min(round_size, total - deleted)
                round_started = self._clock()
                ids = self._store.fetch_ids(
                    predicate, FetchOrder.ID, after_id=last_id, limit=limit
                )
                if not ids:
                    break

                batch_deleted = self._store.delete_by_ids(ids)
                round_seconds = self._clock() - round_started
                deleted += batch_deleted
                last_id = ids[-1]
                self._emit(
                    PurgeEvent(
                        phase="batch",
                        mode="age",
                        total=total,
                        deleted=deleted,
                        batch_deleted=batch_deleted,
                    )
                )

                if sampling:
                    sampling = False
                    round_size = self._batch_size
                    if batch_deleted > 0:
                        per_row = round_seconds / batch_deleted
                        self._emit(
                            PurgeEvent(
                                phase="estimate",
                                mode="age",
                                total=total,
                                deleted=deleted,
                                seconds_remaining=per_row * (total - deleted),
                            )
                        )

        self._emit(PurgeEvent(phase="done", mode="age", total=total, deleted=deleted))
        return AgePurgeResult(
            deleted_count=deleted,
            cutoff_date=cutoff_date,
            duration_seconds=self._clock() - started,
        )

    def purge_by_count(self, requested_count: int) -> TrimPurgeResult:
        """Delete the requested number of oldest unprotected articles.

        Candidates are articles with a known publish date, ordered by
        (published_date, id). The full candidate list is fetched once and
        then deleted in sequential batches of at most batch_size ids.
        Finding fewer candidates than requested is not an error.

        Args:
            requested_count: Number of articles to remove

        Returns:
            TrimPurgeResult with requested, found and deleted counts

        Raises:
            ValueError: If requested_count is not a non-negative integer
        """
        _require_non_negative_int(requested_count, "requested_count")
        started = self._clock()

        protected_ids = resolve_protected_ids(self._store)
        predicate = trim_predicate(protected_ids)

        ids: list[int] = []
        if requested_count > 0:
            ids = self._store.fetch_ids(
                predicate, FetchOrder.PUBLISHED_DATE, limit=requested_count
            )
        found = len(ids)
        self._emit(PurgeEvent(phase="found", mode="trim", total=found))

        deleted = 0
        for start in range(0, found, self._batch_size):
            batch = ids[start : start + self._batch_size]
            batch_deleted = self._store.delete_by_ids(batch)
            deleted += batch_deleted
            self._emit(
                PurgeEvent(
                    phase="batch",
                    mode="trim",
                    total=found,
                    deleted=deleted,
                    batch_deleted=batch_deleted,
                )
            )

        self._emit(PurgeEvent(phase="done", mode="trim", total=found, deleted=deleted))
        return TrimPurgeResult(
            requested_count=requested_count,
            found_count=found,
            deleted_count=deleted,
            duration_seconds=self._clock() - started,
        )

    def _emit(self, event: PurgeEvent) -> None:
        """Deliver an event to the reporter.

        Reporter failures are logged and dropped; they never abort a purge.
        """
        try:
            self._reporter.report(event)
        except Exception as e:
            logger.warning(
                "Progress reporter failed",
                phase=event.phase,
                mode=event.mode,
                error=str(e),
            )
