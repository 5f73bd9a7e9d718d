# tests/core/retention/test_eligibility.py
"""Tests for eligibility predicates and cutoff computation."""

from datetime import UTC, date, datetime, timedelta, timezone
from typing import Any

from newsarchive.core.archive.store import SqlArticleStore


class TestComputeCutoffDate:
    """Tests for compute_cutoff_date."""

    def test_subtracts_days_from_utc_date(self) -> None:
        from newsarchive.core.retention.eligibility import compute_cutoff_date

        as_of = datetime(2026, 10, 18, 23, 30, tzinfo=UTC)

        assert compute_cutoff_date(180, as_of) == date(2026, 4, 21)

    def test_uses_utc_calendar_day(self) -> None:
        """Late evening west of UTC is already tomorrow in UTC."""
        from newsarchive.core.retention.eligibility import compute_cutoff_date

        as_of = datetime(2026, 10, 18, 22, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert compute_cutoff_date(0, as_of) == date(2026, 10, 19)

    def test_naive_datetime_treated_as_utc(self) -> None:
        from newsarchive.core.retention.eligibility import compute_cutoff_date

        assert compute_cutoff_date(1, datetime(2026, 1, 1, 0, 0)) == date(2025, 12, 31)

    def test_defaults_to_now(self) -> None:
        from newsarchive.core.retention.eligibility import compute_cutoff_date

        today = datetime.now(UTC).date()
        cutoff = compute_cutoff_date(10)

        # Allow for a UTC midnight rollover during the test
        assert cutoff in {today - timedelta(days=10), today - timedelta(days=9)}

    def test_format_cutoff(self) -> None:
        from newsarchive.core.retention.eligibility import format_cutoff

        assert format_cutoff(date(2026, 4, 1)) == "2026-04-01"


class TestPredicates:
    """Predicates evaluated against a real database."""

    def test_age_predicate_without_protection_omits_not_in(self) -> None:
        from newsarchive.core.retention.eligibility import age_cutoff_predicate

        sql = str(age_cutoff_predicate(date(2026, 1, 1), frozenset()))

        assert "NOT IN" not in sql.upper()

    def test_age_predicate_with_protection_excludes_ids(self) -> None:
        from newsarchive.core.retention.eligibility import age_cutoff_predicate

        sql = str(age_cutoff_predicate(date(2026, 1, 1), frozenset({3, 1})))

        assert "NOT IN" in sql.upper()

    def test_age_predicate_matches(self, store: SqlArticleStore, seeder: Any) -> None:
        from newsarchive.core.archive.store import FetchOrder
        from newsarchive.core.retention.eligibility import age_cutoff_predicate

        cutoff = date(2026, 1, 1)
        before, protected, _on, _after, _undated = seeder.add_articles(
            [
                date(2025, 12, 31),
                date(2025, 6, 1),
                cutoff,
                date(2026, 2, 1),
                None,
            ]
        )

        predicate = age_cutoff_predicate(cutoff, frozenset({protected}))

        assert store.fetch_ids(predicate, FetchOrder.ID) == [before]
        assert store.count_eligible(predicate) == 1

    def test_trim_predicate_matches_dated_unprotected(
        self, store: SqlArticleStore, seeder: Any
    ) -> None:
        from newsarchive.core.archive.store import FetchOrder
        from newsarchive.core.retention.eligibility import trim_predicate

        dated, undated, protected, recent = seeder.add_articles(
            [date(2020, 1, 1), None, date(2019, 1, 1), date(2026, 10, 1)]
        )

        predicate = trim_predicate(frozenset({protected}))

        assert store.fetch_ids(predicate, FetchOrder.PUBLISHED_DATE) == [dated, recent]
        assert undated not in store.fetch_ids(predicate, FetchOrder.ID)
