# tests/core/test_status.py
"""Tests for the archive status report."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from structlog.testing import capture_logs

from newsarchive.core.archive.database import ArchiveDB

AS_OF = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)


def _days_ago(days: int) -> Any:
    return AS_OF.date() - timedelta(days=days)


class TestGetArchiveStatus:
    def test_empty_archive(self, db: ArchiveDB) -> None:
        from newsarchive.core.status import get_archive_status

        status = get_archive_status(db, 180, as_of=AS_OF)

        assert status.total_articles == 0
        assert status.deletable_old_articles == 0
        assert status.cutoff_date == _days_ago(180).isoformat()

    def test_counts(self, db: ArchiveDB, seeder: Any) -> None:
        from newsarchive.core.status import get_archive_status

        _old_plain, old_approved, old_irrelevant = seeder.add_articles(
            [_days_ago(400)] * 3
        )
        recent_relevant = seeder.add_article(_days_ago(5))
        seeder.add_article(None)
        seeder.approve(old_approved)
        seeder.approve(old_approved)
        seeder.mark_relevant(old_irrelevant, is_relevant=False)
        seeder.mark_relevant(recent_relevant, is_relevant=True)

        status = get_archive_status(db, 180, as_of=AS_OF)

        assert status.total_articles == 5
        assert status.irrelevant_articles == 1
        assert status.approved_articles == 1  # distinct article ids
        assert status.old_articles == 3
        assert status.deletable_old_articles == 1

    def test_deletable_matches_purge(self, db: ArchiveDB, seeder: Any) -> None:
        from newsarchive.core.archive.store import SqlArticleStore
        from newsarchive.core.retention.purge import PurgeEngine
        from newsarchive.core.status import get_archive_status

        ids = seeder.add_articles([_days_ago(d) for d in (10, 100, 200, 300, 400)])
        seeder.approve(ids[3])

        status = get_archive_status(db, 90, as_of=AS_OF)
        result = PurgeEngine(SqlArticleStore(db)).purge_by_age(90, as_of=AS_OF)

        assert status.deletable_old_articles == result.deleted_count == 3

    def test_negative_threshold_rejected(self, db: ArchiveDB) -> None:
        from newsarchive.core.status import get_archive_status

        with pytest.raises(ValueError):
            get_archive_status(db, -1)


class TestLogStatus:
    def test_emits_summary_lines(self) -> None:
        from newsarchive.core.logging import get_logger
        from newsarchive.core.status import ArchiveStatus, log_status

        status = ArchiveStatus(
            total_articles=10,
            irrelevant_articles=2,
            approved_articles=3,
            old_articles=4,
            deletable_old_articles=1,
            cutoff_date="2026-04-21",
        )

        with capture_logs() as logs:
            log_status(status, get_logger("status"))

        events = [entry["event"] for entry in logs]
        assert events[0] == "Database status summary:"
        assert "- Total articles: 10" in events
        assert "- Articles older than 2026-04-21: 4" in events
