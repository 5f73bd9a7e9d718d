# tests/core/archive/test_store.py
"""Tests for SqlArticleStore."""

from datetime import date
from typing import Any

import pytest
from sqlalchemy import true

from newsarchive.core.archive.store import FetchOrder, SqlArticleStore


class TestSqlArticleStore:
    def test_count_eligible(self, store: SqlArticleStore, seeder: Any) -> None:
        from newsarchive.core.archive.schema import articles_table

        seeder.add_articles([date(2020, 1, 1), None, date(2021, 1, 1)])

        assert store.count_eligible(true()) == 3
        assert store.count_eligible(articles_table.c.published_date.is_(None)) == 1

    def test_fetch_ids_cursor_and_limit(self, store: SqlArticleStore, seeder: Any) -> None:
        seeder.add_articles([date(2020, 1, 1)] * 6)

        assert store.fetch_ids(true(), FetchOrder.ID, after_id=2, limit=3) == [3, 4, 5]
        assert store.fetch_ids(true(), FetchOrder.ID, after_id=6) == []

    def test_fetch_ids_by_published_date(self, store: SqlArticleStore, seeder: Any) -> None:
        seeder.add_articles(
            [date(2022, 5, 1), date(2020, 1, 1), date(2022, 5, 1), date(2021, 1, 1)]
        )

        assert store.fetch_ids(true(), FetchOrder.PUBLISHED_DATE) == [2, 4, 1, 3]

    def test_delete_by_ids_returns_rows_removed(
        self, store: SqlArticleStore, seeder: Any
    ) -> None:
        ids = seeder.add_articles([date(2020, 1, 1)] * 3)

        assert store.delete_by_ids([ids[0], ids[1], 999]) == 2
        assert seeder.article_ids() == {ids[2]}

    def test_delete_by_ids_empty_is_noop(self, store: SqlArticleStore) -> None:
        assert store.delete_by_ids([]) == 0

    def test_read_association_ids(self, store: SqlArticleStore, seeder: Any) -> None:
        first, second = seeder.add_articles([None, None])
        seeder.approve(first)
        seeder.approve(second)
        seeder.mark_relevant(second, is_relevant=False)

        assert sorted(store.read_association_ids("article_approved")) == [first, second]
        assert store.read_association_ids("article_is_relevant") == [second]

    def test_read_association_ids_unknown_table(self, store: SqlArticleStore) -> None:
        with pytest.raises(KeyError):
            store.read_association_ids("no_such_table")
