# tests/conftest.py
"""Shared test fixtures and helpers.

This module provides an in-memory archive database and a seeder for
articles and editorial marks.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Iterator, Sequence
from datetime import date

import pytest
from hypothesis import Phase, Verbosity, settings
from sqlalchemy import select

from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.archive.schema import (
    article_approved_table,
    article_is_relevant_table,
    articles_table,
)
from newsarchive.core.archive.store import SqlArticleStore

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


class ArchiveSeeder:
    """Insert articles and editorial marks with predictable ids.

    Usage:
        seeder = ArchiveSeeder(db)
        old_id = seeder.add_article(date(2020, 1, 1))
        seeder.approve(old_id)
    """

    def __init__(self, db: ArchiveDB) -> None:
        self._db = db
        self._next_id = 1

    def add_article(self, published_date: date | None, *, title: str = "") -> int:
        return self.add_articles([published_date], title=title)[0]

    def add_articles(
        self, published_dates: Sequence[date | None], *, title: str = ""
    ) -> list[int]:
        """Insert one article per date, with ascending ids."""
        ids = list(range(self._next_id, self._next_id + len(published_dates)))
        self._next_id += len(published_dates)
        if not ids:
            return ids
        rows = [
            {
                "id": article_id,
                "title": title or f"Article {article_id}",
                "url": f"https://news.example.com/{article_id}",
                "published_date": published,
            }
            for article_id, published in zip(ids, published_dates, strict=True)
        ]
        with self._db.connection() as conn:
            conn.execute(articles_table.insert(), rows)
        return ids

    def mark_relevant(self, article_id: int, *, is_relevant: bool = True) -> None:
        with self._db.connection() as conn:
            conn.execute(
                article_is_relevant_table.insert().values(
                    article_id=article_id, is_relevant=is_relevant
                )
            )

    def approve(self, article_id: int) -> None:
        with self._db.connection() as conn:
            conn.execute(article_approved_table.insert().values(article_id=article_id))

    def article_ids(self) -> set[int]:
        with self._db.connection() as conn:
            return {row[0] for row in conn.execute(select(articles_table.c.id))}


@pytest.fixture
def db() -> Iterator[ArchiveDB]:
    """In-memory archive database, closed after the test."""
    database = ArchiveDB.in_memory()
    yield database
    database.close()


@pytest.fixture
def store(db: ArchiveDB) -> SqlArticleStore:
    return SqlArticleStore(db)


@pytest.fixture
def seeder(db: ArchiveDB) -> ArchiveSeeder:
    return ArchiveSeeder(db)


@pytest.fixture(scope="session")
def seeder_class() -> type[ArchiveSeeder]:
    """ArchiveSeeder for tests that build their own databases (hypothesis)."""
    return ArchiveSeeder
