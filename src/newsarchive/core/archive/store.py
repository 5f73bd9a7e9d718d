# src/newsarchive/core/archive/store.py
"""Article store: the narrow data interface used by the retention engine.

The retention engine never builds SQL statements itself. It hands an
eligibility predicate to the store and gets back counts and id lists.
Each call runs in its own transaction, so every delete batch commits
independently.
"""

from collections.abc import Collection
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import ColumnElement, func, select

from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.archive.registry import TableAccess
from newsarchive.core.archive.schema import articles_table, metadata

_ARTICLES = TableAccess(articles_table)


class FetchOrder(str, Enum):
    """Traversal order for candidate id fetches."""

    ID = "id"
    PUBLISHED_DATE = "published_date"


class ArticleStore(Protocol):
    """Protocol for the store consumed by PurgeEngine.

    Defines the minimal interface required by the retention engine.
    """

    def count_eligible(self, predicate: ColumnElement[bool]) -> int:
        """Count articles matching the predicate."""
        ...

    def fetch_ids(
        self,
        predicate: ColumnElement[bool],
        order: FetchOrder,
        *,
        after_id: int | None = None,
        limit: int | None = None,
    ) -> list[int]:
        """Fetch ids of articles matching the predicate in the given order."""
        ...

    def delete_by_ids(self, ids: Collection[int]) -> int:
        """Delete articles by id. Returns rows actually removed."""
        ...

    def read_association_ids(self, table_name: str) -> list[Any]:
        """Read raw article_id values from an association table."""
        ...


class SqlArticleStore:
    """ArticleStore backed by an ArchiveDB."""

    def __init__(self, db: ArchiveDB) -> None:
        self._db = db

    def count_eligible(self, predicate: ColumnElement[bool]) -> int:
        query = select(func.count()).select_from(articles_table).where(predicate)
        with self._db.connection() as conn:
            return int(conn.execute(query).scalar_one())

    def fetch_ids(
        self,
        predicate: ColumnElement[bool],
        order: FetchOrder,
        *,
        after_id: int | None = None,
        limit: int | None = None,
    ) -> list[int]:
        """Fetch eligible article ids.

        Args:
            predicate: Eligibility filter over the articles table
            order: FetchOrder.ID for cursor traversal, FetchOrder.PUBLISHED_DATE
                for oldest-first (id breaks ties between equal dates)
            after_id: Only return ids strictly greater than this cursor
            limit: Maximum number of ids to return

        Returns:
            Ordered list of article ids
        """
        query = select(articles_table.c.id).where(predicate)
        if after_id is not None:
            query = query.where(articles_table.c.id > after_id)

        if order is FetchOrder.PUBLISHED_DATE:
            query = query.order_by(
                articles_table.c.published_date.asc(), articles_table.c.id.asc()
            )
        else:
            query = query.order_by(articles_table.c.id.asc())

        if limit is not None:
            query = query.limit(limit)

        with self._db.connection() as conn:
            return [int(row[0]) for row in conn.execute(query)]

    def delete_by_ids(self, ids: Collection[int]) -> int:
        if not ids:
            return 0
        with self._db.connection() as conn:
            return _ARTICLES.delete_by_ids(conn, ids)

    def read_association_ids(self, table_name: str) -> list[Any]:
        """Read the article_id column of an association table.

        Only the article_id column is projected to bound memory use.

        Raises:
            KeyError: If the table is unknown or has no article_id column
        """
        table = metadata.tables[table_name]
        query = select(table.c["article_id"])
        with self._db.connection() as conn:
            return [row[0] for row in conn.execute(query)]
