# src/newsarchive/core/archive/registry.py
"""Explicit table registry for generic table operations.

Backup and restore work over every archive table without per-table code.
Rather than discovering tables by introspection at call time, the registry
is built once from the schema metadata and maps each table name to a
TableAccess exposing count, fetch, delete and bulk-insert capabilities.
"""

from collections.abc import Collection, Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    Connection,
    Date,
    DateTime,
    Insert,
    Integer,
    MetaData,
    Table,
    delete,
    func,
    insert,
    select,
)
from sqlalchemy.dialects import postgresql

from newsarchive.core.archive.schema import metadata as archive_metadata

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n"})


def coerce_value(column_type: Any, raw: Any) -> Any:
    """Convert a raw (usually string) value to the column's Python type.

    Empty strings become NULL. Values that are not strings pass through.

    Raises:
        ValueError: If the string cannot be parsed for the column type
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        return raw
    value = raw.strip()
    if value == "":
        return None

    # Boolean before Integer: both may be backed by integers in SQLite
    if isinstance(column_type, Boolean):
        lowered = value.lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Invalid boolean value: {raw!r}")
    if isinstance(column_type, Integer):
        try:
            return int(value)
        except ValueError:
            pass
        # Whole-number floats such as "12.0" only
        number = float(value)
        if not number.is_integer():
            raise ValueError(f"Invalid integer value: {raw!r}")
        return int(number)
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(column_type, Date):
        return date.fromisoformat(value)
    return raw


@dataclass(frozen=True)
class TableAccess:
    """Typed read/write capability over one table.

    All operations run on a caller-supplied connection so the caller
    controls transaction boundaries.
    """

    table: Table

    @property
    def name(self) -> str:
        return self.table.name

    def count(self, conn: Connection) -> int:
        query = select(func.count()).select_from(self.table)
        return int(conn.execute(query).scalar_one())

    def fetch_all(self, conn: Connection) -> list[dict[str, Any]]:
        """Fetch every row as a plain dict, ordered by primary key."""
        query = select(self.table).order_by(*self.table.primary_key.columns)
        return [dict(row) for row in conn.execute(query).mappings()]

    def delete_by_ids(self, conn: Connection, ids: Collection[int]) -> int:
        """Delete rows by their integer "id" primary key."""
        if not ids:
            return 0
        statement = delete(self.table).where(self.table.c["id"].in_(list(ids)))
        return int(conn.execute(statement).rowcount)

    def coerce_record(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce a raw record to column types, dropping unknown columns."""
        return {
            column.name: coerce_value(column.type, record[column.name])
            for column in self.table.columns
            if column.name in record
        }

    def bulk_insert(
        self,
        conn: Connection,
        records: Sequence[Mapping[str, Any]],
        *,
        ignore_duplicates: bool = True,
    ) -> int:
        """Insert records, optionally skipping rows whose keys already exist.

        Returns:
            Number of records submitted (duplicates included)
        """
        if not records:
            return 0
        rows = [self.coerce_record(record) for record in records]
        # executemany needs the same keys in every row
        keys = [c.name for c in self.table.columns if any(c.name in row for row in rows)]
        rows = [{key: row.get(key) for key in keys} for row in rows]
        conn.execute(self._insert_statement(conn, ignore_duplicates), rows)
        return len(rows)

    def _insert_statement(self, conn: Connection, ignore_duplicates: bool) -> Insert:
        if not ignore_duplicates:
            return insert(self.table)
        dialect = conn.dialect.name
        if dialect == "sqlite":
            return insert(self.table).prefix_with("OR IGNORE")
        if dialect == "postgresql":
            return postgresql.insert(self.table).on_conflict_do_nothing()
        raise NotImplementedError(
            f"Duplicate-ignoring insert not supported for dialect: {dialect}"
        )


class TableRegistry:
    """Mapping of table name to TableAccess, in foreign-key dependency order."""

    def __init__(self, tables: Sequence[Table]) -> None:
        self._entries: dict[str, TableAccess] = {
            table.name: TableAccess(table) for table in tables
        }

    @classmethod
    def from_metadata(cls, metadata: MetaData) -> "TableRegistry":
        return cls(metadata.sorted_tables)

    def get(self, name: str) -> TableAccess | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[TableAccess]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


# Built once at import; the schema is static for the process lifetime
TABLE_REGISTRY = TableRegistry.from_metadata(archive_metadata)
