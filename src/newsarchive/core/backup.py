# src/newsarchive/core/backup.py
"""Database backup export and restore.

A backup is a zip of one CSV file per non-empty table, named after the
table. Restore reads such a zip back, skipping CSV files that do not
match a known table and rows whose keys already exist.
"""

import csv
import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.archive.registry import TABLE_REGISTRY, TableRegistry
from newsarchive.core.logging import get_logger

logger = get_logger(__name__)


class BackupError(Exception):
    """Raised when a backup cannot be created or restored."""


@dataclass
class ImportResult:
    """Result of restoring a backup zip."""

    total_records: int = 0
    imported_tables: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)


def _timestamp(now: datetime | None) -> str:
    if now is None:
        now = datetime.now(UTC)
    return now.strftime("%Y%m%d%H%M%S")


def _to_csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _write_csv(path: Path, records: list[dict[str, Any]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(records[0].keys()))
        writer.writeheader()
        for record in records:
            writer.writerow({k: _to_csv_value(v) for k, v in record.items()})


def create_backup_zip(
    db: ArchiveDB,
    backup_root: Path,
    *,
    now: datetime | None = None,
    registry: TableRegistry = TABLE_REGISTRY,
) -> Path:
    """Export every non-empty table to CSV and zip the result.

    Args:
        db: Archive database to export
        backup_root: Directory receiving db_backup_<timestamp>.zip
        now: Timestamp for the file name (defaults to now, UTC)
        registry: Tables to export

    Returns:
        Path to the created zip file

    Raises:
        BackupError: If no table holds any data
    """
    timestamp = _timestamp(now)
    backup_dir = backup_root / f"db_backup_{timestamp}"
    zip_path = backup_root / f"db_backup_{timestamp}.zip"

    logger.info("Backup directory", path=str(backup_dir))
    backup_dir.mkdir(parents=True, exist_ok=True)

    try:
        written = 0
        with db.connection() as conn:
            for access in registry:
                records = access.fetch_all(conn)
                if not records:
                    continue
                _write_csv(backup_dir / f"{access.name}.csv", records)
                written += 1

        if written == 0:
            raise BackupError("No data found in any tables. Backup skipped.")

        with zipfile.ZipFile(
            zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
        ) as archive:
            for csv_path in sorted(backup_dir.iterdir()):
                archive.write(csv_path, arcname=csv_path.name)
    finally:
        shutil.rmtree(backup_dir, ignore_errors=True)

    logger.info("Backup created", path=str(zip_path), tables=written)
    return zip_path


def _collect_csv_files(root: Path) -> list[Path]:
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() == ".csv"
    )


def _read_csv(path: Path) -> list[dict[str, Any]]:
    try:
        frame = pd.read_csv(
            path,
            dtype=str,  # Keep all values as strings; columns coerce them
            keep_default_na=False,  # Empty strings stay empty, become NULL later
        )
    except pd.errors.EmptyDataError:
        return []
    # DataFrame columns are strings from CSV headers
    return [
        {str(k): v for k, v in record.items()}
        for record in frame.to_dict(orient="records")
    ]


def import_backup_zip(
    db: ArchiveDB,
    zip_path: Path,
    *,
    registry: TableRegistry = TABLE_REGISTRY,
) -> ImportResult:
    """Restore rows from a backup zip into the database.

    CSV files are matched to tables by file stem and loaded in foreign-key
    dependency order. Rows whose primary key already exists are skipped.
    On SQLite, foreign key enforcement is disabled during the load and
    re-enabled afterwards, including on failure.

    Args:
        db: Archive database to load into
        zip_path: Backup zip to read

    Returns:
        ImportResult with record and table counts and skipped file names

    Raises:
        BackupError: If the zip is unreadable or holds no CSV files
    """
    resolved = Path(zip_path).resolve()
    if not resolved.is_file() or not os.access(resolved, os.R_OK):
        raise BackupError(f"Zip file not found or not readable: {resolved}")

    result = ImportResult()
    order = {name: index for index, name in enumerate(registry.names())}

    with tempfile.TemporaryDirectory(prefix="newsarchive-db-import-") as temp:
        temp_dir = Path(temp)
        try:
            with zipfile.ZipFile(resolved) as archive:
                archive.extractall(temp_dir)
        except zipfile.BadZipFile as e:
            raise BackupError(f"Not a valid zip file: {resolved}") from e

        csv_files = _collect_csv_files(temp_dir)
        if not csv_files:
            raise BackupError("No CSV files found inside the zip file")

        csv_files.sort(key=lambda path: order.get(path.stem, len(order)))

        with db.engine.connect() as conn:
            if db.is_sqlite:
                logger.info("Disabling foreign key constraints for import")
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            try:
                for csv_file in csv_files:
                    access = registry.get(csv_file.stem)
                    if access is None:
                        result.skipped_files.append(csv_file.name)
                        continue

                    records = _read_csv(csv_file)
                    if not records:
                        continue

                    result.total_records += access.bulk_insert(conn, records)
                    if access.name not in result.imported_tables:
                        result.imported_tables.append(access.name)
                    logger.debug(
                        "Imported table", table=access.name, records=len(records)
                    )
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                if db.is_sqlite:
                    logger.info("Re-enabling foreign key constraints after import")
                    conn.exec_driver_sql("PRAGMA foreign_keys=ON")
                    conn.commit()

    return result
