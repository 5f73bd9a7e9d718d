# src/newsarchive/cli.py
"""newsarchive Command Line Interface.

Entry point for the newsarchive CLI tool.
"""

import json
from dataclasses import asdict
from pathlib import Path

import typer
from pydantic import ValidationError

from newsarchive import __version__
from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.config import ArchiveSettings, load_settings
from newsarchive.core.logging import configure_logging, get_logger

app = typer.Typer(
    name="newsarchive",
    help="newsarchive: keep a news article archive at a bounded size.",
    no_args_is_help=True,
)

logger = get_logger(__name__)

SETTINGS_HELP = "Path to settings YAML file (defaults to ./settings.yaml if present)."


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"newsarchive version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """newsarchive: keep a news article archive at a bounded size."""
    pass


def _load_config(settings: str | None) -> ArchiveSettings:
    """Load settings and configure logging, exiting on configuration errors."""
    settings_path: Path | None = None
    if settings:
        settings_path = Path(settings)
    elif Path("settings.yaml").exists():
        settings_path = Path("settings.yaml")

    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    configure_logging(config.logging)
    return config


def _open_db(config: ArchiveSettings) -> ArchiveDB:
    """Open the archive database, creating it when missing."""
    try:
        return ArchiveDB.from_url(config.database.url, echo=config.database.echo)
    except Exception as e:
        typer.echo(f"Error connecting to database: {e}", err=True)
        raise typer.Exit(1) from None


def _log_status(db: ArchiveDB, days_old_threshold: int) -> None:
    from newsarchive.core.status import get_archive_status, log_status

    log_status(get_archive_status(db, days_old_threshold), logger)


@app.command()
def purge(
    days: int | None = typer.Option(
        None,
        "--days",
        "-d",
        min=0,
        help="Delete unprotected articles published more than this many days ago "
        "(default: purge.default_days, 180).",
    ),
    settings: str | None = typer.Option(
        None, "--settings", "-s", help=SETTINGS_HELP
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show how many articles would be deleted without deleting.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt.",
    ),
) -> None:
    """Delete old articles that carry no relevance or approval mark.

    Deletes in batches; an interrupted purge can simply be run again.

    Examples:

        # See what would be deleted
        newsarchive purge --dry-run

        # Delete articles older than 90 days
        newsarchive purge --days 90 --yes
    """
    from newsarchive.core.archive.store import SqlArticleStore
    from newsarchive.core.retention.progress import LogProgressReporter
    from newsarchive.core.retention.purge import PurgeEngine
    from newsarchive.core.status import get_archive_status

    config = _load_config(settings)
    threshold = days if days is not None else config.purge.default_days
    db = _open_db(config)

    try:
        if dry_run:
            status = get_archive_status(db, threshold)
            typer.echo(
                f"Would delete {status.deletable_old_articles} article(s) "
                f"published before {status.cutoff_date}."
            )
            return

        if not yes:
            confirm = typer.confirm(
                f"Delete unprotected articles older than {threshold} days?"
            )
            if not confirm:
                typer.echo("Aborted.")
                raise typer.Exit(1)

        logger.info(
            f"Deleting articles older than {threshold} days without relevance or approval"
        )
        engine = PurgeEngine.from_settings(
            SqlArticleStore(db), config.purge, LogProgressReporter()
        )
        result = engine.purge_by_age(threshold)
        typer.echo(
            f"Deleted {result.deleted_count} articles older than {result.cutoff_date} "
            f"in {result.duration_seconds:.2f}s"
        )
        _log_status(db, threshold)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error during purge: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()


@app.command()
def trim(
    count: int = typer.Option(
        ...,
        "--count",
        "-c",
        min=0,
        help="Number of oldest unprotected articles to delete.",
    ),
    settings: str | None = typer.Option(
        None, "--settings", "-s", help=SETTINGS_HELP
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show how many articles would be deleted without deleting.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt.",
    ),
) -> None:
    """Delete an exact number of the oldest unprotected articles.

    Articles are removed oldest publish date first, regardless of age.
    Articles without a publish date are never trimmed.
    """
    from newsarchive.core.archive.store import SqlArticleStore
    from newsarchive.core.retention.eligibility import trim_predicate
    from newsarchive.core.retention.progress import LogProgressReporter
    from newsarchive.core.retention.protection import resolve_protected_ids
    from newsarchive.core.retention.purge import PurgeEngine

    config = _load_config(settings)
    db = _open_db(config)

    try:
        store = SqlArticleStore(db)
        if dry_run:
            eligible = store.count_eligible(
                trim_predicate(resolve_protected_ids(store))
            )
            typer.echo(
                f"Would delete {min(count, eligible)} of {count} requested "
                f"article(s) ({eligible} eligible)."
            )
            return

        if not yes:
            confirm = typer.confirm(f"Delete the {count} oldest unprotected articles?")
            if not confirm:
                typer.echo("Aborted.")
                raise typer.Exit(1)

        engine = PurgeEngine.from_settings(store, config.purge, LogProgressReporter())
        result = engine.purge_by_count(count)
        typer.echo(
            f"Trim completed: requested {result.requested_count}, "
            f"found {result.found_count}, deleted {result.deleted_count}"
        )
        if result.found_count < result.requested_count:
            typer.echo(
                f"Only {result.found_count} eligible article(s) were available."
            )
        _log_status(db, config.purge.default_days)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error during trim: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()


@app.command()
def status(
    days: int | None = typer.Option(
        None,
        "--days",
        "-d",
        min=0,
        help="Age threshold in days for the old/deletable counts "
        "(default: purge.default_days, 180).",
    ),
    settings: str | None = typer.Option(
        None, "--settings", "-s", help=SETTINGS_HELP
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Show archive size and how much an age purge would remove."""
    from newsarchive.core.status import get_archive_status

    config = _load_config(settings)
    db = _open_db(config)

    try:
        report = get_archive_status(
            db, days if days is not None else config.purge.default_days
        )
    except Exception as e:
        typer.echo(f"Error reading status: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()

    if json_output:
        typer.echo(json.dumps(asdict(report), indent=2))
        return

    typer.echo("Database status summary:")
    typer.echo(f"  Total articles: {report.total_articles}")
    typer.echo(f"  Articles marked not relevant: {report.irrelevant_articles}")
    typer.echo(f"  Articles approved: {report.approved_articles}")
    typer.echo(f"  Articles older than {report.cutoff_date}: {report.old_articles}")
    typer.echo(f"  Old articles eligible for deletion: {report.deletable_old_articles}")


@app.command()
def backup(
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory for the backup zip (default: backup.path from settings).",
    ),
    settings: str | None = typer.Option(
        None, "--settings", "-s", help=SETTINGS_HELP
    ),
) -> None:
    """Export every non-empty table to CSV inside a timestamped zip."""
    from newsarchive.core.backup import BackupError, create_backup_zip

    config = _load_config(settings)

    if output:
        backup_root = Path(output)
    elif config.backup.path is not None:
        backup_root = config.backup.path
    else:
        typer.echo("Error: No backup directory configured.", err=True)
        typer.echo("Specify --output or set backup.path in settings.", err=True)
        raise typer.Exit(1)

    db = _open_db(config)
    try:
        zip_path = create_backup_zip(db, backup_root)
    except BackupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except Exception as e:
        typer.echo(f"Error creating backup: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()

    typer.echo(f"Backup created: {zip_path}")


@app.command("import")
def import_zip(
    zip_file: str = typer.Argument(..., help="Path to a backup zip file."),
    settings: str | None = typer.Option(
        None, "--settings", "-s", help=SETTINGS_HELP
    ),
) -> None:
    """Restore rows from a backup zip, skipping rows that already exist."""
    from newsarchive.core.backup import BackupError, import_backup_zip

    config = _load_config(settings)
    db = _open_db(config)

    try:
        logger.info(f"Importing database updates from zip: {zip_file}")
        result = import_backup_zip(db, Path(zip_file))
        typer.echo(
            f"Imported {result.total_records} records across "
            f"{len(result.imported_tables)} tables"
        )
        if result.skipped_files:
            typer.echo(
                f"Skipped files with no matching table: {', '.join(result.skipped_files)}"
            )
        _log_status(db, config.purge.default_days)
    except BackupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except Exception as e:
        typer.echo(f"Error during import: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()


if __name__ == "__main__":
    app()
