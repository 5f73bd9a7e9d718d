# src/newsarchive/core/status.py
"""Aggregate archive health report."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import distinct, func, select

from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.archive.registry import TableAccess
from newsarchive.core.archive.schema import (
    article_approved_table,
    article_is_relevant_table,
    articles_table,
)
from newsarchive.core.archive.store import SqlArticleStore
from newsarchive.core.retention.eligibility import (
    age_cutoff_predicate,
    compute_cutoff_date,
    format_cutoff,
)
from newsarchive.core.retention.protection import resolve_protected_ids

DEFAULT_STATUS_DAYS = 180


@dataclass(frozen=True)
class ArchiveStatus:
    """Snapshot of archive size and retention eligibility."""

    total_articles: int
    irrelevant_articles: int
    approved_articles: int
    old_articles: int
    deletable_old_articles: int
    cutoff_date: str


def get_archive_status(
    db: ArchiveDB,
    days_old_threshold: int = DEFAULT_STATUS_DAYS,
    *,
    as_of: datetime | None = None,
) -> ArchiveStatus:
    """Collect archive counts relative to an age threshold.

    deletable_old_articles uses the same protection rule and age predicate
    as PurgeEngine.purge_by_age, so it is what an age purge with the same
    threshold would remove.

    Args:
        db: Archive database
        days_old_threshold: Age threshold in days for the old/deletable counts
        as_of: Reference time for the cutoff (defaults to now)
    """
    if days_old_threshold < 0:
        raise ValueError(f"days_old_threshold must be >= 0, got {days_old_threshold}")

    cutoff = compute_cutoff_date(days_old_threshold, as_of)
    store = SqlArticleStore(db)
    protected_ids = resolve_protected_ids(store)

    irrelevant_query = select(
        func.count(distinct(article_is_relevant_table.c.article_id))
    ).where(article_is_relevant_table.c.is_relevant.is_(False))
    approved_query = select(func.count(distinct(article_approved_table.c.article_id)))
    old_query = (
        select(func.count())
        .select_from(articles_table)
        .where(articles_table.c.published_date < cutoff)
    )

    with db.connection() as conn:
        total = TableAccess(articles_table).count(conn)
        irrelevant = conn.execute(irrelevant_query).scalar_one()
        approved = conn.execute(approved_query).scalar_one()
        old = conn.execute(old_query).scalar_one()

    deletable = store.count_eligible(age_cutoff_predicate(cutoff, protected_ids))

    return ArchiveStatus(
        total_articles=int(total),
        irrelevant_articles=int(irrelevant),
        approved_articles=int(approved),
        old_articles=int(old),
        deletable_old_articles=int(deletable),
        cutoff_date=format_cutoff(cutoff),
    )


def log_status(status: ArchiveStatus, logger: Any) -> None:
    """Emit the status summary as log lines."""
    logger.info("Database status summary:")
    logger.info(f"- Total articles: {status.total_articles}")
    logger.info(f"- Articles marked not relevant: {status.irrelevant_articles}")
    logger.info(f"- Articles approved: {status.approved_articles}")
    logger.info(
        f"- Articles older than {status.cutoff_date}: {status.old_articles}"
    )
    logger.info(
        f"- Old articles eligible for deletion: {status.deletable_old_articles}"
    )
