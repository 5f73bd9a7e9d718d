# src/newsarchive/core/retention/eligibility.py
"""Eligibility predicates for retention purges.

A predicate combines a selection rule with the protected-id set into a
single filter over the articles table.
"""

from collections.abc import Set
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import ColumnElement, and_

from newsarchive.core.archive.schema import articles_table


def compute_cutoff_date(
    days_old_threshold: int, as_of: datetime | None = None
) -> date:
    """Return the UTC calendar date `days_old_threshold` days before `as_of`.

    Args:
        days_old_threshold: Age in days beyond which articles are old
        as_of: Reference datetime (defaults to now). Naive values are
            taken as UTC.
    """
    if as_of is None:
        as_of = datetime.now(UTC)
    elif as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=UTC)
    return as_of.astimezone(UTC).date() - timedelta(days=days_old_threshold)


def format_cutoff(cutoff: date) -> str:
    """Format a cutoff as an ISO date-only string (YYYY-MM-DD)."""
    return cutoff.isoformat()


def _exclude_protected(
    condition: ColumnElement[bool], protected_ids: Set[int]
) -> ColumnElement[bool]:
    # NOT IN with an empty list is omitted entirely
    if not protected_ids:
        return condition
    return and_(condition, articles_table.c.id.not_in(sorted(protected_ids)))


def age_cutoff_predicate(
    cutoff: date, protected_ids: Set[int]
) -> ColumnElement[bool]:
    """Articles published strictly before `cutoff` and not protected.

    Articles without a publish date never match.
    """
    return _exclude_protected(articles_table.c.published_date < cutoff, protected_ids)


def trim_predicate(protected_ids: Set[int]) -> ColumnElement[bool]:
    """Articles with a known publish date that are not protected."""
    return _exclude_protected(
        articles_table.c.published_date.is_not(None), protected_ids
    )
