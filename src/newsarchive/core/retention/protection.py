# src/newsarchive/core/retention/protection.py
"""Protection resolver for retention purges.

An article that carries any editorial judgment (a relevance mark of either
value, or an approval) must never be purged. Every purge mode and the
status report resolve protection through this one function.
"""

import math
from collections.abc import Iterable
from typing import Any

from newsarchive.core.archive.schema import PROTECTION_TABLES
from newsarchive.core.archive.store import ArticleStore


def coerce_article_id(value: Any) -> int | None:
    """Coerce a raw article_id value to int.

    Returns None for values that do not parse to a finite integer
    (NULL, empty or non-numeric strings, NaN, infinities, fractions).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def resolve_protected_ids(
    store: ArticleStore,
    table_names: Iterable[str] | None = None,
) -> frozenset[int]:
    """Compute the set of article ids that must never be deleted.

    Reads only the article_id column of each protection table and
    silently skips rows whose id is malformed.

    Args:
        store: Article store to read association rows from
        table_names: Protection tables to read (defaults to relevance
            and approval marks)

    Returns:
        Union of article ids present in any protection table
    """
    if table_names is None:
        table_names = [table.name for table in PROTECTION_TABLES]

    protected: set[int] = set()
    for table_name in table_names:
        for raw in store.read_association_ids(table_name):
            article_id = coerce_article_id(raw)
            if article_id is not None:
                protected.add(article_id)
    return frozenset(protected)
