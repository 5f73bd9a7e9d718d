# src/newsarchive/core/archive/__init__.py
"""Archive storage: schema, connection management and data access."""

from newsarchive.core.archive.database import ArchiveDB
from newsarchive.core.archive.registry import TABLE_REGISTRY, TableAccess, TableRegistry
from newsarchive.core.archive.schema import (
    PROTECTION_TABLES,
    article_approved_table,
    article_is_relevant_table,
    articles_table,
    metadata,
)
from newsarchive.core.archive.store import ArticleStore, FetchOrder, SqlArticleStore

__all__ = [
    # Database
    "ArchiveDB",
    "metadata",
    # Tables
    "PROTECTION_TABLES",
    "article_approved_table",
    "article_is_relevant_table",
    "articles_table",
    # Access
    "TABLE_REGISTRY",
    "ArticleStore",
    "FetchOrder",
    "SqlArticleStore",
    "TableAccess",
    "TableRegistry",
]
