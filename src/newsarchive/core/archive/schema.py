# src/newsarchive/core/archive/schema.py
"""SQLAlchemy table definitions for the article archive.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with multiple database backends.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

# Shared metadata for all tables
metadata = MetaData()

# === Articles ===

articles_table = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text),
    Column("url", String(2048)),
    Column("description", Text),
    Column("publication_name", String(256)),
    Column("published_date", Date),
    Column("created_at", DateTime(timezone=True)),
)

# === Editorial marks ===

# Any row here protects the article, whatever is_relevant says.
article_is_relevant_table = Table(
    "article_is_relevant",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("article_id", Integer, ForeignKey("articles.id"), nullable=False),
    Column("is_relevant", Boolean, nullable=False),
    Column("created_at", DateTime(timezone=True)),
)

article_approved_table = Table(
    "article_approved",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("article_id", Integer, ForeignKey("articles.id"), nullable=False),
    Column("created_at", DateTime(timezone=True)),
)

# === Indexes ===

Index("ix_articles_published_date", articles_table.c.published_date)
Index("ix_article_is_relevant_article_id", article_is_relevant_table.c.article_id)
Index("ix_article_approved_article_id", article_approved_table.c.article_id)

# Tables whose article_id marks an article as protected from retention purges
PROTECTION_TABLES: tuple[Table, ...] = (
    article_is_relevant_table,
    article_approved_table,
)
