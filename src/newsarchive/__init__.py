# src/newsarchive/__init__.py
"""newsarchive: retention and maintenance for a bounded news article archive."""

__version__ = "0.1.0"
