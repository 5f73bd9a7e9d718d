# src/newsarchive/core/retention/__init__.py
"""Retention: protection, eligibility and batched purging of old articles."""

from newsarchive.core.retention.eligibility import (
    age_cutoff_predicate,
    compute_cutoff_date,
    format_cutoff,
    trim_predicate,
)
from newsarchive.core.retention.progress import (
    LogProgressReporter,
    NullProgressReporter,
    ProgressReporter,
    PurgeEvent,
)
from newsarchive.core.retention.protection import resolve_protected_ids
from newsarchive.core.retention.purge import (
    AgePurgeResult,
    PurgeEngine,
    TrimPurgeResult,
)

__all__ = [
    "AgePurgeResult",
    "LogProgressReporter",
    "NullProgressReporter",
    "ProgressReporter",
    "PurgeEngine",
    "PurgeEvent",
    "TrimPurgeResult",
    "age_cutoff_predicate",
    "compute_cutoff_date",
    "format_cutoff",
    "resolve_protected_ids",
    "trim_predicate",
]
