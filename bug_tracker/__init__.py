"""
Bug Tracker

Create, list, edit, filter and delete bug reports over a small REST API.
"""

import importlib.metadata

__version__ = importlib.metadata.version("bug-tracker")

from .bugs import (
    Bug,
    BugCreate,
    BugCriteria,
    BugPatch,
    BugStats,
    NotFoundError,
    Priority,
    Status,
    StorageError,
    ValidationError,
    apply_view,
    compute_stats,
    filter_bugs,
    search_bugs,
)
from .bugs.services import BugService
from .db.store import BugStore

__all__ = [
    "Bug",
    "BugCreate",
    "BugCriteria",
    "BugPatch",
    "BugService",
    "BugStats",
    "BugStore",
    "NotFoundError",
    "Priority",
    "Status",
    "StorageError",
    "ValidationError",
    "apply_view",
    "compute_stats",
    "filter_bugs",
    "search_bugs",
]
