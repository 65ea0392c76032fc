"""
Bug records: schemas, errors and derived views.

The service and HTTP routes live in ``bug_tracker.bugs.services`` and
``bug_tracker.bugs.routes``; they are not re-exported here because they
depend on the database package.
"""

from .enums import Priority, Status
from .errors import (
    BugTrackerError,
    FieldError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .schemas import (
    Bug,
    BugCreate,
    BugPatch,
    generate_bug_id,
    normalize_tags,
    utc_now,
    validate_create,
    validate_patch,
)
from .views import (
    BugCriteria,
    BugStats,
    apply_view,
    compute_stats,
    filter_bugs,
    search_bugs,
)

__all__ = [
    # Enums
    "Priority",
    "Status",
    # Errors
    "BugTrackerError",
    "FieldError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    # Schemas
    "Bug",
    "BugCreate",
    "BugPatch",
    "generate_bug_id",
    "normalize_tags",
    "utc_now",
    "validate_create",
    "validate_patch",
    # Views
    "BugCriteria",
    "BugStats",
    "apply_view",
    "compute_stats",
    "filter_bugs",
    "search_bugs",
]
