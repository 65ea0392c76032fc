"""
Bug service layer.

Mediates every read and write of bug records: validates input, applies
defaults, stamps identifiers and timestamps, and writes through a
``BugStore``. The service keeps no state between calls.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Union

import structlog

from ..db.store import BugStore
from .enums import Status
from .errors import NotFoundError
from .schemas import (
    Bug,
    BugCreate,
    BugPatch,
    generate_bug_id,
    utc_now,
    validate_create,
    validate_patch,
)

logger = structlog.get_logger()


def _next_timestamp(previous: datetime) -> datetime:
    """Current time, nudged forward so it is strictly after ``previous``."""
    now = utc_now()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class BugService:
    """Service for managing bug records."""

    def __init__(self, store: BugStore):
        self.store = store

    def create(self, payload: Union[BugCreate, Mapping[str, Any]]) -> Bug:
        """Validate and persist a new bug with status ``open``."""
        data = validate_create(payload)
        now = utc_now()
        bug = Bug(
            id=generate_bug_id(),
            status=Status.OPEN,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )

        stored = self.store.add(bug)
        logger.info(
            "Bug created",
            bug_id=stored.id,
            priority=stored.priority.value,
            assignee=stored.assignee,
        )
        return stored

    def get(self, bug_id: str) -> Bug:
        """Get a bug by ID, raising NotFoundError when absent."""
        bug = self.store.get(bug_id)
        if bug is None:
            raise NotFoundError(bug_id)
        return bug

    def get_all(self) -> List[Bug]:
        """Every stored bug, in insertion order."""
        return self.store.list()

    def update(self, bug_id: str, payload: Union[BugPatch, Mapping[str, Any]]) -> Bug:
        """Apply a partial update.

        Fields absent from the patch keep their values; ``id`` and
        ``created_at`` never change; ``updated_at`` always moves forward,
        even for an empty patch.
        """
        existing = self.get(bug_id)
        patch = validate_patch(payload)

        changes = patch.changes()
        updated = existing.model_copy(
            update={**changes, "updated_at": _next_timestamp(existing.updated_at)}
        )

        saved = self.store.save(updated)
        if saved is None:
            # Deleted between the read and the write
            raise NotFoundError(bug_id)

        logger.info("Bug updated", bug_id=bug_id, fields=sorted(changes))
        return saved

    def delete(self, bug_id: str) -> Dict[str, str]:
        """Hard-delete a bug. A second delete of the same id raises NotFoundError."""
        if not self.store.delete(bug_id):
            raise NotFoundError(bug_id)

        logger.info("Bug deleted", bug_id=bug_id)
        return {"message": "Bug deleted", "id": bug_id}
