"""
Persistence adapter for bug records.

``BugStore`` is the only writer of durable bug state. It is constructed
around an explicit SQLAlchemy session and speaks in ``Bug`` records, never
ORM rows. Any database fault rolls the session back and is raised as a
``StorageError`` so callers never observe a half-written record.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..bugs.errors import StorageError
from ..bugs.schemas import Bug
from .models import BugModel

logger = structlog.get_logger()


class BugStore:
    """Stores and retrieves bugs by identifier."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Storage operation failed", operation=operation, error=str(exc))
            raise StorageError(operation, str(exc)) from exc

    def _row(self, bug_id: str) -> Optional[BugModel]:
        # Always reload so a write from another session is never masked
        return (
            self.db.query(BugModel)
            .populate_existing()
            .filter(BugModel.id == bug_id)
            .first()
        )

    @staticmethod
    def _to_bug(row: BugModel) -> Bug:
        return Bug.model_validate(row.to_dict())

    def add(self, bug: Bug) -> Bug:
        """Insert a new bug and return it as stored."""
        with self._guard("create"):
            row = BugModel(
                id=bug.id,
                title=bug.title,
                description=bug.description,
                priority=bug.priority.value,
                status=bug.status.value,
                assignee=bug.assignee,
                reporter=bug.reporter,
                environment=bug.environment,
                reproducible=bug.reproducible,
                steps_to_reproduce=bug.steps_to_reproduce,
                tags=list(bug.tags),
                created_at=bug.created_at,
                updated_at=bug.updated_at,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return self._to_bug(row)

    def get(self, bug_id: str) -> Optional[Bug]:
        """Get a bug by ID."""
        with self._guard("get"):
            row = self._row(bug_id)
            return self._to_bug(row) if row else None

    def list(self) -> List[Bug]:
        """Get all bugs in insertion order."""
        with self._guard("list"):
            rows = (
                self.db.query(BugModel)
                .populate_existing()
                .order_by(BugModel.pk)
                .all()
            )
            return [self._to_bug(row) for row in rows]

    def save(self, bug: Bug) -> Optional[Bug]:
        """Overwrite every mutable field of an existing bug.

        Returns None when the bug no longer exists. No version check is made,
        so concurrent writers to the same id end with the last write.
        """
        with self._guard("update"):
            row = self._row(bug.id)
            if row is None:
                return None

            row.title = bug.title
            row.description = bug.description
            row.priority = bug.priority.value
            row.status = bug.status.value
            row.assignee = bug.assignee
            row.reporter = bug.reporter
            row.environment = bug.environment
            row.reproducible = bug.reproducible
            row.steps_to_reproduce = bug.steps_to_reproduce
            row.tags = list(bug.tags)
            row.updated_at = bug.updated_at

            self.db.commit()
            self.db.refresh(row)
            return self._to_bug(row)

    def delete(self, bug_id: str) -> bool:
        """Hard-delete a bug. Returns False when there was nothing to delete."""
        with self._guard("delete"):
            row = self._row(bug_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True
