"""
SQLAlchemy models for Bug Tracker.
"""

from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
)

from ..bugs.enums import Priority, Status
from .base import Base


class BugModel(Base):
    """SQLAlchemy model for bug records."""

    __tablename__ = "bugs"

    # Surrogate key keeps insertion order stable for listing
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)

    # Core fields
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(
        Enum(*[p.value for p in Priority], name="bug_priority"),
        nullable=False,
        index=True,
    )
    status = Column(
        Enum(*[s.value for s in Status], name="bug_status"),
        nullable=False,
        default=Status.OPEN.value,
        index=True,
    )

    # People and context
    assignee = Column(Text, nullable=False)
    reporter = Column(Text, nullable=False)
    environment = Column(Text, nullable=False)

    # Reproduction
    reproducible = Column(Boolean, nullable=False, default=False)
    steps_to_reproduce = Column(Text, nullable=True)

    tags = Column(JSON, nullable=False, default=list)

    # Timestamps are always written by the service, never by the database
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_bugs_status_priority", "status", "priority"),
        Index("ix_bugs_created_at", "created_at"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary using the wire field names."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "assignee": self.assignee,
            "reporter": self.reporter,
            "environment": self.environment,
            "reproducible": self.reproducible,
            "stepsToReproduce": self.steps_to_reproduce,
            "tags": list(self.tags or []),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
