"""
Canonical enums for Bug records.

Values are the exact strings used on the wire and in storage.
"""

from enum import Enum


class Priority(str, Enum):
    """Priority levels, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Status(str, Enum):
    """Lifecycle status of a bug.

    Any status may move to any other; there is no enforced workflow.
    """

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
