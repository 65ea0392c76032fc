"""
Derived views over an already-fetched collection of bugs.

Everything here is a pure function of its arguments: no I/O, no caching.
Callers re-run them whenever the collection, the criteria or the search
term change.
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .enums import Priority, Status
from .errors import ValidationError
from .schemas import Bug, _field_errors


class BugCriteria(BaseModel):
    """Optional exact-match filters. Unset fields impose no constraint."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[Status] = None
    priority: Optional[Priority] = None
    assignee: Optional[str] = None
    reproducible: Optional[bool] = None

    @field_validator("assignee")
    @classmethod
    def blank_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.status, self.priority, self.assignee, self.reproducible)
        )

    def matches(self, bug: Bug) -> bool:
        if self.status is not None and bug.status != self.status:
            return False
        if self.priority is not None and bug.priority != self.priority:
            return False
        if self.assignee is not None and bug.assignee != self.assignee:
            return False
        if self.reproducible is not None and bug.reproducible != self.reproducible:
            return False
        return True


class BugStats(BaseModel):
    """Aggregate counts over a bug collection."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0

    # Per status
    open: int = 0
    in_progress: int = Field(0, alias="inProgress")
    resolved: int = 0
    closed: int = 0

    # Per priority
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    resolved_percentage: int = Field(0, alias="resolvedPercentage")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


CriteriaLike = Union[BugCriteria, Mapping[str, Any], None]


def _as_criteria(criteria: CriteriaLike) -> BugCriteria:
    if criteria is None:
        return BugCriteria()
    if isinstance(criteria, BugCriteria):
        return criteria
    try:
        return BugCriteria.model_validate(dict(criteria))
    except PydanticValidationError as exc:
        raise ValidationError(_field_errors(exc)) from exc


def filter_bugs(bugs: Sequence[Bug], criteria: CriteriaLike = None) -> List[Bug]:
    """Bugs satisfying every set criterion, in input order."""
    criteria = _as_criteria(criteria)
    if criteria.is_empty():
        return list(bugs)
    return [bug for bug in bugs if criteria.matches(bug)]


def _matches_term(bug: Bug, needle: str) -> bool:
    fields = (bug.title, bug.description, bug.assignee, bug.reporter)
    if any(needle in value.lower() for value in fields):
        return True
    return any(needle in tag.lower() for tag in bug.tags)


def search_bugs(bugs: Sequence[Bug], term: Optional[str]) -> List[Bug]:
    """Case-insensitive substring search over title, description, people and tags."""
    if term is None or not term.strip():
        return list(bugs)
    needle = term.strip().lower()
    return [bug for bug in bugs if _matches_term(bug, needle)]


def apply_view(
    bugs: Sequence[Bug],
    criteria: CriteriaLike = None,
    term: Optional[str] = None,
) -> List[Bug]:
    """Filter then search; a bug must satisfy both."""
    return search_bugs(filter_bugs(bugs, criteria), term)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(bugs: Sequence[Bug]) -> BugStats:
    """Status and priority counts plus the share of resolved bugs."""
    total = len(bugs)
    by_status = {status: 0 for status in Status}
    by_priority = {priority: 0 for priority in Priority}
    for bug in bugs:
        by_status[bug.status] += 1
        by_priority[bug.priority] += 1

    resolved = by_status[Status.RESOLVED]
    percentage = _round_half_up(resolved / total * 100) if total > 0 else 0

    return BugStats(
        total=total,
        open=by_status[Status.OPEN],
        in_progress=by_status[Status.IN_PROGRESS],
        resolved=resolved,
        closed=by_status[Status.CLOSED],
        critical=by_priority[Priority.CRITICAL],
        high=by_priority[Priority.HIGH],
        medium=by_priority[Priority.MEDIUM],
        low=by_priority[Priority.LOW],
        resolved_percentage=percentage,
    )
