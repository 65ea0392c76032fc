"""
Bug API Routes.

REST endpoints for bug CRUD plus filtered listing and statistics.
All endpoints are prefixed with /api/bugs.
"""

from typing import Any, Dict, List, NoReturn, Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db.base import get_db
from ..db.store import BugStore
from .enums import Priority, Status
from .errors import BugTrackerError, StorageError, ValidationError
from .services import BugService
from .views import BugCriteria, apply_view, compute_stats

logger = structlog.get_logger()

router = APIRouter(prefix="/api/bugs", tags=["bugs"])


def get_bug_service(db: Session = Depends(get_db)) -> BugService:
    """Dependency wiring a BugService to the request's session."""
    return BugService(BugStore(db))


def _raise_http(exc: BugTrackerError) -> NoReturn:
    if isinstance(exc, StorageError):
        logger.error("Bug request failed", operation=exc.operation)
    elif isinstance(exc, ValidationError):
        logger.warning("Bug request rejected", fields=exc.fields)
    raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc


def _criteria(
    status: Optional[Status] = None,
    priority: Optional[Priority] = None,
    assignee: Optional[str] = None,
    reproducible: Optional[bool] = None,
) -> BugCriteria:
    return BugCriteria(
        status=status, priority=priority, assignee=assignee, reproducible=reproducible
    )


# =============================================================================
# Collection Endpoints
# =============================================================================


@router.get("")
async def list_bugs(
    q: Optional[str] = None,
    criteria: BugCriteria = Depends(_criteria),
    service: BugService = Depends(get_bug_service),
) -> List[Dict[str, Any]]:
    """List bugs, optionally narrowed by exact-match filters and a search term."""
    try:
        bugs = service.get_all()
    except BugTrackerError as exc:
        _raise_http(exc)

    return [bug.to_dict() for bug in apply_view(bugs, criteria, q)]


@router.post("", status_code=201)
async def create_bug(
    payload: Any = Body(None),
    service: BugService = Depends(get_bug_service),
) -> Dict[str, Any]:
    """Report a new bug."""
    try:
        bug = service.create(payload)
    except BugTrackerError as exc:
        _raise_http(exc)

    return bug.to_dict()


@router.get("/stats")
async def bug_stats(
    q: Optional[str] = None,
    criteria: BugCriteria = Depends(_criteria),
    service: BugService = Depends(get_bug_service),
) -> Dict[str, Any]:
    """Status and priority counts over the (optionally filtered) collection."""
    try:
        bugs = service.get_all()
    except BugTrackerError as exc:
        _raise_http(exc)

    return compute_stats(apply_view(bugs, criteria, q)).to_dict()


# =============================================================================
# Item Endpoints
# =============================================================================


@router.get("/{bug_id}")
async def get_bug(
    bug_id: str,
    service: BugService = Depends(get_bug_service),
) -> Dict[str, Any]:
    """Get a bug by ID."""
    try:
        bug = service.get(bug_id)
    except BugTrackerError as exc:
        _raise_http(exc)

    return bug.to_dict()


@router.patch("/{bug_id}")
@router.put("/{bug_id}")
async def update_bug(
    bug_id: str,
    payload: Any = Body(None),
    service: BugService = Depends(get_bug_service),
) -> Dict[str, Any]:
    """Apply a partial update to a bug."""
    try:
        bug = service.update(bug_id, payload)
    except BugTrackerError as exc:
        _raise_http(exc)

    return bug.to_dict()


@router.delete("/{bug_id}")
async def delete_bug(
    bug_id: str,
    service: BugService = Depends(get_bug_service),
) -> Dict[str, str]:
    """Delete a bug."""
    try:
        return service.delete(bug_id)
    except BugTrackerError as exc:
        _raise_http(exc)
