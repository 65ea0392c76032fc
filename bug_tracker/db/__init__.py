"""
Database package for Bug Tracker.
"""

from .base import Base, get_db, get_engine, get_session_local, init_database
from .models import BugModel
from .store import BugStore

__all__ = [
    "Base",
    "BugModel",
    "BugStore",
    "get_db",
    "get_engine",
    "get_session_local",
    "init_database",
]
