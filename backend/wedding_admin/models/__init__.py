"""
SQLAlchemy models for the Wedding Admin application.
"""
from .import_history import ImportHistory, ImportHistoryStatus

__all__ = [
    "ImportHistory",
    "ImportHistoryStatus",
]
