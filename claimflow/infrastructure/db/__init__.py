"""
Database infrastructure for the ClaimFlow service.
"""

from .database import Database, get_db
from .models import Base, create_all_tables, drop_all_tables, utcnow

__all__ = [
    "Database",
    "get_db",
    "Base",
    "create_all_tables",
    "drop_all_tables",
    "utcnow",
]
