"""MongoDB document store layer.

This module provides:
- Client lifecycle and index management
- Stored document models
- Repository classes for data access
"""

from app.database.connection import (
    check_database_health,
    close_database,
    get_database,
    init_database,
)


__all__ = [
    "check_database_health",
    "close_database",
    "get_database",
    "init_database",
]
