"""
Database Module

This package provides database connection management, the per-request
session dependency and the owner-scoped repository base.
"""

from patient_dashboard.common.db.connection import (
    ConnectionManager,
    RetryPolicy
)

from patient_dashboard.common.db.session import (
    get_connection_manager,
    get_session
)

from patient_dashboard.common.db.repository import (
    OwnedRepository,
    Page
)

__all__ = [
    # Connection management
    'ConnectionManager',
    'RetryPolicy',

    # Session management
    'get_connection_manager',
    'get_session',

    # Repositories
    'OwnedRepository',
    'Page',
]
