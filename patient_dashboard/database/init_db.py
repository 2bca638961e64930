"""
Database initialization.

This module provides functions for:
1. Registering every model with the shared metadata
2. Creating the schema for development and tests
3. Dropping the schema
"""

import importlib

from patient_dashboard.common.db.connection import ConnectionManager
from patient_dashboard.common.logger import app_logger
from patient_dashboard.database.base import metadata

# Setup module logger
logger = app_logger.getChild("database.init_db")

MODEL_MODULES = (
    "patient_dashboard.users.models",
    "patient_dashboard.weight_entries.models",
    "patient_dashboard.medications.models",
    "patient_dashboard.shipments.models",
)


def import_models() -> None:
    """Import every model module so its tables are registered on the metadata."""
    for module_name in MODEL_MODULES:
        importlib.import_module(module_name)


async def initialize_database(manager: ConnectionManager) -> None:
    """
    Create any missing tables.

    Managed deployments apply the Alembic revisions instead; this is for
    development databases and tests.

    Args:
        manager: Connection manager whose engine receives the schema
    """
    import_models()
    async with manager.engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info(f"Database schema ready ({len(metadata.tables)} tables)")


async def drop_database(manager: ConnectionManager) -> None:
    """Drop every table known to the metadata."""
    import_models()
    async with manager.engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    logger.warning("Database schema dropped")
