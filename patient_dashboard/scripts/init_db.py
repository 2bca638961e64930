#!/usr/bin/env python3
"""
Database initialization script.

This script creates any missing tables for a development database. Use
``--drop`` to start from an empty schema.
"""

import argparse
import asyncio
import sys

from patient_dashboard.common.db.connection import ConnectionManager
from patient_dashboard.common.exceptions import DatabaseConnectionError
from patient_dashboard.common.logger import app_logger, configure_logger
from patient_dashboard.config import load_settings_or_exit
from patient_dashboard.database.init_db import drop_database, initialize_database

logger = app_logger.getChild("scripts.init_db")


async def async_main(drop: bool = False) -> None:
    """Initialize the database."""
    settings = load_settings_or_exit()
    configure_logger(level=settings.LOG_LEVEL, use_json=settings.LOG_JSON, log_file=settings.LOG_FILE)
    manager = ConnectionManager.from_settings(settings)
    try:
        await manager.connect()
        if drop:
            await drop_database(manager)
        await initialize_database(manager)
        logger.info("Database initialized successfully")
    finally:
        await manager.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create the patient dashboard schema")
    parser.add_argument("--drop", action="store_true", help="drop every table first")
    args = parser.parse_args()

    try:
        asyncio.run(async_main(drop=args.drop))
    except DatabaseConnectionError as e:
        logger.error(f"Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
