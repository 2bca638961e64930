"""
Database Session Management

This module provides the per-request SQLAlchemy session dependency.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.common.db.connection import ConnectionManager
from patient_dashboard.common.logger import app_logger

# Set up logging
logger = app_logger.getChild("db.session")


def get_connection_manager(request: Request) -> ConnectionManager:
    """Get the application's connection manager."""
    return request.app.state.db


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Get an async database session for one request.

    Yields:
        AsyncSession: The database session

    Example:
        @router.get("/items")
        async def list_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    session = get_connection_manager(request).session()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        if isinstance(e, SQLAlchemyError):
            logger.error(f"Database session error: {e}")
        raise
    finally:
        await session.close()
