"""
Async error handling utilities for database operations.

This module classifies SQLAlchemy errors into HTTP responses. Nothing here
retries: every error is mapped once and surfaced to the caller.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import (
    DataError,
    DisconnectionError,
    IntegrityError,
    NoResultFound,
    OperationalError,
    TimeoutError as SQLTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION_SQLSTATE = "23505"


def _sqlstate(error: Exception) -> Optional[str]:
    """Extract the SQLSTATE code from a wrapped DBAPI error, if the driver exposes one."""
    orig = getattr(error, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def is_unique_violation(error: Exception) -> bool:
    """Return True when ``error`` is a uniqueness constraint violation."""
    if not isinstance(error, IntegrityError):
        return False
    if _sqlstate(error) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(getattr(error, "orig", error)).lower()
    return "unique" in message or "duplicate key" in message


class AsyncErrorHandler:
    """
    Error classifier for database operations.

    Maps SQLAlchemy exceptions onto status codes and minimal client-facing
    messages.
    """

    # Checked in order; the first isinstance match wins
    ERROR_MAPPINGS = (
        (NoResultFound, {
            'status_code': status.HTTP_404_NOT_FOUND,
            'detail': 'Record not found',
        }),
        (IntegrityError, {
            'status_code': status.HTTP_400_BAD_REQUEST,
            'detail': 'Data integrity constraint violation',
        }),
        (DisconnectionError, {
            'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
            'detail': 'Database connection lost',
        }),
        (SQLTimeoutError, {
            'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
            'detail': 'Database operation timed out',
        }),
        (OperationalError, {
            'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
            'detail': 'Database operation failed',
        }),
        (DataError, {
            'status_code': status.HTTP_400_BAD_REQUEST,
            'detail': 'Invalid data format',
        }),
    )

    @classmethod
    def classify_error(cls, error: Exception) -> Dict[str, Any]:
        """
        Classify a database error and return appropriate response information.

        Args:
            error: The exception that occurred

        Returns:
            Dictionary with status_code and detail
        """
        if is_unique_violation(error):
            return {
                'status_code': status.HTTP_400_BAD_REQUEST,
                'detail': 'Unique constraint violation',
            }

        for exc_type, mapping in cls.ERROR_MAPPINGS:
            if isinstance(error, exc_type):
                return dict(mapping)

        return {
            'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR,
            'detail': 'Internal server error',
        }

    @classmethod
    def handle_error(cls, error: Exception, operation_name: str = "database operation") -> HTTPException:
        """
        Handle a database error and return appropriate HTTPException.

        Args:
            error: The exception that occurred
            operation_name: Name of the operation for logging

        Returns:
            HTTPException with appropriate status code and message
        """
        error_info = cls.classify_error(error)

        if error_info['status_code'] >= 500:
            logger.error(f"Error in {operation_name}: {error}")
        else:
            logger.warning(f"Client error in {operation_name}: {error}")

        return HTTPException(
            status_code=error_info['status_code'],
            detail=error_info['detail']
        )



@asynccontextmanager
async def async_transaction_rollback(db: AsyncSession):
    """
    Context manager for an all-or-nothing unit of work.

    Everything executed inside the block is committed together when it exits
    normally and rolled back on the first exception, which is re-raised.

    Usage:
        async with async_transaction_rollback(db) as session:
            # Perform database operations
            # Automatic rollback on exception
    """
    try:
        yield db
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning(f"Transaction rolled back due to error: {e}")
        raise
