"""
Unit tests for database error classification and the transaction helper.
"""

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import DataError, IntegrityError, NoResultFound, OperationalError

from app.models import User
from app.services.async_error_handler import (
    AsyncErrorHandler,
    async_transaction_rollback,
    is_unique_violation,
)


class PgUniqueViolation(Exception):
    pgcode = "23505"


def test_unique_violation_detected_from_sqlstate():
    error = IntegrityError("INSERT INTO users ...", {}, PgUniqueViolation("constraint users_email_key"))
    assert is_unique_violation(error)


def test_unique_violation_detected_from_message():
    error = IntegrityError("INSERT INTO users ...", {}, Exception("UNIQUE constraint failed: users.email"))
    assert is_unique_violation(error)


def test_other_integrity_errors_are_not_unique_violations():
    error = IntegrityError("INSERT INTO posts ...", {}, Exception("NOT NULL constraint failed: posts.title"))
    assert not is_unique_violation(error)
    assert not is_unique_violation(ValueError("unique"))


def test_error_classification():
    unique = IntegrityError("stmt", {}, Exception("duplicate key value violates unique constraint"))
    assert AsyncErrorHandler.classify_error(unique) == {
        "status_code": 400,
        "detail": "Unique constraint violation",
    }

    not_null = IntegrityError("stmt", {}, Exception("NOT NULL constraint failed"))
    assert AsyncErrorHandler.classify_error(not_null)["status_code"] == 400

    assert AsyncErrorHandler.classify_error(NoResultFound())["status_code"] == 404
    assert AsyncErrorHandler.classify_error(
        OperationalError("stmt", {}, Exception("connection refused"))
    )["status_code"] == 503
    assert AsyncErrorHandler.classify_error(
        DataError("stmt", {}, Exception("invalid input"))
    )["status_code"] == 400

    assert AsyncErrorHandler.classify_error(RuntimeError("boom")) == {
        "status_code": 500,
        "detail": "Internal server error",
    }


def test_handle_error_returns_http_exception():
    exc = AsyncErrorHandler.handle_error(RuntimeError("boom"), "test operation")
    assert isinstance(exc, HTTPException)
    assert exc.status_code == 500
    assert exc.detail == "Internal server error"


@pytest.mark.asyncio
async def test_transaction_commits_on_success(async_db_session):
    async with async_transaction_rollback(async_db_session):
        async_db_session.add(User(email="tx.ok@example.com", name="Committed"))

    count = await async_db_session.scalar(select(func.count(User.id)))
    assert count == 1


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(async_db_session):
    with pytest.raises(RuntimeError):
        async with async_transaction_rollback(async_db_session):
            async_db_session.add(User(email="tx.fail@example.com", name="Rolled Back"))
            await async_db_session.flush()
            raise RuntimeError("abort")

    count = await async_db_session.scalar(select(func.count(User.id)))
    assert count == 0
