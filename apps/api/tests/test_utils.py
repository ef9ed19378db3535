"""Tests for pagination and normalization helpers."""
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.async_utils import run_async
from app.db.errors import is_unique_violation
from app.jobs.utils import mask_email, safe_url
from app.utils.normalization import (
    is_valid_email,
    normalize_identifier,
    parse_uuid,
    split_full_name,
)
from app.utils.pagination import Pagination, PaginationParams


def test_pagination_block():
    params = PaginationParams(page=3, limit=10)
    assert params.offset == 20
    assert Pagination.create(25, params).model_dump() == {
        "page": 3,
        "limit": 10,
        "total": 25,
        "totalPages": 3,
    }
    assert Pagination.create(0, params).totalPages == 0
    assert Pagination.create(30, params).totalPages == 3


def test_parse_uuid():
    value = uuid.uuid4()
    assert parse_uuid(value) == value
    assert parse_uuid(str(value)) == value
    assert parse_uuid("123") is None
    assert parse_uuid("") is None
    assert parse_uuid(None) is None


def test_normalize_identifier():
    assert normalize_identifier("  MRN   001 ") == "MRN 001"
    assert normalize_identifier("   ") is None


def test_email_validation_is_syntax_only():
    assert is_valid_email("someone@northclinic.org")
    assert not is_valid_email("someone@")
    assert not is_valid_email("")


def test_split_full_name():
    assert split_full_name("Ann Marie Lee") == ("Ann", "Marie Lee")
    assert split_full_name("Cher") == ("Cher", "")
    assert split_full_name(None) == ("", "")


def test_log_redaction_helpers():
    assert mask_email("annlee@northclinic.org") == "ann...@northclinic.org"
    assert safe_url("https://ai.test/risk?key=secret") == "https://ai.test/risk"


class _PgError(Exception):
    sqlstate = "23505"


def test_unique_violation_classification():
    assert is_unique_violation(IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: patients.mrn")))
    assert is_unique_violation(IntegrityError("INSERT", {}, _PgError("duplicate key value")))
    assert not is_unique_violation(IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: patients.mrn")))
    assert not is_unique_violation(IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed")))


async def _answer() -> int:
    return 42


def test_run_async_outside_event_loop():
    assert run_async(_answer()) == 42


@pytest.mark.asyncio
async def test_run_async_refuses_event_loop_thread():
    with pytest.raises(RuntimeError):
        run_async(_answer())
