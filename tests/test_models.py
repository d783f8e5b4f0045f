"""Tests for the timestamp convention shared by every table."""
from datetime import datetime, timezone

from conftest import make_analysis, make_user
from sqlalchemy import DateTime
from sqlmodel import SQLModel

from stock_reports.utils import parse_timestamp, utcnow


def test_utcnow_is_timezone_aware():
    """Test generated timestamps carry UTC tzinfo."""
    assert utcnow().tzinfo is timezone.utc
    assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_timestamp(None).tzinfo is timezone.utc


def test_datetime_columns_store_timezone():
    """Test every datetime column is declared timezone-aware."""
    columns = [
        column
        for table in SQLModel.metadata.sorted_tables
        for column in table.columns
        if isinstance(column.type, DateTime)
    ]
    assert len(columns) == 10
    assert all(column.type.timezone for column in columns)


def test_rows_written_with_aware_timestamps(session, users):
    """Test inserts and updates accept the aware timestamps the app produces."""
    user = make_user(session, credits=1)
    users.touch_login(user, name="Test User")
    assert users.decrement_credit("user@example.com").analysis_count == 0
    assert make_analysis(session).created_at is not None
