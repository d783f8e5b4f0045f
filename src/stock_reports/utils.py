"""Shared utilities for the stock reports service."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp uses this convention."""
    return datetime.now(timezone.utc)


def parse_timestamp(ts: float | None) -> datetime:
    """Convert optional Unix timestamp (seconds) to aware UTC datetime; fallback to utcnow."""
    return datetime.fromtimestamp(ts, timezone.utc) if ts is not None else utcnow()
