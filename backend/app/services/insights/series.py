"""
Helpers for biometric time series: coercion, validity filtering, date ordering.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from .models import BiometricRecord


def coerce_records(records: Iterable[Any]) -> List[BiometricRecord]:
    """BiometricRecords or raw rows in, BiometricRecords out. Nothing is dropped."""
    return [BiometricRecord.from_raw(r) for r in (records or [])]


def filter_valid_records(records: Iterable[Any]) -> List[BiometricRecord]:
    """Keep records with identifiers and at least one positive biometric field."""
    return [r for r in coerce_records(records) if r.is_valid]


def parse_record_date(value: str) -> Optional[datetime]:
    """ISO date or datetime (``Z`` suffix accepted) as naive UTC, None if unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_by_date(records: Iterable[Any], newest_first: bool = False) -> List[BiometricRecord]:
    """
    Order records by date. Unparseable dates sort as the oldest;
    records sharing a date keep their input order.
    """
    coerced = coerce_records(records)
    return sorted(
        coerced,
        key=lambda r: parse_record_date(r.date) or datetime.min,
        reverse=newest_first,
    )


def latest_valid_record(records: Iterable[Any]) -> Optional[BiometricRecord]:
    """Most recent valid record, or None when the series has none."""
    ordered = sort_by_date(filter_valid_records(records), newest_first=True)
    return ordered[0] if ordered else None
