"""
Row builders for the imports that write straight into Supabase tables.

Each builder turns a parsed CSV row into the record to insert. A builder
raises RowRejected when the row fails a local check; such a row is recorded
as failed and no request is made for it.
"""
import re
import json
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

VENUE_STATES = ("MA", "RI", "NH", "CT", "ME", "VT")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
# Features are separated by a literal "\n" or a real line break
_FEATURE_SEPARATOR = re.compile(r"\\n|\n")


class RowRejected(ValueError):
    """A row failed a local check and is not submitted."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _value(row: Dict[str, Optional[str]], column: str) -> Optional[str]:
    """Column value, with blank treated as missing."""
    return row.get(column) or None


def leading_int(value: Optional[str]) -> Optional[int]:
    """Integer prefix of a string ("100.5" -> 100), or None."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def leading_float(value: Optional[str]) -> Optional[float]:
    """Float prefix of a string ("2.5h" -> 2.5), or None."""
    match = _LEADING_FLOAT.match(value or "")
    return float(match.group(1)) if match else None


def parse_timestamp(value: Optional[str], column: str) -> str:
    """Normalize an ISO 8601 timestamp or reject the row."""
    if not value:
        raise RowRejected(f"Missing {column}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise RowRejected(f"Invalid {column}: {value}")
    return parsed.isoformat()


# ---------------------------------------------------------------------------
# Venues
# ---------------------------------------------------------------------------

def build_venue_row(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Venue record; the state must be one of the served New England states."""
    state = _value(row, "state")
    if state not in VENUE_STATES:
        raise RowRejected(f"Invalid state: {state} (must be MA, RI, NH, CT, ME, or VT)")

    now = _now()
    return {
        "name": _value(row, "name") or "Unnamed Venue",
        "phone": _value(row, "phone"),
        "email": _value(row, "email"),
        "street_address": _value(row, "street_address"),
        "city": _value(row, "city"),
        "state": state,
        "zip": _value(row, "zip"),
        "region": _value(row, "region"),
        "created_at": now,
        "updated_at": now,
    }


# ---------------------------------------------------------------------------
# Service packages
# ---------------------------------------------------------------------------

def split_features(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [f.strip() for f in _FEATURE_SEPARATOR.split(value) if f.strip()]


def build_service_package_row(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """
    Service package record.

    price is whole currency units (0 when unparseable), features a list and
    coverage a JSON object. A coverage value that is not JSON rejects the row.
    """
    coverage = _value(row, "coverage")
    if coverage:
        try:
            coverage = json.loads(coverage)
        except ValueError:
            raise RowRejected("Invalid JSON in coverage")

    now = _now()
    return {
        "service_type": _value(row, "service_type"),
        "name": _value(row, "name") or "Unnamed Package",
        "description": _value(row, "description"),
        "price": leading_int(row.get("price")) or 0,
        "features": split_features(row.get("features")),
        "coverage": coverage,
        "status": _value(row, "status"),
        "vendor_id": _value(row, "vendor_id"),
        "hour_amount": leading_float(row.get("hour_amount")) or None,
        "lookup_key": _value(row, "lookup_key"),
        "event_type": _value(row, "event_type"),
        "created_at": now,
        "updated_at": now,
    }


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

def build_booking_request(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """
    Booking import request: names to resolve plus the booking and event fields.

    amount is converted to cents. Both timestamps must parse before anything
    is written.
    """
    couple_name = _value(row, "couple_name")
    vendor_name = _value(row, "vendor_name")
    if not couple_name or not vendor_name:
        raise RowRejected(f"Couple or Vendor not found: {couple_name}, {vendor_name}")

    amount = leading_int(row.get("amount"))
    return {
        "couple_name": couple_name,
        "vendor_name": vendor_name,
        "service_type": _value(row, "service_type"),
        "amount": amount * 100 if amount is not None else None,
        "status": _value(row, "status") or "pending",
        "venue_name": _value(row, "venue_name"),
        "start_time": parse_timestamp(_value(row, "start_time"), "start_time"),
        "end_time": parse_timestamp(_value(row, "end_time"), "end_time"),
    }
