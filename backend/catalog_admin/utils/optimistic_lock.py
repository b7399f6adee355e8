from flask import request
from datetime import datetime, timezone
from dateutil.parser import parse, ParserError

from catalog_admin.domain.exceptions import ConflictError, field_error


def normalize_ts(ts):
    """
    Ensure datetime is timezone-aware.
    Defaults to UTC if naive.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def if_unmodified_since():
    """
    Parse the If-Unmodified-Since header of the current request.
    Returns None when the client did not ask for a lock.
    """
    raw = request.headers.get("If-Unmodified-Since")
    if not raw:
        return None

    try:
        return normalize_ts(parse(raw))
    except (ParserError, ValueError, OverflowError) as exc:
        raise field_error("If-Unmodified-Since", "Invalid If-Unmodified-Since header") from exc


def enforce_optimistic_lock(updated_at, expected):
    """
    Raise ConflictError if the record changed after ``expected``.
    ``updated_at`` may be a datetime or an ISO string from a record.
    """
    if expected is None or updated_at is None:
        return

    if isinstance(updated_at, str):
        updated_at = datetime.fromisoformat(updated_at)

    if normalize_ts(updated_at) > normalize_ts(expected):
        raise ConflictError("Conflict detected. Section has been modified.")
