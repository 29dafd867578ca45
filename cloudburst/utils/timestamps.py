# cloudburst/utils/timestamps.py
"""
Timestamp normalisation for everything crossing the store boundary.
Records arrive as ISO-8601 strings or Unix-epoch milliseconds; internally
every timestamp is a float of epoch seconds, the same clock as time.time().
"""
import re
from datetime import datetime, timezone
from typing import Optional, Union

TimestampLike = Union[str, int, float, datetime, None]

# Fractional seconds of any length; fromisoformat before 3.11 wants 3 or 6 digits
_FRACTION = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def _normalise_fraction(match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def to_epoch_seconds(value: TimestampLike, default: Optional[float] = None) -> Optional[float]:
    """
    Converts an ISO-8601 string, epoch milliseconds (number or digit string)
    or a datetime into epoch seconds. Returns `default` for None or values
    that cannot be parsed.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, (int, float)):
        if value != value or value <= 0:  # NaN or non-positive
            return default
        return float(value) / 1000.0

    text = str(value).strip()
    if not text:
        return default
    if text.isdigit():
        return int(text) / 1000.0

    # Python < 3.11 does not accept the trailing 'Z'
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(_normalise_fraction, text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def to_iso(epoch_seconds: Optional[float]) -> Optional[str]:
    """Renders epoch seconds as a UTC ISO-8601 string with millisecond precision."""
    if epoch_seconds is None:
        return None
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_epoch_millis(epoch_seconds: float) -> int:
    return int(round(epoch_seconds * 1000))
