from datetime import datetime, time, timezone


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 instant into a naive UTC datetime.
    Offsets (and a trailing "Z") are converted to UTC; values without an offset are taken as UTC.
    Raises ValueError for anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("instant must be a non-empty ISO-8601 string")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError as exc:
            raise ValueError("instant is outside the supported date range") from exc
    return dt


def parse_time_of_day(value: str) -> time:
    # "09:00" or "09:00:00"
    if not isinstance(value, str) or not value.strip():
        raise ValueError("time must be HH:MM or HH:MM:SS")
    t = time.fromisoformat(value.strip())
    if t.tzinfo is not None:
        raise ValueError("time of day is always UTC; drop the offset")
    return t


def format_instant(dt):
    if dt is None:
        return None
    return dt.isoformat() + "Z"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
