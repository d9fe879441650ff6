from datetime import datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def to_db(value: datetime) -> str:
    # Fixed precision keeps string comparison in SQL chronological.
    return to_utc(value).isoformat(timespec="microseconds")

def from_db(value: str) -> datetime:
    return to_utc(datetime.fromisoformat(value))
