from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_limit(limit: int) -> None:
    """Reject anything but a positive int before it reaches a LIMIT clause."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
