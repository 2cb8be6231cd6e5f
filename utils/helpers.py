import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Returns the current UTC time as a naive datetime, the form SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def page_count(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` rows at ``limit`` rows per page."""
    if not total or limit <= 0:
        return 0
    return math.ceil(total / limit)


def parse_page(value) -> int:
    """Turns a ``page`` query value into a 1-based page number (bad input means page 1)."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1
