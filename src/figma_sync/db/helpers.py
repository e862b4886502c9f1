from collections.abc import Iterator, Sequence
from datetime import datetime, timezone
from typing import TypeVar

NODE_BATCH_SIZE = 50

T = TypeVar("T")


def chunked(items: Sequence[T], size: int = NODE_BATCH_SIZE) -> Iterator[Sequence[T]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
