"""Grouping, counting and small-group bucketing for the public datasets."""

from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable, TypeVar

from models import CountItem

T = TypeVar("T")

DEFAULT_BUCKET_THRESHOLD = 5
DEFAULT_BUCKET_LABEL = "Altro (k<5)"


def group_and_count(records: Iterable[T], key_fn: Callable[[T], str | None]) -> list[CountItem]:
    """Count records per derived key.

    Records whose key is None or empty are skipped entirely. The result is
    sorted by count descending, then label ascending.
    """
    counts: Counter[str] = Counter()
    for record in records:
        key = key_fn(record)
        if not key:
            continue
        counts[key] += 1
    return sort_dataset(CountItem(label=label, count=count) for label, count in counts.items())


def sort_dataset(items: Iterable[CountItem]) -> list[CountItem]:
    return sorted(items, key=lambda item: (-item.count, item.label))


def bucket_small(
    dataset: list[CountItem],
    threshold: int = DEFAULT_BUCKET_THRESHOLD,
    label: str = DEFAULT_BUCKET_LABEL,
) -> list[CountItem]:
    """Collapse groups smaller than ``threshold`` into one trailing group.

    The synthetic group is appended last and only when it absorbed something,
    so the sum of counts is unchanged.

    Known limitation: if a real group that survives the threshold already
    carries ``label`` and a bucket would be emitted, ValueError is raised
    and the caller's run fails. The two groups are never merged and the
    label is never emitted twice.
    """
    kept: list[CountItem] = []
    small_total = 0
    for item in dataset:
        if item.count < threshold:
            small_total += item.count
        else:
            kept.append(item)

    if small_total > 0:
        if any(item.label == label for item in kept):
            raise ValueError(f"Bucket label {label!r} collides with an existing group")
        kept.append(CountItem(label=label, count=small_total))
    return kept
