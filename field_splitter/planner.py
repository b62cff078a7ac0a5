"""Segment planning: how many enumerated fields a batch needs.

The count is a batch-wide invariant. Every output row carries the same field
names, so the planner reduces over all records before any record is split.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from functools import reduce

logger = logging.getLogger(__name__)


def _check(max_length: int, suffix_start: int) -> None:
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")
    if suffix_start < 1:
        raise ValueError(f"suffix_start must be >= 1, got {suffix_start}")


def plan(length: int, max_length: int, suffix_start: int = 1) -> int:
    """Return the enumerated iteration count for a string of ``length`` chars.

    ``ceil(length / max_length)`` is the raw chunk count. One is subtracted for
    the inclusive final iteration, and one more when ``suffix_start == 1``
    because the base field is filled outside the enumerated loop. The result is
    negative for strings that need no enumerated field.
    """

    _check(max_length, suffix_start)
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    offset = 2 if suffix_start == 1 else 1
    return math.ceil(length / max_length) - offset


def minimum_count(suffix_start: int) -> int:
    """Smallest iteration count that still leaves one output field."""
    return -1 if suffix_start == 1 else 0


def enumerated_field_count(count: int) -> int:
    """Number of enumerated fields produced for an iteration ``count``."""
    return max(count + 1, 0)


def plan_batch(lengths: Iterable[int], max_length: int, suffix_start: int = 1) -> int:
    """Reduce ``lengths`` to the batch maximum without buffering them."""

    _check(max_length, suffix_start)
    floor = minimum_count(suffix_start)
    count = reduce(
        lambda acc, n: max(acc, plan(n, max_length, suffix_start)),
        lengths,
        floor,
    )
    logger.info(
        "planned %d enumerated field(s) at max_length=%d",
        enumerated_field_count(count),
        max_length,
    )
    return count


def field_names(prefix: str, suffix_start: int, count: int) -> list[str]:
    """Return the ordered output field names for an iteration ``count``."""

    base = [prefix] if suffix_start == 1 else []
    last = suffix_start + count
    return base + [f"{prefix}{i}" for i in range(suffix_start, last + 1)]


__all__ = [
    "enumerated_field_count",
    "field_names",
    "minimum_count",
    "plan",
    "plan_batch",
]
