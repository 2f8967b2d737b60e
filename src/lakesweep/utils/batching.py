"""
Batch partitioning for statement submission.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")


def partition(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """
    Split items into contiguous batches of at most ``batch_size``.

    Produces ``ceil(len(items) / batch_size)`` batches in input order; an
    empty input produces no batches.

    Args:
        items: Items to split
        batch_size: Maximum number of items per batch (must be >= 1)

    Returns:
        List of batches

    Example:
        >>> partition(["a", "b", "c"], 2)
        [['a', 'b'], ['c']]
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    return [list(items[start : start + batch_size]) for start in range(0, len(items), batch_size)]


def batch_count(total: int, batch_size: int) -> int:
    """Number of batches ``partition`` produces for ``total`` items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return (total + batch_size - 1) // batch_size
