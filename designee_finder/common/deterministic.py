"""Helpers for deterministic ordering."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def stable_sorted(items: Iterable[T], key: Callable[[T], object]) -> list[T]:
    """Sort by ``key``, breaking ties on the input position of each item."""
    indexed = list(enumerate(items))
    indexed.sort(key=lambda pair: (key(pair[1]), pair[0]))
    return [item for _position, item in indexed]
