"""Median selection for small float sequences (quickselect)."""

from __future__ import annotations

from collections.abc import MutableSequence, Iterable


def _swap(values: MutableSequence, a: int, b: int) -> None:
    values[a], values[b] = values[b], values[a]


def median_in_place(values: MutableSequence):
    """Return the median of ``values``, partially reordering them.

    For an even number of elements the lower of the two middle values
    is returned.  Raises ``ValueError`` for an empty sequence.
    """
    n = len(values)
    if n == 0:
        raise ValueError("median of an empty sequence")

    low, high = 0, n - 1
    median_idx = (low + high) // 2

    while True:
        if high <= low:
            return values[median_idx]

        if high == low + 1:
            if values[low] > values[high]:
                _swap(values, low, high)
            return values[median_idx]

        # Median of low, middle and high goes to position low.
        middle = (low + high) // 2
        if values[middle] > values[high]:
            _swap(values, middle, high)
        if values[low] > values[high]:
            _swap(values, low, high)
        if values[middle] > values[low]:
            _swap(values, middle, low)

        _swap(values, middle, low + 1)

        ll = low + 1
        hh = high
        while True:
            ll += 1
            while values[low] > values[ll]:
                ll += 1
            hh -= 1
            while values[hh] > values[low]:
                hh -= 1
            if hh < ll:
                break
            _swap(values, ll, hh)

        _swap(values, low, hh)

        if hh <= median_idx:
            low = ll
        if hh >= median_idx:
            high = hh - 1


def median(values: Iterable):
    """Return the median of ``values`` without modifying them."""
    return median_in_place(list(values))