"""Cue Store.

Fixed-size flat array of cue points.  A cue point is a timestamp in
seconds or ``None`` when unset.  Values are held in a float64 array with
NaN as the unset marker, so a stored time reads back exactly.

The active slot never changes the store's shape; it only selects which
sub-range the key mapper addresses.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

import numpy as np


def as_cue_time(value) -> Optional[float]:
    """A finite, non-negative number of seconds as float, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if math.isfinite(value) and value >= 0:
        return value
    return None


class CueStore:
    """Addressable cue points keyed by a flat integer index."""

    def __init__(self, length: int) -> None:
        if length <= 0:
            raise ValueError(f"cue store length must be positive, got {length}")
        self._points = np.full(length, np.nan, dtype=np.float64)

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def _check(self, index: int) -> int:
        if not 0 <= index < len(self):
            raise IndexError(f"cue index {index} out of range [0, {len(self)})")
        return index

    def get(self, index: int) -> Optional[float]:
        """Return the cue at ``index`` or None when unset."""
        value = self._points[self._check(index)]
        if np.isnan(value):
            return None
        return float(value)

    def is_set(self, index: int) -> bool:
        return not np.isnan(self._points[self._check(index)])

    def set(self, index: int, time: float) -> None:
        """Overwrite the cue at ``index`` unconditionally."""
        seconds = as_cue_time(time)
        if seconds is None:
            raise ValueError(f"cue time must be a finite, non-negative number, got {time!r}")
        self._points[self._check(index)] = seconds

    def clear(self, index: int) -> None:
        self._points[self._check(index)] = np.nan

    def reset_all(self, new_length: Optional[int] = None) -> None:
        """Unset every cue, optionally resizing the store."""
        if new_length is not None and new_length != len(self):
            if new_length <= 0:
                raise ValueError(f"cue store length must be positive, got {new_length}")
            self._points = np.full(new_length, np.nan, dtype=np.float64)
        else:
            self._points.fill(np.nan)

    def count_set(self) -> int:
        return int(np.count_nonzero(~np.isnan(self._points)))

    def to_list(self) -> List[Optional[float]]:
        """Serialisable view: floats and None, in index order."""
        return [None if np.isnan(v) else float(v) for v in self._points]

    def load(self, values: Iterable[Optional[float]]) -> None:
        """Replace contents from a sequence, padding or truncating to length.

        Entries that are not finite non-negative numbers are treated as unset.
        """
        self._points.fill(np.nan)
        for i, value in enumerate(values):
            if i >= len(self):
                break
            seconds = as_cue_time(value)
            if seconds is not None:
                self._points[i] = seconds
