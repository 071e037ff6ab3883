"""Hyperslab selections over variable extents."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from safenc.utils.exceptions import InvalidSelectionError


@dataclass(frozen=True)
class Selection:
    """Per-axis (start, count, stride) description of a sub-region.

    A full-extent selection is ``start=0, count=extent, stride=1`` on every
    axis. Counts and strides must be positive and starts non-negative;
    anything else is rejected here, before the engine is involved.
    """

    start: tuple[int, ...]
    count: tuple[int, ...]
    stride: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        start = tuple(int(i) for i in self.start)
        count = tuple(int(n) for n in self.count)
        stride = (1,) * len(count) if self.stride is None else tuple(int(s) for s in self.stride)

        if not len(start) == len(count) == len(stride):
            raise InvalidSelectionError(
                f"start, count and stride differ in length: {start}, {count}, {stride}"
            )
        for axis, (i, n, s) in enumerate(zip(start, count, stride)):
            if n <= 0:
                raise InvalidSelectionError(f"count {n} on axis {axis} selects nothing")
            if s <= 0:
                raise InvalidSelectionError(f"stride {s} on axis {axis} is not positive")
            if i < 0:
                raise InvalidSelectionError(f"start {i} on axis {axis} is negative")

        object.__setattr__(self, "start", start)
        object.__setattr__(self, "count", count)
        object.__setattr__(self, "stride", stride)

    @classmethod
    def full(cls, shape: Sequence[int]) -> Selection:
        """Selection covering a whole extent."""
        return cls(start=(0,) * len(shape), count=tuple(shape))

    @classmethod
    def at(cls, index: Sequence[int]) -> Selection:
        """Selection of the single element at ``index``."""
        return cls(start=tuple(index), count=(1,) * len(index))

    @property
    def rank(self) -> int:
        return len(self.count)

    @property
    def shape(self) -> tuple[int, ...]:
        return self.count

    @property
    def size(self) -> int:
        """Number of selected elements."""
        return math.prod(self.count)

    def last(self, axis: int) -> int:
        """Index of the last selected element along ``axis``."""
        return self.start[axis] + (self.count[axis] - 1) * self.stride[axis]

    def to_slices(self) -> tuple[slice, ...]:
        return tuple(
            slice(i, self.last(axis) + 1, s)
            for axis, (i, s) in enumerate(zip(self.start, self.stride))
        )


def parse_key(key: Any, shape: Sequence[int | None]) -> list[tuple[int, int | None, int, bool]]:
    """Translate Python indexing into per-axis selection parts.

    ``shape`` entries of None mark open-ended axes (an unlimited axis being
    written); an omitted slice stop on such an axis leaves the count as None
    for the caller to infer.

    Args:
        key: Integer, slice, Ellipsis, or a tuple of these.
        shape: Current extent per axis.

    Returns:
        One ``(start, count, stride, is_index)`` tuple per axis.
    """
    if not isinstance(key, tuple):
        key = (key,)

    if any(k is Ellipsis for k in key):
        pos = next(i for i, k in enumerate(key) if k is Ellipsis)
        fill = len(shape) - (len(key) - 1)
        key = key[:pos] + (slice(None),) * fill + key[pos + 1:]
    if len(key) > len(shape):
        raise InvalidSelectionError(f"too many indices ({len(key)}) for rank {len(shape)}")
    key = key + (slice(None),) * (len(shape) - len(key))

    parts = []
    for axis, (k, extent) in enumerate(zip(key, shape)):
        if isinstance(k, slice):
            stride = 1 if k.step is None else int(k.step)
            if stride <= 0:
                raise InvalidSelectionError(f"step {stride} on axis {axis} is not positive")
            start = _absolute(0 if k.start is None else int(k.start), extent, axis)
            if k.stop is None:
                stop = extent
            else:
                stop = _absolute(int(k.stop), extent, axis)
            count = None if stop is None else -(-(stop - start) // stride)
            parts.append((start, count, stride, False))
        else:
            parts.append((_absolute(int(k), extent, axis), 1, 1, True))
    return parts


def _absolute(index: int, extent: int | None, axis: int) -> int:
    if index >= 0:
        return index
    if extent is None:
        raise InvalidSelectionError(f"negative index {index} on open-ended axis {axis}")
    return extent + index
