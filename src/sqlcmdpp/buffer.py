"""Reusable scratch buffer for batches assembled in builder mode."""

from __future__ import annotations

MINIMUM_CAPACITY = 4096


def next_power_of_two(value: int) -> int:
    """Return the smallest power of two >= value (0 for 0)."""
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    if value == 0:
        return 0
    return 1 << (value - 1).bit_length()


class ScratchBuffer:
    """Growable character buffer, cleared and reused rather than reallocated.

    ``capacity`` is a logical size hint only; storage is a list of parts
    joined on getvalue(), so nothing is preallocated. It only grows, to the
    next power of two at or above the required size and never below
    MINIMUM_CAPACITY.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._length = 0
        self._capacity = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._length

    def reserve(self, size: int) -> None:
        if size <= self._capacity:
            return
        self._capacity = MINIMUM_CAPACITY if size < MINIMUM_CAPACITY else next_power_of_two(size)

    def clear(self) -> None:
        self._parts.clear()
        self._length = 0

    def reset(self, text: str, start: int, end: int) -> None:
        """Clear, reserve room for text[start:end], and start with that slice."""
        self.clear()
        self.reserve(end - start)
        self.append(text, start, end)

    def append(self, text: str, start: int = 0, end: int | None = None) -> None:
        if end is None:
            end = len(text)
        if end <= start:
            return
        chunk = text if start == 0 and end == len(text) else text[start:end]
        self._parts.append(chunk)
        self._length += len(chunk)
        if self._length > self._capacity:
            self.reserve(self._length)

    def getvalue(self) -> str:
        return "".join(self._parts)
