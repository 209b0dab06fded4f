"""Mixed-radix enumeration of fixed-length candidates.

The index vector is treated as a number in base ``radix`` whose last
position is the least significant digit. Advancing adds one; the search
for a given length is over once the vector wraps back to all zeros.
"""

from typing import Iterator, Optional, Sequence


class MixedRadixEnumerator:
    """Walks every index vector of a fixed length exactly once."""

    def __init__(self, radix: int, length: int, start: Optional[Sequence[int]] = None):
        if radix < 1:
            raise ValueError(f"Radix must be positive, got {radix}")
        if length < 0:
            raise ValueError(f"Length must not be negative, got {length}")

        self.radix = radix
        self.length = length

        if start is None:
            self.indices = [0] * length
        else:
            if len(start) != length:
                raise ValueError(f"Start vector has length {len(start)}, expected {length}")
            if any(not 0 <= i < radix for i in start):
                raise ValueError(f"Start vector {list(start)} has an index outside [0, {radix})")
            self.indices = list(start)

    @property
    def space_size(self) -> int:
        """Number of distinct candidates of this length."""
        return self.radix ** self.length

    def advance(self) -> None:
        """Add one to the vector, carrying towards the first position."""
        for position in range(self.length - 1, -1, -1):
            self.indices[position] += 1
            if self.indices[position] < self.radix:
                return
            self.indices[position] = 0

    def is_exhausted(self) -> bool:
        """True once the vector has wrapped around to all zeros."""
        return not any(self.indices)

    def rank(self) -> int:
        """Position of the current vector in enumeration order."""
        value = 0
        for index in self.indices:
            value = value * self.radix + index
        return value

    def candidates(self) -> Iterator[tuple[int, ...]]:
        """Yield the current vector and every following one until wrap-around."""
        while True:
            yield tuple(self.indices)
            self.advance()
            if self.is_exhausted():
                return
