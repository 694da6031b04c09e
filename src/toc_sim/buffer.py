"""Counted queues between stations."""

from dataclasses import dataclass


@dataclass
class Buffer:
    """An identity-less queue of units.

    Attributes:
        index: Position in the line (0 = source, N = sink)
        count: Units currently held, never negative
        is_source: Units leaving this buffer enter the system
        is_sink: Units arriving here have left the system
    """

    index: int
    count: int = 0
    is_source: bool = False
    is_sink: bool = False

    def take(self) -> bool:
        """Remove one unit. Returns False when empty."""
        if self.count <= 0:
            return False
        self.count -= 1
        return True

    def put(self) -> None:
        """Add one unit."""
        self.count += 1

    def is_full(self, capacity: int) -> bool:
        """Check a capacity limit (0 means unlimited)."""
        return capacity > 0 and self.count >= capacity

    @property
    def label(self) -> str:
        if self.is_source:
            return "SOURCE"
        if self.is_sink:
            return "SINK"
        return f"B{self.index}"
