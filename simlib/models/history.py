"""
Bounded (measured, target) history used by the live plots.
"""

from collections import deque
from typing import Iterator, List, Tuple


class HistoryBuffer:
    """
    Fixed-capacity FIFO of (measured, target) samples.

    Once full, each push evicts the oldest sample, so the buffer always holds
    the most recent ``capacity`` samples in push order.
    """

    def __init__(self, capacity: int = 200):
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def push(self, measured: float, target: float):
        self._samples.append((float(measured), float(target)))

    def clear(self):
        self._samples.clear()

    def __len__(self):
        return len(self._samples)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(self._samples)

    def __getitem__(self, index) -> Tuple[float, float]:
        return self._samples[index]

    def measured(self) -> List[float]:
        return [m for m, _ in self._samples]

    def targets(self) -> List[float]:
        return [t for _, t in self._samples]

    def latest(self):
        """Most recent sample, or None when empty."""
        return self._samples[-1] if self._samples else None
