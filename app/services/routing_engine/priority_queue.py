from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class BinaryMinHeap(Generic[T]):
    """
    Array-backed binary min-heap of (item, priority) pairs.

    There is no decrease-key: callers push a fresh entry when an item's
    priority improves and discard the superseded one when it is popped.
    """

    def __init__(self):
        self._heap: List[Tuple[T, float]] = []

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, item: T, priority: float) -> None:
        self._heap.append((item, priority))
        self._sift_up(len(self._heap) - 1)

    def pop(self) -> Optional[Tuple[T, float]]:
        """Remove and return the lowest-priority entry, or None when empty."""
        if not self._heap:
            return None

        top = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return top

    def _sift_up(self, i: int) -> None:
        heap = self._heap
        while i > 0:
            parent = (i - 1) >> 1
            if heap[i][1] >= heap[parent][1]:
                break
            heap[i], heap[parent] = heap[parent], heap[i]
            i = parent

    def _sift_down(self, i: int) -> None:
        heap = self._heap
        n = len(heap)
        while True:
            smallest = i
            left, right = 2 * i + 1, 2 * i + 2
            if left < n and heap[left][1] < heap[smallest][1]:
                smallest = left
            if right < n and heap[right][1] < heap[smallest][1]:
                smallest = right
            if smallest == i:
                return
            heap[i], heap[smallest] = heap[smallest], heap[i]
            i = smallest
