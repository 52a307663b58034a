"""Best-first growth queue over splittable leaves."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True, slots=True)
class QueueEntry:
    """A leaf waiting to be split."""

    tree_id: int
    node_id: int
    reduction: int


class GrowthQueue:
    """Max-heap of leaves keyed by the misclassification reduction of their best split.

    Leaves with equal reduction pop in insertion order.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, int, int]] = []
        self._counter = itertools.count()

    def push(self, tree_id: int, node_id: int, reduction: int) -> None:
        heapq.heappush(self._heap, (-int(reduction), next(self._counter), tree_id, node_id))

    def pop(self) -> QueueEntry:
        if not self._heap:
            raise IndexError("pop from an empty growth queue")
        neg_reduction, _, tree_id, node_id = heapq.heappop(self._heap)
        return QueueEntry(tree_id=tree_id, node_id=node_id, reduction=-neg_reduction)

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
