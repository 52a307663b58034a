"""Core data structures and algorithms for frame tree growth."""

from .context import TrainingContext
from .frontier import GrowthQueue, QueueEntry
from .split import (
    SplitCandidate,
    evaluate_best_split,
    partition_and_split,
    partition_frames,
    search_best_threshold,
)

__all__ = [
    "GrowthQueue",
    "QueueEntry",
    "SplitCandidate",
    "TrainingContext",
    "evaluate_best_split",
    "partition_and_split",
    "partition_frames",
    "search_best_threshold",
]
