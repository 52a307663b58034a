"""Per-call training state shared by the split helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Tuple

import numpy as np

from ..config import ForestConfig
from ..data import frame_labels
from ..features import score_frames

if TYPE_CHECKING:
    from .split import SplitCandidate


@dataclass(slots=True)
class TrainingContext:
    """Series, labels and scratch state valid for the duration of one ``train`` call."""

    samples: np.ndarray
    frame_size: int
    frame_count: int
    frame_labels: np.ndarray
    improvement_ratio: float = 0.99
    skip_tied_thresholds: bool = False
    exclude_ancestor_features: bool = False
    # (tree_id, node_id) -> SplitCandidate for leaves waiting in the growth queue
    candidates: Dict[Tuple[int, int], "SplitCandidate"] = field(default_factory=dict)

    @classmethod
    def from_series(
        cls,
        samples: np.ndarray,
        labels: np.ndarray,
        config: ForestConfig,
    ) -> "TrainingContext":
        frame_size = int(config.frame_size)
        return cls(
            samples=samples,
            frame_size=frame_size,
            frame_count=samples.shape[0] - frame_size + 1,
            frame_labels=frame_labels(labels, frame_size),
            improvement_ratio=float(config.improvement_ratio),
            skip_tied_thresholds=bool(config.skip_tied_thresholds),
            exclude_ancestor_features=bool(config.exclude_ancestor_features),
        )

    def scores(self, frames: np.ndarray, feature: int) -> np.ndarray:
        """Score ``frames`` on ``feature``."""
        return score_frames(self.samples, frames, feature, frame_size=self.frame_size)
