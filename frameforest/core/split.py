"""Split search and in-place partitioning for frame tree leaves."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from ..model import Tree
from .context import TrainingContext

_logger = logging.getLogger(__name__)

_NEVER = np.iinfo(np.int64).max


@dataclass(frozen=True, slots=True)
class SplitCandidate:
    """Best split outcome for a leaf.

    Frames scoring below ``threshold`` on ``feature`` form the lower child,
    labelled ``true_below``; the rest form the high/equal child with the
    opposite label.
    """

    threshold: int
    feature: int
    true_below: bool
    misses: int
    misses_below: int
    misses_above: int


def search_best_threshold(
    ctx: TrainingContext, tree: Tree, node_id: int, feature: int
) -> SplitCandidate | None:
    """Return the threshold on ``feature`` that misclassifies the fewest frames.

    Frames are ordered by ``(score, frame)`` and swept left to right. Before
    each frame moves below the cut, both labelings of the lower side are
    scored; the first position strictly beating every earlier one (and the
    node's current count) wins. Returns ``None`` when no position improves.
    """
    node = tree.nodes[node_id]
    frames = tree.node_frames(node_id)
    n_frames = int(frames.shape[0])
    if n_frames == 0:
        return None

    scores = ctx.scores(frames, feature)
    order = np.lexsort((frames, scores))
    sorted_scores = scores[order]
    sorted_true = ctx.frame_labels[frames[order]] == 1

    if node.classify_as_true:
        total_true = n_frames - node.misclassified
        total_false = node.misclassified
    else:
        total_true = node.misclassified
        total_false = n_frames - node.misclassified

    true_below = np.zeros(n_frames, dtype=np.int64)
    np.cumsum(sorted_true[:-1], dtype=np.int64, out=true_below[1:])
    false_below = np.arange(n_frames, dtype=np.int64) - true_below
    true_above = total_true - true_below
    false_above = total_false - false_below

    miss_true_below = false_below + true_above
    miss_false_below = true_below + false_above
    label_true = miss_true_below < miss_false_below
    misses = np.where(label_true, miss_true_below, miss_false_below)
    if ctx.skip_tied_thresholds and n_frames > 1:
        tied = np.zeros(n_frames, dtype=bool)
        tied[1:] = sorted_scores[1:] == sorted_scores[:-1]
        misses = np.where(tied, _NEVER, misses)

    best = int(np.argmin(misses))
    best_misses = int(misses[best])
    if best_misses >= node.misclassified:
        return None

    below_true = bool(label_true[best])
    if below_true:
        misses_below, misses_above = int(false_below[best]), int(true_above[best])
    else:
        misses_below, misses_above = int(true_below[best]), int(false_above[best])
    return SplitCandidate(
        threshold=int(sorted_scores[best]),
        feature=int(feature),
        true_below=below_true,
        misses=best_misses,
        misses_below=misses_below,
        misses_above=misses_above,
    )


def evaluate_best_split(
    ctx: TrainingContext, tree: Tree, node_id: int, allowed: Iterable[int]
) -> SplitCandidate | None:
    """Pick the best candidate over ``allowed`` features, or ``None``.

    A candidate is kept only if its misclassified count is strictly below
    ``int(improvement_ratio * node.misclassified)``.
    """
    node = tree.nodes[node_id]
    features = sorted(set(allowed))
    if ctx.exclude_ancestor_features:
        used = tree.ancestor_features(node_id)
        features = [f for f in features if f not in used]
    if not features:
        return None

    upper_bar = int(node.misclassified * ctx.improvement_ratio)
    best: SplitCandidate | None = None
    best_misses = upper_bar
    for feature in features:
        candidate = search_best_threshold(ctx, tree, node_id, feature)
        if candidate is not None and candidate.misses < best_misses:
            best = candidate
            best_misses = candidate.misses
    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug(
            "node %d (%d frames, %d misclassified): bar=%d best=%s",
            node_id,
            node.frame_count,
            node.misclassified,
            upper_bar,
            best,
        )
    return best


def partition_frames(frames: np.ndarray, below: np.ndarray) -> int:
    """Reorder ``frames`` in place so entries flagged in ``below`` come first.

    ``below`` is scratch and gets reordered alongside ``frames``. Returns the
    number of flagged entries.
    """
    lo, hi = 0, int(frames.shape[0]) - 1
    while lo < hi:
        while lo < hi and below[lo]:
            lo += 1
        while lo < hi and not below[hi]:
            hi -= 1
        if lo != hi:
            frames[lo], frames[hi] = frames[hi], frames[lo]
            below[lo], below[hi] = below[hi], below[lo]
    while lo < frames.shape[0] and below[lo]:
        lo += 1
    return lo


def partition_and_split(
    ctx: TrainingContext, tree: Tree, node_id: int, candidate: SplitCandidate
) -> Tuple[int, int]:
    """Partition the node's arena slice by ``candidate`` and create its two children."""
    frames = tree.node_frames(node_id)
    below = ctx.scores(frames, candidate.feature) < candidate.threshold
    slice_point = partition_frames(frames, below)
    return tree.split(
        node_id,
        feature=candidate.feature,
        threshold=candidate.threshold,
        slice_point=slice_point,
        lower_true=candidate.true_below,
        lower_misclassified=candidate.misses_below,
        high_eq_misclassified=candidate.misses_above,
    )
