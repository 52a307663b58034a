import numpy as np
import pytest

from frameforest.config import ForestConfig
from frameforest.core import (
    GrowthQueue,
    SplitCandidate,
    TrainingContext,
    evaluate_best_split,
    partition_and_split,
    partition_frames,
    search_best_threshold,
)
from frameforest.model import Tree, TreeNode

SAMPLES = np.array([10, 15, 11, 12, 8, 3, 7], dtype=np.int64)
LABELS = np.array([0, 1, 0, 1, 0, 0, 1], dtype=np.int64)


def make_root(samples: np.ndarray, labels: np.ndarray, **config_kwargs) -> tuple[TrainingContext, Tree]:
    config = ForestConfig(**config_kwargs)
    ctx = TrainingContext.from_series(samples, labels, config)
    true_count = int(ctx.frame_labels.sum())
    more_true = true_count > ctx.frame_count - true_count
    tree = Tree(frames=np.arange(ctx.frame_count, dtype=np.int64))
    tree.add_node(
        TreeNode(
            classify_as_true=more_true,
            misclassified=ctx.frame_count - true_count if more_true else true_count,
            start=0,
            stop=ctx.frame_count,
        )
    )
    return ctx, tree


def test_context_takes_flags_from_config() -> None:
    config = ForestConfig(frame_size=2, skip_tied_thresholds=True, improvement_ratio=0.5)
    ctx = TrainingContext.from_series(SAMPLES, LABELS, config)
    assert ctx.skip_tied_thresholds is True
    assert ctx.improvement_ratio == 0.5
    assert ctx.frame_count == 6
    np.testing.assert_array_equal(ctx.frame_labels, LABELS[1:])
    assert not hasattr(ctx, "labels")
    assert ctx.candidates == {}


def test_search_best_threshold_per_feature() -> None:
    ctx, tree = make_root(SAMPLES, LABELS, frame_size=2)
    assert tree.nodes[0].misclassified == 3
    assert tree.nodes[0].classify_as_true is False

    # first difference separates the classes perfectly
    diff = search_best_threshold(ctx, tree, 0, 2)
    assert diff == SplitCandidate(
        threshold=1, feature=2, true_below=False, misses=0, misses_below=0, misses_above=0
    )

    first = search_best_threshold(ctx, tree, 0, 0)
    assert first is not None
    assert (first.threshold, first.true_below, first.misses) == (12, True, 1)

    second = search_best_threshold(ctx, tree, 0, 1)
    assert second is not None
    assert (second.threshold, second.true_below, second.misses) == (12, False, 1)


def test_evaluate_best_split_picks_lowest_misses() -> None:
    ctx, tree = make_root(SAMPLES, LABELS, frame_size=2)
    best = evaluate_best_split(ctx, tree, 0, range(3))
    assert best is not None
    assert best.feature == 2
    assert best.misses == 0


def test_improvement_bar_rejects_small_gains() -> None:
    # one feature, best split leaves 1 of 3 misclassified; bar is int(0.5 * 3) = 1
    ctx, tree = make_root(SAMPLES, LABELS, frame_size=2, improvement_ratio=0.5)
    assert evaluate_best_split(ctx, tree, 0, [0]) is None
    assert evaluate_best_split(ctx, tree, 0, [2]) is not None


def test_single_misclassified_frame_is_never_split() -> None:
    samples = np.array([1, 2, 3, 4], dtype=np.int64)
    labels = np.array([0, 0, 0, 1], dtype=np.int64)
    ctx, tree = make_root(samples, labels, frame_size=1)
    assert tree.nodes[0].misclassified == 1
    # int(0.99 * 1) == 0, nothing can beat it
    assert search_best_threshold(ctx, tree, 0, 0) is not None
    assert evaluate_best_split(ctx, tree, 0, [0]) is None


def test_partition_and_split_is_in_place() -> None:
    ctx, tree = make_root(SAMPLES, LABELS, frame_size=2)
    arena = tree.frames
    candidate = evaluate_best_split(ctx, tree, 0, range(3))
    lower_id, high_id = partition_and_split(ctx, tree, 0, candidate)

    assert tree.frames is arena
    np.testing.assert_array_equal(tree.frames, [4, 1, 3, 2, 0, 5])
    lower, high = tree.nodes[lower_id], tree.nodes[high_id]
    assert (lower.start, lower.stop, high.start, high.stop) == (0, 3, 3, 6)
    assert lower.classify_as_true is False and high.classify_as_true is True
    assert lower.misclassified == 0 and high.misclassified == 0
    assert lower.parent == 0 and high.parent == 0
    assert np.shares_memory(tree.node_frames(lower_id), arena)

    root = tree.nodes[0]
    assert not root.is_leaf
    assert (root.feature, root.threshold, root.lower, root.high_eq) == (2, 1, lower_id, high_id)
    with pytest.raises(RuntimeError):
        tree.split(0, feature=0, threshold=0, slice_point=0, lower_true=True,
                   lower_misclassified=0, high_eq_misclassified=0)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_partition_frames_random_masks(seed: int) -> None:
    rng = np.random.default_rng(seed)
    frames = rng.permutation(50).astype(np.int64)
    below = rng.random(50) < 0.4
    expected_below = set(frames[below].tolist())
    original = sorted(frames.tolist())

    point = partition_frames(frames, below.copy())

    assert point == len(expected_below)
    assert set(frames[:point].tolist()) == expected_below
    assert sorted(frames.tolist()) == original


def test_partition_frames_edge_cases() -> None:
    empty = np.empty(0, dtype=np.int64)
    assert partition_frames(empty, np.empty(0, dtype=bool)) == 0
    frames = np.array([3, 1, 2], dtype=np.int64)
    assert partition_frames(frames, np.array([True, True, True])) == 3
    assert partition_frames(frames, np.array([False, False, False])) == 0
    np.testing.assert_array_equal(frames, [3, 1, 2])


def test_growth_queue_orders_by_reduction() -> None:
    queue = GrowthQueue()
    queue.push(0, 1, 5)
    queue.push(0, 2, 9)
    queue.push(0, 3, 5)
    queue.push(0, 4, 0)
    assert len(queue) == 4
    popped = [queue.pop() for _ in range(4)]
    assert [entry.node_id for entry in popped] == [2, 1, 3, 4]
    assert popped[0].reduction == 9
    assert not queue
    with pytest.raises(IndexError):
        queue.pop()
