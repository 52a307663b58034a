"""Best-first frame tree trainer."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from time import perf_counter
from typing import Callable, Sequence

import numpy as np
import torch

from .config import ForestConfig
from .core import (
    GrowthQueue,
    TrainingContext,
    evaluate_best_split,
    partition_and_split,
)
from .data import validate_series
from .exceptions import UnsupportedConfigurationError
from .features import feature_count
from .model import ForestModel, Tree, TreeNode

SeriesLike = np.ndarray | torch.Tensor | Sequence[int]


class Forest:
    """Single-tree frame classifier grown greedily, most promising leaf first."""

    def __init__(self, config: ForestConfig) -> None:
        if config.tree_count != 1:
            raise UnsupportedConfigurationError(
                f"Forest currently only supports a single tree, got tree_count={config.tree_count}"
            )
        if config.frame_size < 1:
            raise UnsupportedConfigurationError(f"frame_size must be positive, got {config.frame_size}")
        if config.min_misclassified < 0:
            raise UnsupportedConfigurationError("min_misclassified must be non-negative")
        if not 0.0 < config.improvement_ratio <= 1.0:
            raise UnsupportedConfigurationError("improvement_ratio must lie in (0, 1]")

        env_tied = os.getenv("FRAMEFOREST_TIED_THRESHOLDS")
        if env_tied is not None:
            mode = env_tied.lower()
            if mode not in {"keep", "skip"}:
                raise UnsupportedConfigurationError(f"Unsupported FRAMEFOREST_TIED_THRESHOLDS: {env_tied}")
            config = replace(config, skip_tied_thresholds=mode == "skip")

        self.config = config
        self._logger = logging.getLogger(__name__)
        n_features = feature_count(config.frame_size)
        self._allowed: list[list[int]] = [list(range(n_features)) for _ in range(config.tree_count)]

        # Runtime state
        self._trees: list[Tree] = []
        self._split_logs: list[dict[str, object]] = []
        self._stop_reason: str | None = None
        self._train_seconds: float = 0.0

    # Public -------------------------------------------------------------

    @property
    def trees(self) -> Sequence[Tree]:
        return self._trees

    @property
    def allowed_features(self) -> Sequence[Sequence[int]]:
        """Features each tree may split on."""
        return self._allowed

    @property
    def split_logs(self) -> Sequence[dict[str, object]]:
        """One record per split performed during the most recent ``train`` call."""
        return self._split_logs

    @property
    def stop_reason(self) -> str | None:
        """Why growth stopped: ``"queue_empty"``, ``"no_split"`` or ``"threshold_met"``."""
        return self._stop_reason

    @property
    def model(self) -> ForestModel:
        self._check_trained("model")
        return ForestModel(config=self.config, trees=list(self._trees))

    def train(
        self,
        samples: SeriesLike,
        labels: SeriesLike,
        *,
        split_callback: Callable[[int, dict[str, object]], None] | None = None,
    ) -> "Forest":
        """Grow the tree on ``samples`` against the end-aligned ``labels``."""
        cfg = self.config
        samples_np, labels_np = validate_series(samples, labels, cfg.frame_size)
        ctx = TrainingContext.from_series(samples_np, labels_np, cfg)
        start = perf_counter()

        true_count = int(ctx.frame_labels.sum())
        more_true = true_count > ctx.frame_count - true_count
        misclassified = ctx.frame_count - true_count if more_true else true_count
        self._logger.info(
            "training on %d frames (frame_size=%d): majority=%s misclassified=%d",
            ctx.frame_count,
            cfg.frame_size,
            more_true,
            misclassified,
        )

        trees: list[Tree] = []
        queue = GrowthQueue()
        split_logs: list[dict[str, object]] = []
        for tree_id in range(cfg.tree_count):
            tree = Tree(frames=np.arange(ctx.frame_count, dtype=np.int64))
            tree.add_node(
                TreeNode(
                    classify_as_true=more_true,
                    misclassified=misclassified,
                    start=0,
                    stop=ctx.frame_count,
                    root=tree_id,
                )
            )
            trees.append(tree)
            self._enqueue(ctx, queue, tree_id, tree, 0, always=True)

        stop_reason = "queue_empty"
        while queue:
            entry = queue.pop()
            tree = trees[entry.tree_id]
            node = tree.nodes[entry.node_id]
            candidate = ctx.candidates.pop((entry.tree_id, entry.node_id), None)
            if candidate is None:
                stop_reason = "no_split"
                break
            if node.misclassified < cfg.min_misclassified:
                stop_reason = "threshold_met"
                break

            lower_id, high_id = partition_and_split(ctx, tree, entry.node_id, candidate)
            record: dict[str, object] = {
                "split": len(split_logs),
                "tree": entry.tree_id,
                "node": entry.node_id,
                "depth": node.depth,
                "frames": node.frame_count,
                "feature": candidate.feature,
                "threshold": candidate.threshold,
                "true_below": candidate.true_below,
                "misclassified_before": node.misclassified,
                "misclassified_after": candidate.misses,
                "lower_frames": tree.nodes[lower_id].frame_count,
                "high_eq_frames": tree.nodes[high_id].frame_count,
            }

            for child_id in (lower_id, high_id):
                if tree.nodes[child_id].misclassified > 0:
                    self._enqueue(ctx, queue, entry.tree_id, tree, child_id)

            record["queue_size"] = len(queue)
            split_logs.append(record)
            if self._logger.isEnabledFor(logging.INFO):
                self._logger.info(json.dumps(record))
            if split_callback is not None:
                split_callback(int(record["split"]), record)

        self._trees = trees
        self._split_logs = split_logs
        self._stop_reason = stop_reason
        self._train_seconds = perf_counter() - start
        if self._logger.isEnabledFor(logging.INFO):
            self._logger.info(
                "growth stopped (%s) after %d splits in %.3fs: %d nodes, average error %.3f",
                stop_reason,
                len(split_logs),
                self._train_seconds,
                self.node_count(),
                self.average_error(),
            )
        return self

    def node_count(self) -> int:
        """Total number of nodes across all trees."""
        self._check_trained("node_count()")
        return sum(tree.subtree_size() for tree in self._trees)

    def average_error(self) -> float:
        """Misclassified frames left in the leaves, averaged over trees.

        The sum uses the counts stored on the leaves. When tied scores are
        evaluated as split points (the default), those counts can drift from
        the actual partition and even go negative, so the result can be below
        zero. Set ``skip_tied_thresholds`` for exact counts.
        """
        self._check_trained("average_error()")
        errors = sum(tree.total_errors() for tree in self._trees)
        return float(errors) / float(self.config.tree_count)

    def predict_frame(self, samples: SeriesLike, frame_start: int) -> bool:
        """Classify the frame of ``samples`` starting at ``frame_start``."""
        return self.model.predict_frame(samples, frame_start)

    def predict_frames(self, samples: SeriesLike) -> np.ndarray:
        """Classify every frame of ``samples``."""
        return self.model.predict_frames(samples)

    def classify_series(self, samples: SeriesLike) -> np.ndarray:
        """Return a score in ``[0, 1]`` for each sample of ``samples``."""
        return self.model.classify_series(samples)

    # Internals ----------------------------------------------------------

    def _check_trained(self, what: str) -> None:
        if not self._trees:
            raise RuntimeError(f"Forest must be trained before {what}")

    def _enqueue(
        self,
        ctx: TrainingContext,
        queue: GrowthQueue,
        tree_id: int,
        tree: Tree,
        node_id: int,
        *,
        always: bool = False,
    ) -> None:
        candidate = evaluate_best_split(ctx, tree, node_id, self._allowed[tree_id])
        if candidate is not None:
            ctx.candidates[(tree_id, node_id)] = candidate
            queue.push(tree_id, node_id, tree.nodes[node_id].misclassified - candidate.misses)
        elif always:
            queue.push(tree_id, node_id, 0)


def train(
    samples: SeriesLike,
    labels: SeriesLike,
    frame_size: int,
    tree_count: int = 1,
    min_misclassified: int = 0,
    **options: object,
) -> Forest:
    """Build a :class:`Forest` from keyword parameters and train it."""
    config = ForestConfig(
        frame_size=frame_size,
        tree_count=tree_count,
        min_misclassified=min_misclassified,
        **options,  # type: ignore[arg-type]
    )
    return Forest(config).train(samples, labels)


__all__ = ["Forest", "train"]
