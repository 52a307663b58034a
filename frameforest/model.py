"""Tree structures and inference utilities for frameforest."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import ForestConfig
from .data import as_series, check_frame_size, pad_series
from .features import score


@dataclass(slots=True)
class TreeNode:
    """A node of a frame tree.

    ``start`` and ``stop`` delimit the node's slice of the owning tree's frame
    arena. ``parent``, ``lower`` and ``high_eq`` are indices into
    :attr:`Tree.nodes` (``-1`` when absent). Frames whose ``feature`` score is
    below ``threshold`` route to ``lower``, the rest to ``high_eq``.
    """

    classify_as_true: bool
    misclassified: int
    start: int = 0
    stop: int = 0
    parent: int = -1
    root: int = 0
    depth: int = 0
    feature: int = -1
    threshold: int = 0
    lower: int = -1
    high_eq: int = -1
    is_leaf: bool = True

    @property
    def frame_count(self) -> int:
        return self.stop - self.start


@dataclass(slots=True)
class Tree:
    """Binary tree stored as a node table plus one shared frame-index arena."""

    frames: np.ndarray
    nodes: List[TreeNode] = field(default_factory=list)
    _compiled: Dict[str, np.ndarray] = field(init=False, repr=False, default_factory=dict)

    def add_node(self, node: TreeNode) -> int:
        """Append ``node`` and return its index."""
        self.nodes.append(node)
        self._compiled.clear()
        return len(self.nodes) - 1

    def node_frames(self, node_id: int) -> np.ndarray:
        """Return the frames reaching ``node_id`` as a view into the arena."""
        node = self.nodes[node_id]
        return self.frames[node.start : node.stop]

    def split(
        self,
        node_id: int,
        *,
        feature: int,
        threshold: int,
        slice_point: int,
        lower_true: bool,
        lower_misclassified: int,
        high_eq_misclassified: int,
    ) -> Tuple[int, int]:
        """Turn leaf ``node_id`` into a branch and return ``(lower, high_eq)`` ids.

        The node's arena slice must already be partitioned so that the first
        ``slice_point`` frames score below ``threshold``.
        """
        node = self.nodes[node_id]
        if not node.is_leaf:
            raise RuntimeError(f"node {node_id} is already a branch")
        if not 0 <= slice_point <= node.frame_count:
            raise ValueError(f"slice_point {slice_point} outside node of {node.frame_count} frames")
        mid = node.start + slice_point
        lower_id = self.add_node(
            TreeNode(
                classify_as_true=lower_true,
                misclassified=lower_misclassified,
                start=node.start,
                stop=mid,
                parent=node_id,
                root=node.root,
                depth=node.depth + 1,
            )
        )
        high_id = self.add_node(
            TreeNode(
                classify_as_true=not lower_true,
                misclassified=high_eq_misclassified,
                start=mid,
                stop=node.stop,
                parent=node_id,
                root=node.root,
                depth=node.depth + 1,
            )
        )
        node.feature = int(feature)
        node.threshold = int(threshold)
        node.lower = lower_id
        node.high_eq = high_id
        node.is_leaf = False
        return lower_id, high_id

    def _walk(self, node_id: int) -> List[int]:
        # iterative so deep, lopsided trees do not hit the recursion limit
        order: List[int] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            order.append(current)
            node = self.nodes[current]
            if not node.is_leaf:
                stack.append(node.high_eq)
                stack.append(node.lower)
        return order

    def subtree_size(self, node_id: int = 0) -> int:
        """Number of nodes in the subtree rooted at ``node_id``."""
        return len(self._walk(node_id))

    def total_errors(self, node_id: int = 0) -> int:
        """Sum of the misclassified counts of the leaves under ``node_id``."""
        return sum(self.nodes[i].misclassified for i in self._walk(node_id) if self.nodes[i].is_leaf)

    def leaves(self) -> List[int]:
        return [i for i in self._walk(0) if self.nodes[i].is_leaf]

    def branches(self) -> List[int]:
        return [i for i in self._walk(0) if not self.nodes[i].is_leaf]

    def ancestor_features(self, node_id: int) -> set[int]:
        """Features used by the branches above ``node_id``."""
        used: set[int] = set()
        parent = self.nodes[node_id].parent
        while parent != -1:
            used.add(self.nodes[parent].feature)
            parent = self.nodes[parent].parent
        return used

    def predict_frame(self, samples: np.ndarray, frame_start: int, *, frame_size: int) -> bool:
        """Route one frame from the root to a leaf and return its classification."""
        node = self.nodes[0]
        while not node.is_leaf:
            value = score(samples, frame_start, node.feature, frame_size=frame_size)
            node = self.nodes[node.lower if value < node.threshold else node.high_eq]
        return node.classify_as_true

    def _ensure_compiled(self) -> Dict[str, np.ndarray]:
        if self._compiled:
            return self._compiled
        self._compiled = {
            "feature": np.array([n.feature for n in self.nodes], dtype=np.int64),
            "threshold": np.array([n.threshold for n in self.nodes], dtype=np.int64),
            "lower": np.array([n.lower for n in self.nodes], dtype=np.int64),
            "high_eq": np.array([n.high_eq for n in self.nodes], dtype=np.int64),
            "value": np.array([n.classify_as_true for n in self.nodes], dtype=bool),
            "is_leaf": np.array([n.is_leaf for n in self.nodes], dtype=bool),
        }
        return self._compiled

    def predict_frames(self, samples: np.ndarray, *, frame_size: int) -> np.ndarray:
        """Vectorised routing of every frame of ``samples``."""
        n_frames = check_frame_size(frame_size, samples.shape[0])
        compiled = self._ensure_compiled()
        feature = compiled["feature"]
        threshold = compiled["threshold"]
        lower = compiled["lower"]
        high_eq = compiled["high_eq"]
        is_leaf = compiled["is_leaf"]

        node_idx = np.zeros(n_frames, dtype=np.int64)
        active = np.arange(n_frames, dtype=np.int64)
        last = samples.shape[0] - 1
        while active.size > 0:
            nodes = node_idx[active]
            leaf_mask = is_leaf[nodes]
            if leaf_mask.any():
                active = active[~leaf_mask]
                nodes = nodes[~leaf_mask]
                if active.size == 0:
                    break

            feat = feature[nodes]
            raw = feat < frame_size
            offset = active + np.where(raw, feat, feat - frame_size)
            first = samples[offset]
            second = samples[np.minimum(offset + 1, last)]
            values = np.where(raw, first, second - first)
            go_lower = values < threshold[nodes]
            node_idx[active] = np.where(go_lower, lower[nodes], high_eq[nodes])

        return compiled["value"][node_idx]

    def to_dict(self) -> Dict[str, object]:
        return {
            "frames": self.frames.tolist(),
            "nodes": [asdict(node) for node in self.nodes],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "Tree":
        tree = cls(frames=np.asarray(payload["frames"], dtype=np.int64))
        for node_data in payload["nodes"]:  # type: ignore[union-attr]
            tree.add_node(TreeNode(**node_data))
        return tree


@dataclass
class ForestModel:
    """Trained frame forest."""

    config: ForestConfig
    trees: List[Tree]

    def to_dict(self) -> Dict[str, object]:
        """Serialise the model to a dictionary."""
        return {
            "config": asdict(self.config),
            "trees": [tree.to_dict() for tree in self.trees],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "ForestModel":
        """Create a model from ``payload`` produced by :meth:`to_dict`."""
        config = ForestConfig(**payload["config"])  # type: ignore[arg-type]
        trees = [Tree.from_dict(tree) for tree in payload["trees"]]  # type: ignore[union-attr]
        return cls(config=config, trees=trees)

    def frame_scores(self, samples: np.ndarray) -> np.ndarray:
        """Fraction of trees voting ``True`` for every frame of ``samples``."""
        series = as_series(samples)
        votes: Optional[np.ndarray] = None
        for tree in self.trees:
            tree_votes = tree.predict_frames(series, frame_size=self.config.frame_size).astype(np.float64)
            votes = tree_votes if votes is None else votes + tree_votes
        if votes is None:
            raise RuntimeError("Model has no trees")
        return votes / len(self.trees)

    def predict_frames(self, samples: np.ndarray) -> np.ndarray:
        return self.frame_scores(samples) >= 0.5

    def predict_frame(self, samples: np.ndarray, frame_start: int) -> bool:
        series = as_series(samples)
        votes = sum(
            tree.predict_frame(series, frame_start, frame_size=self.config.frame_size)
            for tree in self.trees
        )
        return votes / len(self.trees) >= 0.5

    def classify_series(self, samples: np.ndarray) -> np.ndarray:
        """Score every sample using the frame that ends on it (zero-padded on the left)."""
        series = as_series(samples)
        if series.size == 0:
            return np.zeros(0, dtype=np.float64)
        return self.frame_scores(pad_series(series, self.config.frame_size))
