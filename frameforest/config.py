"""Configuration objects for frameforest."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ForestConfig:
    """Hyper-parameters steering frame forest training.

    Parameters
    ----------
    frame_size:
        Number of consecutive samples in each frame. Frame ``i`` covers
        ``samples[i : i + frame_size]`` and carries the label of its last sample.
    tree_count:
        Number of trees to grow. Only ``1`` is supported; any other value is
        rejected when the forest is constructed.
    min_misclassified:
        Growth stops as soon as the most promising leaf misclassifies fewer
        frames than this.
    improvement_ratio:
        A split is only accepted when its misclassified count is strictly below
        ``int(improvement_ratio * node.misclassified)``. The default asks for at
        least a 1% reduction.
    skip_tied_thresholds:
        When ``True`` the threshold sweep ignores positions whose score equals
        the previous score. The default ``False`` evaluates every position,
        tied or not. Can be overridden with ``FRAMEFOREST_TIED_THRESHOLDS``
        (``"keep"`` or ``"skip"``).
    exclude_ancestor_features:
        When ``True`` a node may not split on a feature already used by one of
        its ancestors. Off by default: features are reusable at any depth.
    """

    frame_size: int
    tree_count: int = 1
    min_misclassified: int = 0
    improvement_ratio: float = 0.99
    skip_tied_thresholds: bool = False
    exclude_ancestor_features: bool = False
