"""ROC-AUC scoring for binary event predictions."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import torch

from .data import ensure_numpy
from .exceptions import DegenerateInputError, InputMismatchError

ArrayLike = np.ndarray | torch.Tensor | Sequence[float]

RTOL = 1e-5
ATOL = 1e-8


def fpeq(a: np.ndarray | float, b: np.ndarray | float) -> np.ndarray | bool:
    """Floating point equality: ``|a - b| < atol + rtol * |b|``."""
    return np.abs(np.subtract(a, b)) < ATOL + RTOL * np.abs(b)


def _check_inputs(actual: ArrayLike, predictions: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    actual_np = ensure_numpy(actual)
    preds_np = ensure_numpy(predictions).astype(np.float64, copy=False)
    if actual_np.ndim != 1 or preds_np.ndim != 1:
        raise InputMismatchError("actual and predictions must be 1-D")
    if actual_np.shape[0] != preds_np.shape[0]:
        raise InputMismatchError(
            f"actual ({actual_np.shape[0]}) and predictions ({preds_np.shape[0]}) differ in length"
        )
    if actual_np.size and not np.all((actual_np == 0) | (actual_np == 1)):
        raise InputMismatchError("actual must only contain 0 and 1")
    return actual_np.astype(np.int64, copy=False), preds_np


def binary_clf_curve(
    actual: ArrayLike, predictions: ArrayLike
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(fps, tps, thresholds)`` counts at each distinct prediction value.

    ``fps[i]`` and ``tps[i]`` count the negatives and positives predicted at or
    above ``thresholds[i]``. Thresholds ascend; predictions within tolerance of
    their neighbour share a threshold.
    """
    actual_np, preds_np = _check_inputs(actual, predictions)
    order = np.lexsort((actual_np, preds_np))
    preds_sorted = preds_np[order]
    actual_sorted = actual_np[order]

    n = actual_sorted.shape[0]
    if n == 0:
        empty = np.empty(0, dtype=np.int64)
        return empty, empty, np.empty(0, dtype=np.float64)
    positives = int(actual_sorted.sum())
    # counts still at or above position i
    tps_all = positives - np.concatenate(([0], np.cumsum(actual_sorted)[:-1]))
    fps_all = (n - positives) - np.concatenate(([0], np.cumsum(1 - actual_sorted)[:-1]))

    distinct = np.ones(n, dtype=bool)
    if n > 1:
        distinct[1:] = ~fpeq(preds_sorted[1:], preds_sorted[:-1])
    return fps_all[distinct], tps_all[distinct], preds_sorted[distinct]


def roc_curve(
    actual: ArrayLike, predictions: ArrayLike
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return normalised ``(fpr, tpr, thresholds)``."""
    fps, tps, thresholds = binary_clf_curve(actual, predictions)
    if fps.size == 0:
        raise DegenerateInputError("Can't find thresholds in roc_curve")

    if fps[-1] != 0:
        fps = np.append(fps, 0)
        tps = np.append(tps, 0)
        thresholds = np.append(thresholds, thresholds[-1] + 1.0)

    if fps[0] == 0 or tps[0] == 0:
        raise DegenerateInputError("Can't score: actual data is either all false or all true")

    fpr = fps.astype(np.float64) / float(fps[0])
    tpr = tps.astype(np.float64) / float(tps[0])
    return fpr, tpr, thresholds


def trapz(ys: np.ndarray, xs: np.ndarray) -> float:
    """Area under ``ys`` over ``xs`` using the trapezium rule."""
    ys = np.asarray(ys, dtype=np.float64)
    xs = np.asarray(xs, dtype=np.float64)
    return float(np.sum(np.diff(xs) * (ys[1:] + ys[:-1])) * 0.5)


def auc(xs: ArrayLike, ys: ArrayLike, reorder: bool = True) -> float:
    """Area under the curve through ``(xs, ys)``, sorted by ``xs`` then ``ys`` when ``reorder``."""
    xs_np = ensure_numpy(xs).astype(np.float64, copy=False)
    ys_np = ensure_numpy(ys).astype(np.float64, copy=False)
    if xs_np.shape[0] < 2 or xs_np.shape != ys_np.shape:
        raise DegenerateInputError("auc() requires two equal length arrays of size >= 2")
    if reorder:
        order = np.lexsort((ys_np, xs_np))
        xs_np = xs_np[order]
        ys_np = ys_np[order]
    return trapz(ys_np, xs_np)


def roc_auc_score(actual: ArrayLike, predictions: ArrayLike) -> float:
    """Area under the receiver operating characteristic curve."""
    fpr, tpr, _ = roc_curve(actual, predictions)
    return auc(fpr, tpr, reorder=True)


__all__ = ["auc", "binary_clf_curve", "fpeq", "roc_auc_score", "roc_curve", "trapz"]
