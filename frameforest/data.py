"""Input coercion and validation for frame forest training."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import torch

from .exceptions import InputMismatchError, UnsupportedConfigurationError


def ensure_numpy(array: np.ndarray | torch.Tensor | Sequence[int]) -> np.ndarray:
    """Convert ``array`` to an ``np.ndarray`` without copying when possible."""

    if isinstance(array, np.ndarray):
        return np.asarray(array)
    if isinstance(array, torch.Tensor):
        return array.detach().cpu().numpy()
    return np.asarray(array)


def as_series(samples: np.ndarray | torch.Tensor | Sequence[int]) -> np.ndarray:
    """Return ``samples`` as a 1-D ``int64`` array."""

    series = ensure_numpy(samples)
    if series.ndim != 1:
        raise InputMismatchError("samples must be a 1-D series")
    if series.size and not np.issubdtype(series.dtype, np.integer):
        rounded = np.rint(series)
        if not np.array_equal(rounded, series):
            raise InputMismatchError("samples must hold integer values")
        series = rounded
    return series.astype(np.int64, copy=False)


def check_frame_size(frame_size: int, n_samples: int) -> int:
    """Return the frame count for ``n_samples`` samples, validating ``frame_size``."""

    if frame_size < 1:
        raise UnsupportedConfigurationError(f"frame_size must be positive, got {frame_size}")
    if frame_size > n_samples:
        raise UnsupportedConfigurationError(
            f"frame_size ({frame_size}) exceeds the series length ({n_samples})"
        )
    return n_samples - frame_size + 1


def validate_series(
    samples: np.ndarray | torch.Tensor | Sequence[int],
    labels: np.ndarray | torch.Tensor | Sequence[int],
    frame_size: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Validate a training series and return ``(samples, labels)`` as ``int64`` arrays."""

    samples_np = as_series(samples)
    labels_np = ensure_numpy(labels)
    if labels_np.ndim != 1:
        raise InputMismatchError("labels must be a 1-D series")
    if labels_np.shape[0] != samples_np.shape[0]:
        raise InputMismatchError(
            f"samples ({samples_np.shape[0]}) and labels ({labels_np.shape[0]}) differ in length"
        )
    if labels_np.size and not np.all((labels_np == 0) | (labels_np == 1)):
        raise InputMismatchError("labels must only contain 0 and 1")
    check_frame_size(frame_size, samples_np.shape[0])
    return samples_np, labels_np.astype(np.int64, copy=False)


def frame_labels(labels: np.ndarray, frame_size: int) -> np.ndarray:
    """Return the label of every frame, i.e. the label of the frame's last sample."""

    return np.asarray(labels[frame_size - 1 :], dtype=np.int64)


def pad_series(samples: np.ndarray, frame_size: int) -> np.ndarray:
    """Left-pad ``samples`` with ``frame_size - 1`` zeros so every sample ends a frame."""

    if frame_size < 1:
        raise UnsupportedConfigurationError(f"frame_size must be positive, got {frame_size}")
    pad = np.zeros(frame_size - 1, dtype=np.int64)
    return np.concatenate([pad, np.asarray(samples, dtype=np.int64)])
