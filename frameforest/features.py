"""Frame feature extraction.

A frame of ``frame_size`` samples exposes ``2 * frame_size - 1`` integer
features: the ``frame_size`` raw samples followed by the ``frame_size - 1``
first differences between adjacent samples.
"""

from __future__ import annotations

import numpy as np

from .exceptions import InputMismatchError, UnsupportedFeatureError


def feature_count(frame_size: int) -> int:
    """Size of the feature space for frames of ``frame_size`` samples."""
    return 2 * frame_size - 1


def _check_feature(feature: int, frame_size: int) -> None:
    if feature < 0 or feature >= feature_count(frame_size):
        raise UnsupportedFeatureError(
            f"feature {feature} outside [0, {feature_count(frame_size)}) for frame_size={frame_size}"
        )


def score(samples: np.ndarray, frame_start: int, feature: int, *, frame_size: int) -> int:
    """Return the value of ``feature`` for the frame starting at ``frame_start``."""
    _check_feature(feature, frame_size)
    if frame_start < 0 or frame_start + frame_size > len(samples):
        raise InputMismatchError(
            f"frame [{frame_start}, {frame_start + frame_size}) does not fit in {len(samples)} samples"
        )
    if feature < frame_size:
        return int(samples[frame_start + feature])
    first = frame_start + feature - frame_size
    return int(samples[first + 1]) - int(samples[first])


def score_frames(
    samples: np.ndarray, frames: np.ndarray, feature: int, *, frame_size: int
) -> np.ndarray:
    """Vectorised :func:`score` over an array of frame starts."""
    _check_feature(feature, frame_size)
    frames = np.asarray(frames, dtype=np.int64)
    if frames.size and (frames.min() < 0 or frames.max() + frame_size > samples.shape[0]):
        raise InputMismatchError("frame starts fall outside the series")
    if feature < frame_size:
        return samples[frames + feature]
    first = frames + (feature - frame_size)
    return samples[first + 1] - samples[first]
