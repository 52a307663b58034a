"""Error kinds raised by frameforest."""

from __future__ import annotations

__all__ = [
    "DegenerateInputError",
    "FrameForestError",
    "InputMismatchError",
    "UnsupportedConfigurationError",
    "UnsupportedFeatureError",
]


class FrameForestError(ValueError):
    """Base class for every input or configuration error raised by frameforest."""


class UnsupportedConfigurationError(FrameForestError):
    """Raised for tree counts other than one and frame sizes that cannot fit the input."""


class UnsupportedFeatureError(FrameForestError):
    """Raised when a feature index falls outside ``[0, 2 * frame_size - 1)``."""


class InputMismatchError(FrameForestError):
    """Raised for malformed series: length mismatches, bad labels or frames outside the series."""


class DegenerateInputError(FrameForestError):
    """Raised by the grading helpers when a curve cannot be formed."""
