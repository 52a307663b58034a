"""scikit-learn wrapper for the frame forest."""

from __future__ import annotations

from typing import Optional

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from .config import ForestConfig
from .forest import Forest


class FrameForestClassifier(BaseEstimator, ClassifierMixin):
    """scikit-learn compatible estimator wrapping :class:`Forest`.

    ``X`` is a single 1-D sample series and ``y`` holds one 0/1 label per
    sample. Predictions are per sample, each one made from the frame ending on
    that sample.
    """

    def __init__(
        self,
        *,
        frame_size: int = 8,
        tree_count: int = 1,
        min_misclassified: int = 0,
        improvement_ratio: float = 0.99,
    ) -> None:
        self.frame_size = frame_size
        self.tree_count = tree_count
        self.min_misclassified = min_misclassified
        self.improvement_ratio = improvement_ratio
        self._forest: Optional[Forest] = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> "FrameForestClassifier":
        """Fit the estimator.

        Parameters
        ----------
        X: np.ndarray
            Sample series of shape (n_samples,).
        y: np.ndarray
            0/1 labels of shape (n_samples,).
        """
        config = ForestConfig(
            frame_size=self.frame_size,
            tree_count=self.tree_count,
            min_misclassified=self.min_misclassified,
            improvement_ratio=self.improvement_ratio,
        )
        forest = Forest(config)
        forest.train(np.asarray(X), np.asarray(y))
        self._forest = forest
        self.model_ = forest.model
        self.classes_ = np.array([0, 1])
        self.n_nodes_ = forest.node_count()
        self.training_error_ = forest.average_error()
        return self

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        scores = self.get_model().classify_series(np.asarray(X))
        return np.column_stack([1.0 - scores, scores])

    def predict(self, X: np.ndarray) -> np.ndarray:
        scores = self.get_model().classify_series(np.asarray(X))
        return (scores >= 0.5).astype(np.int64)

    def get_model(self) -> Forest:
        if self._forest is None:
            raise RuntimeError("Estimator has not been fitted")
        return self._forest
