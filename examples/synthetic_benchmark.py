"""Benchmark frameforest against a scikit-learn decision tree on a synthetic event series."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

import numpy as np
from sklearn.metrics import roc_auc_score as sk_roc_auc_score
from sklearn.tree import DecisionTreeClassifier

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from frameforest.config import ForestConfig
from frameforest.data import frame_labels, pad_series
from frameforest.forest import Forest
from frameforest.grading import roc_auc_score

N_SAMPLES = 20000
FRAME_SIZE = 8
MIN_MISCLASSIFIED = 25
SEED = 123


@dataclass
class BenchmarkResult:
    name: str
    fit_time: float
    predict_time: float
    auc: float


def generate_series() -> tuple[np.ndarray, np.ndarray]:
    """Random walk with events flagged after a sharp two-step rise."""
    rng = np.random.default_rng(SEED)
    samples = np.cumsum(rng.integers(-10, 11, size=N_SAMPLES)).astype(np.int64)
    rise = np.zeros(N_SAMPLES, dtype=np.int64)
    rise[2:] = samples[2:] - samples[:-2]
    labels = (rise > 12).astype(np.int64)
    flip = rng.random(N_SAMPLES) < 0.05
    labels[flip] = 1 - labels[flip]
    return samples, labels


def frame_matrix(samples: np.ndarray, frame_size: int) -> np.ndarray:
    """Raw values followed by first differences, one row per frame."""
    windows = np.lib.stride_tricks.sliding_window_view(samples, frame_size)
    return np.hstack([windows, np.diff(windows, axis=1)])


def benchmark(
    name: str,
    fit_fn: Callable[[], None],
    predict_fn: Callable[[], np.ndarray],
    y_true: np.ndarray,
) -> BenchmarkResult:
    """Measure fit/predict time and compute ROC-AUC."""
    t0 = time.perf_counter()
    fit_fn()
    fit_time = time.perf_counter() - t0

    t0 = time.perf_counter()
    preds = predict_fn()
    predict_time = time.perf_counter() - t0

    auc = roc_auc_score(y_true, preds)
    return BenchmarkResult(name=name, fit_time=fit_time, predict_time=predict_time, auc=auc)


if __name__ == "__main__":
    samples, labels = generate_series()
    split = N_SAMPLES * 4 // 5
    train_samples, test_samples = samples[:split], samples[split:]
    train_labels, test_labels = labels[:split], labels[split:]

    results: List[BenchmarkResult] = []

    forest = Forest(ForestConfig(frame_size=FRAME_SIZE, min_misclassified=MIN_MISCLASSIFIED))
    results.append(
        benchmark(
            "frameforest",
            lambda: forest.train(train_samples, train_labels),
            lambda: forest.classify_series(test_samples),
            test_labels,
        )
    )

    # scikit-learn baseline on the same frame features
    X_train = frame_matrix(train_samples, FRAME_SIZE)
    y_train = frame_labels(train_labels, FRAME_SIZE)
    X_test = frame_matrix(pad_series(test_samples, FRAME_SIZE), FRAME_SIZE)
    cart = DecisionTreeClassifier(max_leaf_nodes=max(2, forest.node_count() // 2 + 1), random_state=SEED)
    results.append(
        benchmark(
            "sklearn CART",
            lambda: cart.fit(X_train, y_train),
            lambda: cart.predict_proba(X_test)[:, 1],
            test_labels,
        )
    )

    print(f"frameforest: {forest.node_count()} nodes, average training error {forest.average_error():.1f}")
    print(f"sklearn cross-check AUC: {sk_roc_auc_score(test_labels, forest.classify_series(test_samples)):.4f}")
    print("Model          Fit (s)   Predict (s)   AUC")
    print("-" * 44)
    for res in results:
        print(f"{res.name:<13} {res.fit_time:>8.3f} {res.predict_time:>12.3f} {res.auc:>7.4f}")
