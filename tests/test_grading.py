import numpy as np
import pytest
import torch

from frameforest.exceptions import DegenerateInputError, InputMismatchError
from frameforest.grading import auc, binary_clf_curve, fpeq, roc_auc_score, roc_curve


def test_roc_auc_simple() -> None:
    assert roc_auc_score([0, 0, 1, 1], [0.1, 0.4, 0.35, 0.8]) == pytest.approx(0.75)


def test_roc_auc_with_ties() -> None:
    actual = [0, 0, 0, 0, 1, 1, 1]
    predictions = [0.1, 0.6, 0.6, 0.23, 0.1, 0.23, 0.5]
    assert roc_auc_score(actual, predictions) == pytest.approx(1.0 / 3.0)


def test_perfect_and_inverted_rankings() -> None:
    assert roc_auc_score([0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9]) == pytest.approx(1.0)
    assert roc_auc_score([1, 1, 0, 0], [0.1, 0.2, 0.8, 0.9]) == pytest.approx(0.0)


def test_binary_clf_curve_counts() -> None:
    fps, tps, thresholds = binary_clf_curve([0, 0, 1, 1], [0.1, 0.4, 0.35, 0.8])
    np.testing.assert_array_equal(fps, [2, 1, 1, 0])
    np.testing.assert_array_equal(tps, [2, 2, 1, 1])
    np.testing.assert_allclose(thresholds, [0.1, 0.35, 0.4, 0.8])


def test_near_equal_predictions_share_a_threshold() -> None:
    fps, tps, thresholds = binary_clf_curve([0, 1, 1], [0.5, 0.5 + 1e-9, 0.9])
    assert thresholds.shape == (2,)
    np.testing.assert_array_equal(fps, [1, 0])
    np.testing.assert_array_equal(tps, [2, 1])
    assert fpeq(0.5, 0.5 + 1e-9)
    assert not fpeq(0.5, 0.51)


def test_roc_curve_appends_origin() -> None:
    fpr, tpr, thresholds = roc_curve([0, 0, 0, 0, 1, 1, 1], [0.1, 0.6, 0.6, 0.23, 0.1, 0.23, 0.5])
    assert (fpr[-1], tpr[-1]) == (0.0, 0.0)
    assert (fpr[0], tpr[0]) == (1.0, 1.0)
    assert thresholds[-1] == pytest.approx(1.6)


@pytest.mark.parametrize("actual", [[0, 0, 0], [1, 1, 1]])
def test_single_class_is_rejected(actual) -> None:
    with pytest.raises(DegenerateInputError):
        roc_auc_score(actual, [0.2, 0.5, 0.7])


def test_invalid_inputs() -> None:
    with pytest.raises(DegenerateInputError):
        roc_auc_score([], [])
    with pytest.raises(InputMismatchError):
        roc_auc_score([0, 1], [0.5])
    with pytest.raises(InputMismatchError):
        roc_auc_score([0, 2], [0.5, 0.1])
    with pytest.raises(DegenerateInputError):
        auc([0.0], [1.0])
    with pytest.raises(DegenerateInputError):
        auc([0.0, 1.0], [1.0])


def test_auc_reorders_points() -> None:
    assert auc([1.0, 0.0, 0.5], [1.0, 0.0, 0.5]) == pytest.approx(0.5)
    assert auc([0.0, 1.0], [1.0, 1.0], reorder=False) == pytest.approx(1.0)


def test_accepts_tensors() -> None:
    actual = torch.tensor([0, 0, 1, 1])
    predictions = torch.tensor([0.1, 0.4, 0.35, 0.8], dtype=torch.float64)
    assert roc_auc_score(actual, predictions) == pytest.approx(0.75)
