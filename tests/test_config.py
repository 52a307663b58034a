import pytest

from frameforest.config import ForestConfig
from frameforest.exceptions import UnsupportedConfigurationError
from frameforest.forest import Forest


def test_config_defaults():
    cfg = ForestConfig(frame_size=4)
    assert cfg.tree_count == 1
    assert cfg.min_misclassified == 0
    assert cfg.improvement_ratio == 0.99
    assert cfg.skip_tied_thresholds is False
    assert cfg.exclude_ancestor_features is False


@pytest.mark.parametrize("tree_count", [0, 2, 5])
def test_forest_rejects_multiple_trees(tree_count: int) -> None:
    with pytest.raises(UnsupportedConfigurationError):
        Forest(ForestConfig(frame_size=2, tree_count=tree_count))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frame_size": 0},
        {"frame_size": 2, "min_misclassified": -1},
        {"frame_size": 2, "improvement_ratio": 0.0},
        {"frame_size": 2, "improvement_ratio": 1.5},
    ],
)
def test_forest_rejects_invalid_parameters(kwargs) -> None:
    with pytest.raises(UnsupportedConfigurationError):
        Forest(ForestConfig(**kwargs))


def test_tied_threshold_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FRAMEFOREST_TIED_THRESHOLDS", "skip")
    assert Forest(ForestConfig(frame_size=2)).config.skip_tied_thresholds is True
    monkeypatch.setenv("FRAMEFOREST_TIED_THRESHOLDS", "KEEP")
    forest = Forest(ForestConfig(frame_size=2, skip_tied_thresholds=True))
    assert forest.config.skip_tied_thresholds is False
    monkeypatch.setenv("FRAMEFOREST_TIED_THRESHOLDS", "sometimes")
    with pytest.raises(UnsupportedConfigurationError):
        Forest(ForestConfig(frame_size=2))


def test_allowed_features_cover_whole_space() -> None:
    forest = Forest(ForestConfig(frame_size=3))
    assert list(forest.allowed_features[0]) == [0, 1, 2, 3, 4]
