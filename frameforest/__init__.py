"""frameforest: best-first decision trees over time-series frames."""

from .config import ForestConfig
from .forest import Forest, train
from .grading import roc_auc_score

__all__ = ["Forest", "ForestConfig", "roc_auc_score", "train"]
