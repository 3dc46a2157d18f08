"""One confidence threshold shared by all labels and examples.

The threshold is tuned in two stages: a coarse grid over ``[0, 1]`` with step
0.1, then a fine grid with step 0.01 in a window of +-0.05 around the coarse
winner. Labels with ``confidence >= threshold`` are predicted relevant.
"""

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ThresholdingLearner
from .cv import fold_learners
from .learners import confidence_matrix
from .measures import (
    BipartitionMeasure,
    confusion_counts_matrix,
    get_measure,
    mean_distance,
)
from .results import ThresholdModel, create_model
from .types_minimal import ModelKind
from .validation import validate_confidence_matrix, validate_cv, validate_label_matrix

logger = logging.getLogger(__name__)

COARSE_STEP = 0.1
FINE_STEP = 0.01
FINE_HALF_WIDTH = 0.05


def threshold_distance(
    confidences: np.ndarray[Any, Any],
    relevance: np.ndarray[Any, Any],
    measure: BipartitionMeasure,
    threshold: float,
) -> float:
    """Distance of the averaged measure when predicting ``confidence >= threshold``.

    ``confidences`` and ``relevance`` must already be restricted to examples
    without missing labels.
    """
    tp, fp, fn = confusion_counts_matrix(confidences >= threshold, relevance)
    return mean_distance(measure, tp, fp, fn, confidences.shape[1])


def _prepare(
    confidences: ArrayLike, Y: ArrayLike
) -> tuple[np.ndarray[Any, Any], np.ndarray[Any, Any]]:
    scores = validate_confidence_matrix(confidences)
    relevance, complete = validate_label_matrix(Y, scores.shape[1])
    if relevance.shape[0] != scores.shape[0]:
        raise ValueError(
            f"Length mismatch: {scores.shape[0]} confidence rows vs "
            f"{relevance.shape[0]} label rows"
        )
    return scores[complete], relevance[complete]


def grid_search_threshold(
    confidences: ArrayLike,
    Y: ArrayLike,
    measure: str | BipartitionMeasure,
    start: float,
    step: float,
    stop: float,
) -> tuple[float, float]:
    """Evaluate the thresholds ``start + i * step`` up to ``stop``.

    Parameters
    ----------
    confidences : array-like of shape (n_samples, n_labels)
        Confidences of the examples.
    Y : array-like of shape (n_samples, n_labels)
        Ground truth; examples with a missing label are skipped.
    measure : str or BipartitionMeasure
        Measure whose distance from the ideal value is minimised.
    start, step, stop : float
        Grid definition. ``round((stop - start) / step) + 1`` candidates are
        evaluated.

    Returns
    -------
    tuple[float, float]
        The first candidate with the smallest distance, and that distance.
        A candidate on which the measure is undefined has distance ``inf``.
    """
    measure = get_measure(measure)
    scores, relevance = _prepare(confidences, Y)
    n_candidates = int(round((stop - start) / step)) + 1
    candidates = start + step * np.arange(n_candidates)
    distances = np.array(
        [threshold_distance(scores, relevance, measure, thr) for thr in candidates]
    )
    best = int(np.argmin(distances))
    return float(candidates[best]), float(distances[best])


def two_stage_threshold(
    confidences: ArrayLike,
    Y: ArrayLike,
    measure: str | BipartitionMeasure,
) -> tuple[float, float, float]:
    """Coarse-to-fine threshold search on ``[0, 1]``.

    Returns
    -------
    tuple[float, float, float]
        (threshold, distance, coarse threshold)
    """
    coarse, _ = grid_search_threshold(confidences, Y, measure, 0.0, COARSE_STEP, 1.0)
    low = max(0.0, coarse - FINE_HALF_WIDTH)
    high = min(1.0, coarse + FINE_HALF_WIDTH)
    fine, distance = grid_search_threshold(
        confidences, Y, measure, low, FINE_STEP, high
    )
    logger.debug("coarse threshold %.2f, fine threshold %.2f", coarse, fine)
    return fine, distance, coarse


class GlobalScalarThreshold(ThresholdingLearner):
    """Bipartition with one threshold tuned for a measure.

    Parameters
    ----------
    base_learner:
        Multi-label learner producing confidences.
    measure:
        Measure to tune the threshold against.
    cv:
        Number of folds. With folds, every fold tunes its own threshold on
        held-out confidences and the final threshold is their mean.
    random_state:
        Seed for shuffling the folds.
    """

    _param_names = ("base_learner", "measure", "cv", "random_state")

    def __init__(
        self,
        base_learner: Any,
        measure: str | BipartitionMeasure = "hamming_loss",
        cv: int | Any | None = None,
        random_state: int | None = None,
    ) -> None:
        super().__init__(base_learner)
        self.measure = measure
        self.cv = cv
        self.random_state = random_state

    def _check_params(self) -> None:
        validate_cv(self.cv)
        get_measure(self.measure)

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        measure = get_measure(self.measure)
        n_labels = Y.shape[1]

        if self.cv is None:
            threshold, distance, coarse = two_stage_threshold(
                confidence_matrix(learner, X), Y, measure
            )
            return create_model(
                kind=ModelKind.THRESHOLD,
                n_labels=n_labels,
                threshold=threshold,
                score=distance,
                coarse_threshold=coarse,
            )

        fold_thresholds = []
        for fold, fold_learner, _, test_idx in fold_learners(
            self.base_learner, X, Y, self.cv, self.random_state
        ):
            threshold, _, _ = two_stage_threshold(
                confidence_matrix(fold_learner, X[test_idx]), Y[test_idx], measure
            )
            logger.debug("fold %d threshold %.4f", fold, threshold)
            fold_thresholds.append(threshold)

        threshold = float(np.mean(fold_thresholds))
        return create_model(
            kind=ModelKind.THRESHOLD,
            n_labels=n_labels,
            threshold=threshold,
            fold_thresholds=np.asarray(fold_thresholds),
        )

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        return confidences >= model.threshold
