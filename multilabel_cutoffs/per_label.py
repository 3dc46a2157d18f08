"""One threshold per label, tuned by coordinate search.

All thresholds start at 0.5. A sweep visits the labels in order; for each
label the candidate thresholds are its smallest confidence and the midpoints
between its consecutive sorted confidences. With the thresholds of the other
labels held fixed, the first candidate with the smallest distance of the
example-averaged measure from its ideal value is kept. Sweeps repeat until no
label's best distance changes by more than ``tol`` relative to its first
sweep, or ``max_iter`` sweeps have run.
"""

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ThresholdingLearner
from .cv import fold_learners
from .learners import confidence_matrix
from .measures import BipartitionMeasure, get_measure, mean_distance
from .results import ThresholdModel, create_model
from .types_minimal import ModelKind
from .validation import (
    ConfigurationError,
    validate_confidence_matrix,
    validate_cv,
    validate_label_matrix,
)

logger = logging.getLogger(__name__)

INITIAL_THRESHOLD = 0.5


def label_candidates(confidences: ArrayLike) -> np.ndarray[Any, Any]:
    """Candidate thresholds of one label from its confidences over examples.

    Examples
    --------
    >>> label_candidates([0.5, 0.25, 1.0]).tolist()
    [0.25, 0.375, 0.75]
    """
    ascending = np.sort(np.asarray(confidences, dtype=np.float64))
    candidates = ascending.copy()
    candidates[1:] = (ascending[1:] + ascending[:-1]) / 2
    return candidates


def _converged(current: float, previous: float, first: float, tol: float) -> bool:
    if current == previous:
        return True
    change = abs(current - previous)
    scale = abs(first)
    return bool(np.isfinite(change) and scale > 0 and change / scale < tol)


def coordinate_search_thresholds(
    confidences: ArrayLike,
    Y: ArrayLike,
    measure: str | BipartitionMeasure,
    max_iter: int = 20,
    tol: float = 1e-3,
) -> tuple[np.ndarray[Any, Any], np.ndarray[Any, Any], int]:
    """Tune one threshold per label by coordinate search.

    Parameters
    ----------
    confidences : array-like of shape (n_samples, n_labels)
        Confidences of the examples.
    Y : array-like of shape (n_samples, n_labels)
        Ground truth; examples with a missing label are skipped.
    measure : str or BipartitionMeasure
        Measure to optimise.
    max_iter : int, default=20
        Maximum number of sweeps over the labels.
    tol : float, default=1e-3
        Relative change of a label's best distance below which it is
        considered converged.

    Returns
    -------
    tuple
        (thresholds of shape (n_labels,), best distance per label from the
        last sweep, number of sweeps run)
    """
    measure = get_measure(measure)
    scores = validate_confidence_matrix(confidences)
    n_labels = scores.shape[1]
    relevance, complete = validate_label_matrix(Y, n_labels)
    if relevance.shape[0] != scores.shape[0]:
        raise ValueError(
            f"Length mismatch: {scores.shape[0]} confidence rows vs "
            f"{relevance.shape[0]} label rows"
        )
    scores = scores[complete]
    relevance = relevance[complete]
    if scores.shape[0] == 0:
        raise ValueError("Every example has at least one missing label")

    thresholds = np.full(n_labels, INITIAL_THRESHOLD)
    candidates = [label_candidates(scores[:, j]) for j in range(n_labels)]
    first = np.full(n_labels, np.nan)
    previous = np.full(n_labels, np.nan)
    current = np.full(n_labels, np.nan)

    n_sweeps = 0
    while n_sweeps < max_iter:
        for j in range(n_labels):
            predicted = scores >= thresholds
            others = np.ones(n_labels, dtype=bool)
            others[j] = False
            pred_rest = predicted[:, others]
            true_rest = relevance[:, others]
            tp_rest = np.count_nonzero(pred_rest & true_rest, axis=1)
            fp_rest = np.count_nonzero(pred_rest & ~true_rest, axis=1)
            fn_rest = np.count_nonzero(~pred_rest & true_rest, axis=1)

            distances = np.empty(candidates[j].size, dtype=np.float64)
            for i, candidate in enumerate(candidates[j].tolist()):
                column = scores[:, j] >= candidate
                truth = relevance[:, j]
                distances[i] = mean_distance(
                    measure,
                    tp_rest + (column & truth),
                    fp_rest + (column & ~truth),
                    fn_rest + (~column & truth),
                    n_labels,
                )
            best = int(np.argmin(distances))
            thresholds[j] = candidates[j][best]
            current[j] = distances[best]

        if n_sweeps == 0:
            first = current.copy()
        elif all(
            _converged(current[j], previous[j], first[j], tol) for j in range(n_labels)
        ):
            n_sweeps += 1
            break
        previous = current.copy()
        n_sweeps += 1

    logger.debug("per-label thresholds after %d sweeps: %s", n_sweeps, thresholds)
    return thresholds, current, n_sweeps


class PerLabelThreshold(ThresholdingLearner):
    """Bipartition each label at its own tuned threshold.

    Parameters
    ----------
    base_learner:
        Multi-label learner producing confidences.
    measure:
        Measure to tune the thresholds against.
    cv:
        Number of folds. With folds the thresholds are tuned on each fold's
        held-out confidences and averaged label-wise.
    max_iter:
        Maximum number of coordinate search sweeps.
    tol:
        Relative convergence tolerance.
    random_state:
        Seed for shuffling the folds.
    """

    _param_names = (
        "base_learner",
        "measure",
        "cv",
        "max_iter",
        "tol",
        "random_state",
    )

    def __init__(
        self,
        base_learner: Any,
        measure: str | BipartitionMeasure = "hamming_loss",
        cv: int | Any | None = None,
        max_iter: int = 20,
        tol: float = 1e-3,
        random_state: int | None = None,
    ) -> None:
        super().__init__(base_learner)
        self.measure = measure
        self.cv = cv
        self.max_iter = max_iter
        self.tol = tol
        self.random_state = random_state

    def _check_params(self) -> None:
        validate_cv(self.cv)
        get_measure(self.measure)
        if self.max_iter < 1:
            raise ConfigurationError(
                f"max_iter must be at least 1, got {self.max_iter}"
            )
        if self.tol < 0:
            raise ConfigurationError(f"tol must be non-negative, got {self.tol}")

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        measure = get_measure(self.measure)
        n_labels = Y.shape[1]

        if self.cv is None:
            thresholds, distances, n_sweeps = coordinate_search_thresholds(
                confidence_matrix(learner, X), Y, measure, self.max_iter, self.tol
            )
            return create_model(
                kind=ModelKind.PER_LABEL,
                n_labels=n_labels,
                threshold=thresholds,
                label_distances=distances,
                n_sweeps=n_sweeps,
            )

        fold_thresholds = []
        for fold, fold_learner, _, test_idx in fold_learners(
            self.base_learner, X, Y, self.cv, self.random_state
        ):
            thresholds, _, _ = coordinate_search_thresholds(
                confidence_matrix(fold_learner, X[test_idx]),
                Y[test_idx],
                measure,
                self.max_iter,
                self.tol,
            )
            logger.debug("fold %d thresholds %s", fold, thresholds)
            fold_thresholds.append(thresholds)

        stacked = np.vstack(fold_thresholds)
        return create_model(
            kind=ModelKind.PER_LABEL,
            n_labels=n_labels,
            threshold=stacked.mean(axis=0),
            fold_thresholds=stacked,
        )

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        return confidences >= model.threshold
