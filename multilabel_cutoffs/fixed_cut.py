"""Rank-and-cut: predict the ``t`` highest ranked labels of every example.

The cut ``t`` is either given, derived from the label cardinality of the
training data, or tuned against a bipartition measure by scanning every cut
``0..L`` on the training data or on held-out folds.
"""

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ThresholdingLearner
from .cv import fold_learners
from .learners import cardinality, confidence_matrix, supports_ranking
from .measures import BipartitionMeasure, get_measure, mean_distance
from .results import ThresholdModel, create_model
from .types_minimal import ModelKind
from .validation import (
    ConfigurationError,
    validate_confidence_matrix,
    validate_cut,
    validate_cv,
    validate_label_matrix,
)

logger = logging.getLogger(__name__)


def cut_distances(
    confidences: ArrayLike,
    Y: ArrayLike,
    measure: str | BipartitionMeasure,
) -> np.ndarray[Any, Any]:
    """Distance from the ideal value of ``measure`` for every cut ``0..L``.

    Parameters
    ----------
    confidences : array-like of shape (n_samples, n_labels)
        Confidences used to rank the labels of every example.
    Y : array-like of shape (n_samples, n_labels)
        Ground truth. Examples with a missing label are skipped.
    measure : str or BipartitionMeasure
        Measure to evaluate.

    Returns
    -------
    np.ndarray[Any, Any]
        Array of length ``L + 1``; entry ``t`` is the distance of the
        example-averaged measure when the top ``t`` labels are predicted.
        Undefined averages are ``inf``.
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

    order = np.argsort(-scores, axis=1, kind="stable")
    relevant_in_rank_order = np.take_along_axis(relevance, order, axis=1)
    # tp[:, t] = relevant labels among the top t
    tp = np.zeros((scores.shape[0], n_labels + 1), dtype=np.int64)
    tp[:, 1:] = np.cumsum(relevant_in_rank_order, axis=1)
    n_relevant = relevance.sum(axis=1)

    distances = np.empty(n_labels + 1, dtype=np.float64)
    for t in range(n_labels + 1):
        distances[t] = mean_distance(
            measure, tp[:, t], t - tp[:, t], n_relevant - tp[:, t], n_labels
        )
    return distances


def select_cut(distances: ArrayLike) -> int:
    """Index of the smallest distance, first one on ties."""
    return int(np.argmin(np.asarray(distances, dtype=np.float64)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(np.floor(value + 0.5))


class FixedCutThreshold(ThresholdingLearner):
    """Predict the ``t`` top ranked labels of every example.

    Parameters
    ----------
    base_learner:
        Multi-label learner producing confidences.
    measure:
        Measure to tune the cut against. Without a measure the cut is the
        rounded label cardinality of the training data.
    t:
        Fixed cut. Takes precedence over ``measure``.
    cv:
        Number of folds for tuning the cut on held-out predictions.
    random_state:
        Seed for shuffling the folds.
    """

    _param_names = ("base_learner", "measure", "t", "cv", "random_state")

    def __init__(
        self,
        base_learner: Any,
        measure: str | BipartitionMeasure | None = None,
        t: int | None = None,
        cv: int | Any | None = None,
        random_state: int | None = None,
    ) -> None:
        super().__init__(base_learner)
        self.measure = measure
        self.t = t
        self.cv = cv
        self.random_state = random_state

    def _check_params(self) -> None:
        validate_cv(self.cv)
        if self.measure is not None:
            get_measure(self.measure)

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        if not supports_ranking(learner, X):
            raise ConfigurationError("Learner is not a ranker")
        n_labels = Y.shape[1]

        if self.t is not None:
            t = validate_cut(self.t, n_labels)
            return create_model(
                kind=ModelKind.CUT, n_labels=n_labels, cut=t, source="given"
            )

        if self.measure is None:
            label_cardinality = cardinality(Y)
            t = round_half_up(label_cardinality)
            logger.debug("cut from label cardinality %.4f: t=%d", label_cardinality, t)
            return create_model(
                kind=ModelKind.CUT,
                n_labels=n_labels,
                cut=t,
                source="cardinality",
                cardinality=label_cardinality,
            )

        measure = get_measure(self.measure)
        n_folds = 1
        if self.cv is None:
            distances = cut_distances(confidence_matrix(learner, X), Y, measure)
        else:
            distances = np.zeros(n_labels + 1, dtype=np.float64)
            n_folds = 0
            for fold, fold_learner, _, test_idx in fold_learners(
                self.base_learner, X, Y, self.cv, self.random_state
            ):
                fold_distances = cut_distances(
                    confidence_matrix(fold_learner, X[test_idx]), Y[test_idx], measure
                )
                logger.debug("fold %d cut distances: %s", fold, fold_distances)
                distances += fold_distances
                n_folds += 1

        t = select_cut(distances)
        logger.debug("cut distances %s, chosen t=%d", distances, t)
        return create_model(
            kind=ModelKind.CUT,
            n_labels=n_labels,
            cut=t,
            score=float(distances[t]) / n_folds,
            source="measure",
            distances=distances,
        )

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        order = np.argsort(-confidences, axis=1, kind="stable")
        bipartitions = np.zeros(confidences.shape, dtype=bool)
        if model.cut is None:
            raise RuntimeError("Cut model has no cut size")
        np.put_along_axis(bipartitions, order[:, : model.cut], True, axis=1)
        return bipartitions
