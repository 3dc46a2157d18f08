"""Adapter around scikit-learn compatible multi-label learners.

A base learner is any estimator with ``fit(X, Y)`` and at least one of
``predict_proba``, ``decision_function`` or ``predict``. Confidences are taken
from the first of those that exists; a learner with only ``predict`` yields
bipartitions without confidences and therefore without a ranking.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike
from sklearn.base import clone  # type: ignore[import-untyped]

from .results import MultiLabelOutput
from .validation import ConfigurationError, validate_label_matrix


def clone_learner(learner: Any) -> Any:
    """Return an unfitted copy of ``learner`` that shares no state with it."""
    return clone(learner, safe=False)


def _positive_column(proba: np.ndarray[Any, Any], classes: Any) -> np.ndarray[Any, Any]:
    """Probability of the positive class from a per-label ``predict_proba`` block."""
    proba = np.asarray(proba, dtype=np.float64)
    if proba.ndim == 1:
        return proba
    if classes is not None and len(classes) == proba.shape[1]:
        positive = np.flatnonzero(np.asarray(classes) == 1)
        if positive.size:
            return proba[:, positive[0]]
    if proba.shape[1] == 2:
        return proba[:, 1]
    # Only the negative class was seen while fitting this label
    if proba.shape[1] == 1:
        return np.zeros(proba.shape[0])
    raise ValueError(
        f"Cannot extract a positive-class probability from shape {proba.shape}"
    )


def _is_single_output(learner: Any, proba: np.ndarray[Any, Any]) -> bool:
    """Whether ``proba`` has one column per class of a single binary label."""
    classes = getattr(learner, "classes_", None)
    return (
        isinstance(classes, np.ndarray)
        and classes.ndim == 1
        and getattr(learner, "n_outputs_", 1) == 1
        and proba.ndim == 2
        and proba.shape[1] == classes.size
    )


def _proba_matrix(learner: Any, X: Any) -> np.ndarray[Any, Any]:
    proba = learner.predict_proba(X)
    if isinstance(proba, list):
        # Multi-output estimators expose one classes_ array per label
        classes = getattr(learner, "classes_", None)
        if not isinstance(classes, list) or len(classes) != len(proba):
            classes = [None] * len(proba)
        return np.column_stack(
            [_positive_column(block, cls) for block, cls in zip(proba, classes)]
        )
    proba = np.asarray(proba, dtype=np.float64)
    if _is_single_output(learner, proba):
        return _positive_column(proba, learner.classes_).reshape(-1, 1)
    return proba.reshape(-1, 1) if proba.ndim == 1 else proba


def _raw_outputs(
    learner: Any, X: Any
) -> tuple[np.ndarray[Any, Any] | None, np.ndarray[Any, Any] | None]:
    """Return (confidences, bipartitions) of ``learner`` on ``X``; one is None."""
    if hasattr(learner, "predict_proba"):
        return _proba_matrix(learner, X), None
    if hasattr(learner, "decision_function"):
        scores = np.asarray(learner.decision_function(X), dtype=np.float64)
        return (scores.reshape(-1, 1) if scores.ndim == 1 else scores), None
    if hasattr(learner, "predict"):
        labels = np.asarray(learner.predict(X))
        if labels.ndim == 1:
            labels = labels.reshape(-1, 1)
        relevance, _ = validate_label_matrix(labels)
        return None, relevance
    raise ConfigurationError(
        f"{type(learner).__name__} exposes neither predict_proba, "
        "decision_function nor predict"
    )


def confidence_matrix(learner: Any, X: ArrayLike) -> np.ndarray[Any, Any]:
    """Per-label confidences of a fitted learner, shape (n_samples, n_labels).

    Raises
    ------
    ConfigurationError
        If the learner only produces hard bipartitions
    """
    confidences, _ = _raw_outputs(learner, X)
    if confidences is None:
        raise ConfigurationError(
            f"{type(learner).__name__} does not produce confidence scores"
        )
    if not np.all(np.isfinite(confidences)):
        raise ValueError("Base learner produced non-finite confidences")
    return confidences


def predict_outputs(learner: Any, X: ArrayLike) -> list[MultiLabelOutput]:
    """One :class:`MultiLabelOutput` per example of ``X``."""
    confidences, bipartitions = _raw_outputs(learner, X)
    if confidences is not None:
        return [MultiLabelOutput(confidences=row) for row in confidences]
    if bipartitions is None:
        raise RuntimeError(f"{type(learner).__name__} produced no predictions")
    return [MultiLabelOutput(bipartition=row) for row in bipartitions]


def supports_ranking(learner: Any, X: ArrayLike) -> bool:
    """Whether a fitted learner ranks labels, checked on the first example of ``X``."""
    first = np.asarray(X)[:1]
    return predict_outputs(learner, first)[0].has_ranking


def cardinality(Y: ArrayLike) -> float:
    """Average number of relevant labels over examples without missing labels.

    Examples
    --------
    >>> cardinality([[1, 0, 1], [0, 0, 1]])
    1.5
    """
    relevance, complete = validate_label_matrix(Y)
    if not np.any(complete):
        raise ValueError("Every example has at least one missing label")
    return float(np.mean(relevance[complete].sum(axis=1)))
