"""Cross-validation helpers for threshold tuning.

Every fold trains its own unfitted copy of the base learner and evaluates it on
the held-out examples only, so tuning statistics never see training
confidences of the learner they are computed for.
"""

import logging
from collections.abc import Iterator
from typing import Any

import numpy as np
from numpy.typing import ArrayLike
from sklearn.model_selection import KFold  # type: ignore[import-untyped]

from .learners import clone_learner, confidence_matrix
from .validation import validate_cv

logger = logging.getLogger(__name__)


def make_splitter(cv: int | Any, random_state: int | None = None) -> Any:
    """Build the fold splitter for ``cv``.

    Parameters
    ----------
    cv : int or cross-validator
        Number of folds (>= 2) or an object with a ``split`` method.
    random_state : int, optional
        Seed for shuffling. Without a seed the folds are contiguous blocks,
        which keeps repeated fits deterministic.

    Returns
    -------
    Any
        Object with a ``split(X)`` method.

    Raises
    ------
    ConfigurationError
        If ``cv`` is an integer below 2
    """
    cv = validate_cv(cv)
    if cv is None:
        raise ValueError("cv must not be None when building a splitter")
    if hasattr(cv, "split"):
        return cv
    return KFold(
        n_splits=cv, shuffle=random_state is not None, random_state=random_state
    )


def fold_learners(
    learner: Any,
    X: ArrayLike,
    Y: ArrayLike,
    cv: int | Any,
    random_state: int | None = None,
) -> Iterator[tuple[int, Any, np.ndarray[Any, Any], np.ndarray[Any, Any]]]:
    """Yield ``(fold, fitted_copy, train_idx, test_idx)`` for every fold.

    Each fitted copy is an independent clone of ``learner`` trained on the
    fold's training rows.
    """
    X_arr = np.asarray(X)
    Y_arr = np.asarray(Y)
    splitter = make_splitter(cv, random_state)
    for fold, (train_idx, test_idx) in enumerate(splitter.split(X_arr, Y_arr)):
        fold_learner = clone_learner(learner)
        fold_learner.fit(X_arr[train_idx], Y_arr[train_idx])
        logger.debug(
            "fold %d: trained on %d examples, evaluating %d",
            fold,
            len(train_idx),
            len(test_idx),
        )
        yield fold, fold_learner, train_idx, test_idx


def out_of_fold_confidences(
    learner: Any,
    X: ArrayLike,
    Y: ArrayLike,
    cv: int | Any,
    random_state: int | None = None,
) -> np.ndarray[Any, Any]:
    """Confidences of every example predicted by the fold that held it out."""
    Y_arr = np.asarray(Y)
    X_arr = np.asarray(X)
    confidences = np.full(Y_arr.shape, np.nan, dtype=np.float64)
    for _, fold_learner, _, test_idx in fold_learners(
        learner, X_arr, Y_arr, cv, random_state
    ):
        confidences[test_idx] = confidence_matrix(fold_learner, X_arr[test_idx])
    return confidences
