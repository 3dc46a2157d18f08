"""validation.py - Simple, direct validation with fail-fast semantics."""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .types_minimal import MISSING_LABEL


class ConfigurationError(ValueError):
    """Raised when a thresholding strategy is configured in an unusable way."""


# ============================================================================
# Core validation - Just simple functions that return clean arrays
# ============================================================================


def validate_confidences(confidences: ArrayLike) -> np.ndarray[Any, Any]:
    """Validate and return a single confidence vector as float64 array.

    Parameters
    ----------
    confidences : array-like
        Per-label confidence scores of one example

    Returns
    -------
    np.ndarray of float64
        Validated 1D confidence vector

    Raises
    ------
    ValueError
        If the vector is empty, not 1D or contains NaN/inf
    """
    arr = np.asarray(confidences, dtype=np.float64)

    if arr.ndim != 1:
        raise ValueError(f"Confidences must be 1D, got shape {arr.shape}")

    if arr.size == 0:
        raise ValueError("Confidences cannot be empty")

    if not np.all(np.isfinite(arr)):
        raise ValueError("Confidences must be finite (no NaN/inf)")

    return arr


def validate_confidence_matrix(confidences: ArrayLike) -> np.ndarray[Any, Any]:
    """Validate and return a confidence matrix of shape (n_samples, n_labels)."""
    arr = np.asarray(confidences, dtype=np.float64)

    if arr.ndim == 1:
        arr = arr.reshape(1, -1)

    if arr.ndim != 2:
        raise ValueError(f"Confidence matrix must be 2D, got {arr.ndim}D")

    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError(f"Confidence matrix cannot be empty, got shape {arr.shape}")

    if not np.all(np.isfinite(arr)):
        raise ValueError("Confidences must be finite (no NaN/inf)")

    return arr


def validate_probabilities(probs: ArrayLike) -> np.ndarray[Any, Any]:
    """Validate a confidence vector that is interpreted as probabilities.

    Raises
    ------
    ValueError
        If any value lies outside [0, 1]
    """
    arr = validate_confidences(probs)

    if np.any(arr < 0) or np.any(arr > 1):
        raise ValueError(
            f"Probabilities must be in [0, 1], got range "
            f"[{arr.min():.3f}, {arr.max():.3f}]"
        )

    return arr


def validate_label_matrix(
    labels: ArrayLike, n_labels: int | None = None
) -> tuple[np.ndarray[Any, Any], np.ndarray[Any, Any]]:
    """Validate ground truth and locate examples with missing labels.

    Parameters
    ----------
    labels : array-like of shape (n_samples, n_labels)
        Relevance indicators in {0, 1}. ``NaN`` or ``-1`` marks a missing
        label value.
    n_labels : int, optional
        If provided, validate the number of label columns

    Returns
    -------
    tuple
        (bool matrix of relevance with missing values set to False,
        bool vector that is True for rows without missing labels)

    Raises
    ------
    ValueError
        If labels are not a 2D matrix over {0, 1} plus the missing markers
    """
    arr = np.asarray(labels, dtype=np.float64)

    if arr.ndim == 1:
        arr = arr.reshape(1, -1)

    if arr.ndim != 2:
        raise ValueError(f"Labels must be 2D, got shape {arr.shape}")

    if arr.size == 0:
        raise ValueError("Labels cannot be empty")

    missing = np.isnan(arr) | (arr == MISSING_LABEL)
    known = arr[~missing]
    if not np.all((known == 0) | (known == 1)):
        unique = np.unique(known)
        raise ValueError(f"Labels must be binary (0 or 1), got unique values: {unique}")

    if n_labels is not None and arr.shape[1] != n_labels:
        raise ValueError(f"Expected {n_labels} label columns, got {arr.shape[1]}")

    relevance = np.where(missing, 0.0, arr).astype(bool)
    complete = ~np.any(missing, axis=1)
    return relevance, complete


def validate_training_data(
    X: ArrayLike, Y: ArrayLike
) -> tuple[np.ndarray[Any, Any], np.ndarray[Any, Any]]:
    """Validate that features and ground truth describe the same examples."""
    X_arr = np.asarray(X)
    Y_arr = np.asarray(Y, dtype=np.float64)

    if Y_arr.ndim != 2:
        raise ValueError(f"Labels must be 2D, got shape {Y_arr.shape}")

    if len(X_arr) != len(Y_arr):
        raise ValueError(
            f"Length mismatch: {len(X_arr)} examples vs {len(Y_arr)} label rows"
        )

    if len(X_arr) == 0:
        raise ValueError("Training data cannot be empty")

    return X_arr, Y_arr


def validate_cv(cv: Any) -> Any:
    """Validate the ``cv`` argument of a tuning strategy.

    ``None`` disables cross-validation, an object with a ``split`` method is used
    as is and an integer must request at least two folds.
    """
    if isinstance(cv, str | bytes):
        raise ConfigurationError(f"cv must be an int, a splitter or None, got {cv!r}")

    if cv is None or hasattr(cv, "split"):
        return cv

    if isinstance(cv, bool) or not isinstance(cv, int | np.integer):
        raise ConfigurationError(f"cv must be an int, a splitter or None, got {cv!r}")

    if cv < 2:
        raise ConfigurationError(f"folds should be more than 1, got cv={cv}")

    return int(cv)


def validate_cut(t: int, n_labels: int) -> int:
    """Validate a fixed number of top-ranked labels."""
    if isinstance(t, bool) or not isinstance(t, int | np.integer):
        raise ValueError(f"Cut must be an integer, got {t!r}")

    if not 0 <= t <= n_labels:
        raise ValueError(f"Cut must be in [0, {n_labels}], got {t}")

    return int(t)


def validate_choice(value: str, choices: set[str], name: str) -> str:
    """Validate string choice."""
    if value not in choices:
        raise ConfigurationError(f"Invalid {name} '{value}'. Must be one of: {choices}")
    return value
