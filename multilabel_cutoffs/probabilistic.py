"""Per-example threshold minimising the expected distance of a measure.

The confidences of an example are read as marginal probabilities of
independent labels. For every candidate number ``R`` of predicted labels (the
``R`` most probable ones) the expected distance of the measure from its ideal
value is computed exactly from two Poisson-binomial tables:

* the suffix table, distribution of the number of relevant labels among the
  ``L - R`` labels that are not predicted (false negatives ``c``);
* the prefix table, distribution of the number of relevant labels among the
  ``R`` predicted labels (true positives ``a``).

Both tables carry one extra sentinel row at the top for the impossible count
-1, so row ``k + 1`` holds the probability of count ``k``.
"""

import logging
import warnings
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ThresholdingLearner
from .measures import BipartitionMeasure, UndefinedMeasureError, get_measure
from .results import ThresholdModel, create_model
from .types_minimal import ModelKind
from .validation import ConfigurationError, validate_probabilities

logger = logging.getLogger(__name__)

# ============================================================================
# Dynamic programming tables
# ============================================================================


def suffix_table(probabilities: ArrayLike) -> np.ndarray[Any, Any]:
    """Count distributions of every suffix of descending probabilities.

    Parameters
    ----------
    probabilities : array-like of shape (L,)
        Probabilities sorted in descending order.

    Returns
    -------
    np.ndarray[Any, Any]
        Array ``P`` of shape (L + 2, L + 1). ``P[c + 1, r]`` is the probability
        that exactly ``c`` labels among positions ``r..L-1`` are relevant.
        Column ``L`` is the empty suffix, row 0 is the sentinel row.
    """
    p = validate_probabilities(probabilities)
    L = p.size
    table = np.zeros((L + 2, L + 1), dtype=np.float64)
    table[1, L] = 1.0
    for r in range(L - 1, -1, -1):
        table[1:, r] = p[r] * table[:-1, r + 1] + (1.0 - p[r]) * table[1:, r + 1]
    return table


def _warn_on_underflow(p: np.ndarray[Any, Any], prefix: np.ndarray[Any, Any]) -> None:
    # Every count 0..L has positive probability when all p are inside (0, 1)
    if np.all((p > 0.0) & (p < 1.0)) and np.any(prefix[1:, -1] == 0.0):
        warnings.warn(
            "Label count probabilities underflowed to zero; the expected "
            f"distances of this example ({p.size} labels) are unreliable.",
            RuntimeWarning,
            stacklevel=3,
        )


def prefix_table(probabilities: ArrayLike) -> np.ndarray[Any, Any]:
    """Count distributions of every prefix of descending probabilities.

    Returns
    -------
    np.ndarray[Any, Any]
        Array ``P`` of shape (L + 2, L). ``P[a + 1, r]`` is the probability
        that exactly ``a`` labels among positions ``0..r`` are relevant.
        Row 0 is the sentinel row.
    """
    p = validate_probabilities(probabilities)
    L = p.size
    table = np.zeros((L + 2, L), dtype=np.float64)
    previous = np.zeros(L + 2, dtype=np.float64)
    previous[1] = 1.0
    for r in range(L):
        table[1:, r] = p[r] * previous[:-1] + (1.0 - p[r]) * previous[1:]
        previous = table[:, r]
    _warn_on_underflow(p, table)
    return table


def _measure_distance(
    measure: BipartitionMeasure, tp: int, fp: int, fn: int, n_labels: int
) -> float:
    try:
        return measure.distance(tp, fp, fn, n_labels)
    except UndefinedMeasureError:
        return measure.worst_distance()


# ============================================================================
# Search
# ============================================================================


def expected_distances(
    probabilities: ArrayLike, measure: str | BipartitionMeasure
) -> np.ndarray[Any, Any]:
    """Expected distance from the ideal value for predicting the top ``R`` labels.

    Parameters
    ----------
    probabilities : array-like of shape (L,)
        Marginal probabilities sorted in descending order.
    measure : str or BipartitionMeasure
        Measure computed from confusion counts only.

    Returns
    -------
    np.ndarray[Any, Any]
        Array of length ``L``; entry ``R - 1`` is the expected distance when
        the ``R`` most probable labels are predicted, ``R = 1..L``. Undefined
        measure values count as the measure's worst distance.
    """
    measure = get_measure(measure)
    if not measure.count_based:
        raise ConfigurationError(
            f"Measure '{measure.name}' depends on label identities and cannot be "
            "optimised from label count distributions"
        )
    p = validate_probabilities(probabilities)
    L = p.size
    suffix = suffix_table(p)
    prefix = prefix_table(p)

    totals = np.empty(L, dtype=np.float64)
    for R in range(1, L + 1):
        # distance[a, c] with b = R - a predicted but irrelevant labels
        distance = np.array(
            [
                [_measure_distance(measure, a, R - a, c, L) for c in range(L - R + 1)]
                for a in range(R + 1)
            ]
        )
        p_tp = prefix[1 : R + 2, R - 1]
        p_fn = suffix[1 : L - R + 2, R]
        totals[R - 1] = float(p_tp @ distance @ p_fn)
    return totals


def optimal_cut_size(totals: ArrayLike) -> int:
    """Smallest ``R`` (1-based) whose expected distance is strictly the lowest."""
    best_r = 0
    best = np.inf
    for r, total in enumerate(np.asarray(totals, dtype=np.float64).tolist(), start=1):
        if total < best:
            best = total
            best_r = r
    return best_r


def probabilistic_threshold(
    confidences: ArrayLike, measure: str | BipartitionMeasure
) -> tuple[float, int]:
    """Threshold separating the optimal number of most probable labels.

    Parameters
    ----------
    confidences : array-like of shape (L,)
        Marginal probabilities of one example, in label order.
    measure : str or BipartitionMeasure
        Measure to optimise.

    Returns
    -------
    tuple[float, int]
        (threshold, number of predicted labels ``R``). Labels with
        ``confidence >= threshold`` are predicted relevant.

    Examples
    --------
    >>> probabilistic_threshold([0.5, 0.5], "hamming_loss")
    (0.5, 1)
    """
    p = validate_probabilities(confidences)
    s = np.sort(p)[::-1]
    L = s.size
    R = optimal_cut_size(expected_distances(s, measure))
    if R == L:
        threshold = s[R - 1] / 2.0
    else:
        threshold = (s[R - 1] + s[min(R, L - 1)]) / 2.0
    return float(threshold), R


class ProbabilisticThresholdOptimizer(ThresholdingLearner):
    """Bipartition every example at its expected-distance optimal threshold.

    Parameters
    ----------
    base_learner:
        Multi-label learner producing probabilities in [0, 1].
    measure:
        Measure computed from confusion counts only.
    """

    _param_names = ("base_learner", "measure")

    def __init__(
        self,
        base_learner: Any,
        measure: str | BipartitionMeasure = "hamming_loss",
    ) -> None:
        super().__init__(base_learner)
        self.measure = measure

    def _check_params(self) -> None:
        measure = get_measure(self.measure)
        if not measure.count_based:
            raise ConfigurationError(
                f"Measure '{measure.name}' depends on label identities and cannot "
                "be optimised from label count distributions"
            )

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        return create_model(
            kind=ModelKind.PER_EXAMPLE,
            n_labels=Y.shape[1],
            measure=get_measure(self.measure),
        )

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        measure = model.metadata["measure"]
        bipartitions = np.empty(confidences.shape, dtype=bool)
        for i, row in enumerate(confidences):
            threshold, n_predicted = probabilistic_threshold(row, measure)
            logger.debug("example %d: R=%d threshold=%.4f", i, n_predicted, threshold)
            bipartitions[i] = row >= threshold
        return bipartitions
