"""Expected example-based F-measure bipartition.

Under the assumption that the confidences are marginal probabilities of
independent labels, the expected F-measure of predicting the ``i`` most
confident labels is approximated in closed form by

    F_i = 2 * sum_{j<=i} s_j / (sum_j s_j + i)

with ``s`` sorted descending. The prediction keeps extending the top of the
ranking while ``F_i`` keeps improving.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .base import ThresholdingLearner
from .ranking import RankedConfidenceVector
from .results import ThresholdModel, create_model
from .types_minimal import ModelKind

# ============================================================================
# Core Algorithm
# ============================================================================


def expected_f_scores(sorted_confidences: np.ndarray[Any, Any]) -> np.ndarray[Any, Any]:
    """Approximate expected F for every prefix size ``i = 1..L``.

    Entries whose denominator is zero are NaN.
    """
    s = np.asarray(sorted_confidences, dtype=np.float64)
    numerators = 2.0 * np.cumsum(s)
    denominators = s.sum() + np.arange(1, s.size + 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = numerators / denominators
    scores[denominators == 0] = np.nan
    return scores


def expected_f_top_n(confidences: ArrayLike) -> int:
    """Number of top ranked labels to predict.

    The count is incremented each time ``F_i`` strictly exceeds the best value
    seen so far (which starts at 0); it is therefore not necessarily the
    position of the maximum. At least one label is always predicted.

    Examples
    --------
    >>> expected_f_top_n([0.9, 0.1, 0.6])
    2
    """
    ranked = RankedConfidenceVector.from_confidences(confidences)
    best = 0.0
    top_n = 0
    for score in expected_f_scores(ranked.sorted_confidences).tolist():
        # NaN never compares greater
        if score > best:
            best = score
            top_n += 1
    return max(top_n, 1)


def expected_f_bipartition(confidences: ArrayLike) -> np.ndarray[Any, Any]:
    """Bipartition of one example maximising the approximate expected F.

    Parameters
    ----------
    confidences : array-like of shape (n_labels,)
        Marginal relevance probabilities.

    Returns
    -------
    np.ndarray[Any, Any]
        Boolean vector with the ``expected_f_top_n`` most confident labels set.

    Examples
    --------
    >>> expected_f_bipartition([0.9, 0.1, 0.6]).tolist()
    [True, False, True]
    """
    ranked = RankedConfidenceVector.from_confidences(confidences)
    return ranked.top_mask(expected_f_top_n(ranked.confidences))


class ExpectedFMeasureBipartition(ThresholdingLearner):
    """Per-example bipartition maximising the approximate expected F-measure.

    Nothing is tuned: ``fit`` only trains the base learner.
    """

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        return create_model(kind=ModelKind.PER_EXAMPLE, n_labels=Y.shape[1])

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        return np.array(
            [expected_f_bipartition(row) for row in confidences], dtype=bool
        )
