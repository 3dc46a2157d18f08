"""Stable descending ranking of per-label confidences.

Every strategy that cuts a ranked list relies on the sorted indices and the
sorted values describing the same sort. The sort is stable on the negated
confidences, so among tied labels the one seen first gets the lower rank.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .validation import validate_confidences

Array = np.ndarray[Any, Any]


def stable_descending_order(confidences: ArrayLike) -> Array:
    """Indices that sort ``confidences`` descending, first index first on ties."""
    values = np.asarray(confidences, dtype=np.float64)
    return np.argsort(-values, kind="stable")


def ranks_from_values(confidences: ArrayLike) -> Array:
    """Convert confidences into 1-based ranks (rank 1 = most confident).

    Examples
    --------
    >>> ranks_from_values([0.9, 0.1, 0.6]).tolist()
    [1, 3, 2]
    >>> ranks_from_values([0.5, 0.5]).tolist()
    [1, 2]
    """
    order = stable_descending_order(confidences)
    ranks = np.empty(order.size, dtype=np.int64)
    ranks[order] = np.arange(1, order.size + 1)
    return ranks


def ranks_from_matrix(confidences: ArrayLike) -> Array:
    """Row-wise :func:`ranks_from_values` for a (n_samples, n_labels) matrix."""
    values = np.asarray(confidences, dtype=np.float64)
    order = np.argsort(-values, axis=1, kind="stable")
    ranks = np.empty(order.shape, dtype=np.int64)
    np.put_along_axis(
        ranks, order, np.broadcast_to(np.arange(1, values.shape[1] + 1), order.shape), 1
    )
    return ranks


@dataclass(frozen=True, slots=True)
class RankedConfidenceVector:
    """Confidences of one example together with their stable ranking.

    Attributes
    ----------
    confidences : np.ndarray
        Original confidences, shape (n_labels,).
    sorted_indices : np.ndarray
        Label indices in descending order of confidence.
    sorted_confidences : np.ndarray
        Confidences in descending order, index-aligned with ``sorted_indices``.
    """

    confidences: Array
    sorted_indices: Array
    sorted_confidences: Array

    @classmethod
    def from_confidences(cls, confidences: ArrayLike) -> RankedConfidenceVector:
        """Rank a confidence vector (length >= 1, finite values)."""
        values = validate_confidences(confidences)
        order = stable_descending_order(values)
        return cls(
            confidences=values,
            sorted_indices=order,
            sorted_confidences=values[order],
        )

    def __len__(self) -> int:
        return int(self.confidences.size)

    @property
    def ascending_indices(self) -> Array:
        """Label indices in ascending order, the reverse of ``sorted_indices``."""
        return self.sorted_indices[::-1]

    @property
    def ascending_confidences(self) -> Array:
        """Confidences in ascending order, index-aligned with ``ascending_indices``."""
        return self.sorted_confidences[::-1]

    @property
    def ranking(self) -> Array:
        """1-based rank of every label."""
        ranks = np.empty(len(self), dtype=np.int64)
        ranks[self.sorted_indices] = np.arange(1, len(self) + 1)
        return ranks

    def top_mask(self, k: int) -> Array:
        """Bipartition marking the ``k`` highest ranked labels as relevant."""
        mask = np.zeros(len(self), dtype=bool)
        mask[self.sorted_indices[:k]] = True
        return mask

    def restore(self) -> Array:
        """Inverse-permute the sorted confidences back to label order."""
        restored = np.empty(len(self), dtype=np.float64)
        restored[self.sorted_indices] = self.sorted_confidences
        return restored
