"""Reusable Hypothesis strategies for multi-label thresholding tests.

This module provides controlled data generation strategies that enable
systematic testing of ranking and bipartition properties, including ties and
extreme values.
"""

from __future__ import annotations

import numpy as np
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays


def confidence_vectors(
    min_size: int = 1, max_size: int = 12, tie_blocks: bool = True
):
    """Generate one example's confidences in [0, 1], optionally with ties.

    Parameters
    ----------
    min_size : int
        Minimum number of labels
    max_size : int
        Maximum number of labels
    tie_blocks : bool
        Whether to copy some values onto other positions to create ties

    Returns
    -------
    hypothesis.strategies.SearchStrategy
        Strategy that generates float64 vectors
    """
    base = arrays(
        dtype=float,
        shape=st.integers(min_value=min_size, max_value=max_size),
        elements=st.floats(
            min_value=0.0, max_value=1.0, allow_nan=False, allow_infinity=False
        ),
    )

    def _post_process(arr):
        n = arr.shape[0]
        if tie_blocks and n >= 3:
            rng = np.random.default_rng(n)
            idx = rng.choice(n, size=2, replace=False)
            arr[idx[1]] = arr[idx[0]]
        return arr

    return base.map(_post_process)


def confidences_and_labels(
    min_samples: int = 2,
    max_samples: int = 20,
    min_labels: int = 1,
    max_labels: int = 6,
):
    """Generate a confidence matrix with a matching 0/1 ground truth.

    Returns
    -------
    hypothesis.strategies.SearchStrategy
        Strategy that generates (confidences, labels) pairs
    """

    @st.composite
    def _make(draw):
        n = draw(st.integers(min_samples, max_samples))
        L = draw(st.integers(min_labels, max_labels))
        confidences = draw(
            arrays(
                dtype=float,
                shape=(n, L),
                elements=st.floats(0.0, 1.0, allow_nan=False, allow_infinity=False),
            )
        )
        labels = draw(arrays(dtype=np.int64, shape=(n, L), elements=st.integers(0, 1)))
        return confidences, labels

    return _make()
