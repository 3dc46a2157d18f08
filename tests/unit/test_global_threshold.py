"""Tests for the two-stage global threshold search."""

import numpy as np
import pytest
from sklearn.model_selection import KFold

from multilabel_cutoffs import (
    BipartitionMeasure,
    GlobalScalarThreshold,
    grid_search_threshold,
    hamming_loss,
    two_stage_threshold,
)
from tests.fixtures.assertions import assert_valid_threshold
from tests.fixtures.learners import FixedScoreLearner

CONF = np.array([[0.365, 0.67]])
TRUTH = np.array([[0, 1]])


def counting_measure():
    calls = []

    def _hamming(tp, fp, fn, n_labels):
        calls.append((tp, fp, fn))
        return hamming_loss(tp, fp, fn, n_labels)

    measure = BipartitionMeasure(
        name="counting_hamming", func=_hamming, ideal_value=0.0, worst_value=1.0
    )
    return measure, calls


class TestGridSearch:
    """Single grid stage."""

    def test_number_of_candidates(self):
        """round((stop - start) / step) + 1 thresholds are evaluated."""
        measure, calls = counting_measure()
        grid_search_threshold(CONF, TRUTH, measure, 0.0, 0.1, 1.0)
        assert len(calls) == 11

        measure, calls = counting_measure()
        grid_search_threshold(CONF, TRUTH, measure, 0.35, 0.01, 0.45)
        assert len(calls) == 11

    def test_first_best_candidate(self):
        """The first of several equally good candidates wins."""
        threshold, distance = grid_search_threshold(
            CONF, TRUTH, "hamming_loss", 0.0, 0.1, 1.0
        )
        assert threshold == pytest.approx(0.4)
        assert distance == 0.0

    def test_undefined_candidates_avoided(self):
        """Candidates that predict nothing leave precision undefined."""
        threshold, distance = grid_search_threshold(
            CONF, TRUTH, "example_based_precision", 0.0, 0.1, 1.0
        )
        assert np.isfinite(distance)
        assert threshold <= 0.67


class TestTwoStageThreshold:
    """Coarse-to-fine search."""

    def test_fine_stage_refines(self):
        """The fine grid moves the threshold next to the separating gap."""
        threshold, distance, coarse = two_stage_threshold(CONF, TRUTH, "hamming_loss")
        assert coarse == pytest.approx(0.4)
        assert threshold == pytest.approx(0.37)
        assert distance == 0.0

    def test_all_relevant(self):
        """When every label is relevant the lowest threshold is best."""
        conf = np.random.default_rng(0).uniform(size=(5, 3))
        threshold, distance, _ = two_stage_threshold(
            conf, np.ones((5, 3)), "hamming_loss"
        )
        assert threshold == 0.0
        assert distance == 0.0

    def test_window_clipped_to_unit_interval(self):
        """The fine window never reaches past 1."""
        conf = np.array([[0.1, 0.965], [0.3, 0.05]])
        threshold, _, coarse = two_stage_threshold(
            conf, np.zeros((2, 2)), "hamming_loss"
        )
        assert coarse == pytest.approx(1.0)
        assert threshold == pytest.approx(0.97)
        assert_valid_threshold(threshold)

    def test_missing_labels_skipped(self):
        """Rows with a missing label are left out of the search."""
        conf = np.vstack([CONF, [[0.9, 0.1]]])
        truth = np.vstack([TRUTH, [[np.nan, 0]]])
        assert two_stage_threshold(conf, truth, "hamming_loss") == (
            two_stage_threshold(CONF, TRUTH, "hamming_loss")
        )


class TestGlobalScalarThreshold:
    """Strategy wrapper."""

    def test_fit_predict(self):
        """Labels at or above the tuned threshold are relevant."""
        strategy = GlobalScalarThreshold(FixedScoreLearner()).fit(CONF, TRUTH)
        assert strategy.model_.threshold == pytest.approx(0.37)
        assert strategy.model_.metadata["coarse_threshold"] == pytest.approx(0.4)
        np.testing.assert_array_equal(strategy.predict(CONF), [[False, True]])
        np.testing.assert_array_equal(
            strategy.predict([[0.375, 0.369]]), [[True, False]]
        )

    def test_cross_validated_mean(self):
        """With folds the threshold is the mean of the fold thresholds."""
        rng = np.random.default_rng(7)
        X = rng.uniform(size=(12, 3))
        Y = (X + 0.2 * rng.normal(size=X.shape) > 0.5).astype(int)
        strategy = GlobalScalarThreshold(FixedScoreLearner(), cv=3).fit(X, Y)

        expected = [
            two_stage_threshold(X[test_idx], Y[test_idx], "hamming_loss")[0]
            for _, test_idx in KFold(n_splits=3).split(X)
        ]
        np.testing.assert_allclose(
            strategy.model_.metadata["fold_thresholds"], expected
        )
        assert strategy.model_.threshold == pytest.approx(np.mean(expected))
