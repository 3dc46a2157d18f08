"""Tests for meta-learned thresholds and label counts."""

import numpy as np
import pytest
from sklearn.linear_model import LinearRegression
from sklearn.tree import DecisionTreeRegressor

from multilabel_cutoffs import (
    ConfigurationError,
    InstanceThresholdPredictor,
    LabelCountPredictor,
    instance_threshold,
)
from multilabel_cutoffs.meta import meta_features
from tests.fixtures.learners import FixedScoreLearner

# Relevant labels always score above irrelevant ones
X = np.array(
    [
        [0.9, 0.1, 0.2],
        [0.8, 0.85, 0.1],
        [0.8, 0.85, 0.9],
        [0.15, 0.95, 0.2],
        [0.1, 0.2, 0.88],
        [0.82, 0.12, 0.91],
    ]
)
Y = np.array(
    [
        [1, 0, 0],
        [1, 1, 0],
        [1, 1, 1],
        [0, 1, 0],
        [0, 0, 1],
        [1, 0, 1],
    ]
)


class TestInstanceThreshold:
    """Per-example target thresholds."""

    def test_separating_midpoint(self):
        """The midpoint between the irrelevant and relevant group wins."""
        conf = np.array([0.75, 0.25, 0.5])
        assert instance_threshold(conf, np.array([True, False, True])) == 0.375

    def test_all_relevant(self):
        """With only relevant labels the smallest confidence is kept."""
        conf = np.array([0.8, 0.85, 0.9])
        assert instance_threshold(conf, np.ones(3, dtype=bool)) == pytest.approx(0.8)

    def test_targets_separate_training_examples(self):
        """Every target reproduces its example's relevant set."""
        for conf, rel in zip(X, Y.astype(bool)):
            threshold = instance_threshold(conf, rel)
            np.testing.assert_array_equal(conf >= threshold, rel)


class TestMetaFeatures:
    """Feature spaces of the meta dataset."""

    def test_content(self):
        """Content features are the inputs."""
        inputs = np.arange(6.0).reshape(2, 3)
        np.testing.assert_array_equal(meta_features("content", inputs, X[:2]), inputs)

    def test_scores(self):
        """Score features are the confidences in label order."""
        np.testing.assert_array_equal(meta_features("scores", None, X[:2]), X[:2])

    def test_ranks(self):
        """Rank features are the confidences sorted descending."""
        np.testing.assert_array_equal(
            meta_features("ranks", None, X[:2]), [[0.9, 0.2, 0.1], [0.85, 0.8, 0.1]]
        )


class TestInstanceThresholdPredictor:
    """Meta-learned threshold per example."""

    def test_reproduces_training_examples(self):
        """A fully grown tree recalls every training threshold."""
        strategy = InstanceThresholdPredictor(
            FixedScoreLearner(), features="scores", cv=1
        ).fit(X, Y)
        assert strategy.model_.kind == "meta"
        assert strategy.model_.metadata["features"] == "scores"
        np.testing.assert_array_equal(strategy.predict(X), Y.astype(bool))

    def test_default_estimator_is_regressor(self):
        """The default meta estimator is a regression tree."""
        strategy = InstanceThresholdPredictor(FixedScoreLearner(), cv=1).fit(X, Y)
        assert isinstance(strategy.model_.metadata["estimator"], DecisionTreeRegressor)

    def test_default_features_are_scores(self):
        """The meta dataset is built from the confidences by default."""
        strategy = InstanceThresholdPredictor(FixedScoreLearner(), cv=1).fit(X, Y)
        assert strategy.features == "scores"
        assert strategy.model_.metadata["features"] == "scores"

    def test_template_estimator_untouched(self):
        """The supplied meta estimator is cloned, not fitted in place."""
        template = LinearRegression()
        InstanceThresholdPredictor(
            FixedScoreLearner(), meta_estimator=template, cv=1
        ).fit(X, Y)
        assert not hasattr(template, "coef_")


class TestLabelCountPredictor:
    """Meta-learned number of relevant labels."""

    @pytest.mark.parametrize("features", ["content", "scores", "ranks"])
    def test_reproduces_training_examples(self, features):
        """Predicting the counts selects the relevant labels."""
        strategy = LabelCountPredictor(
            FixedScoreLearner(), features=features, cv=1
        ).fit(X, Y)
        np.testing.assert_array_equal(strategy.predict(X), Y.astype(bool))

    def test_default_features_are_content(self):
        """The label count is learned from the inputs by default."""
        assert LabelCountPredictor(FixedScoreLearner()).features == "content"

    def test_regressor_output_rounded(self):
        """Regressor predictions are rounded to counts."""
        strategy = LabelCountPredictor(
            FixedScoreLearner(),
            meta_estimator=DecisionTreeRegressor(random_state=0),
            features="ranks",
            cv=1,
        ).fit(X, Y)
        np.testing.assert_array_equal(strategy.predict(X), Y.astype(bool))

    def test_out_of_fold_training(self):
        """Folds provide the confidences of the meta dataset."""
        strategy = LabelCountPredictor(
            FixedScoreLearner(), features="ranks", cv=2
        ).fit(X, Y)
        np.testing.assert_array_equal(strategy.predict(X), Y.astype(bool))


class TestMetaConfiguration:
    """Configuration checks shared by both meta strategies."""

    @pytest.mark.parametrize(
        "strategy_cls", [InstanceThresholdPredictor, LabelCountPredictor]
    )
    @pytest.mark.parametrize(
        "params",
        [{"features": "bogus"}, {"cv": None}, {"cv": 0}],
    )
    def test_invalid_configuration(self, strategy_cls, params):
        """Unknown feature spaces and fold counts are rejected."""
        with pytest.raises(ConfigurationError):
            strategy_cls(FixedScoreLearner(), **params).fit(X, Y)
