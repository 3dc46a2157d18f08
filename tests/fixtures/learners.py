"""Stand-in base learners with fully predictable outputs.

The input features of these learners are their confidences: row ``i`` of ``X``
is returned unchanged (or transformed deterministically) as the per-label
output for example ``i``. That makes every thresholding decision computable
by hand.
"""

import numpy as np
from sklearn.base import BaseEstimator


class FixedScoreLearner(BaseEstimator):
    """``predict_proba`` returns the input features."""

    def fit(self, X, Y):
        self.n_labels_ = np.asarray(Y).shape[1]
        self.n_fit_samples_ = len(X)
        return self

    def predict_proba(self, X):
        return np.asarray(X, dtype=float).copy()


class ListProbaLearner(BaseEstimator):
    """``predict_proba`` in the list-of-(n, 2) form of MultiOutputClassifier."""

    def fit(self, X, Y):
        self.n_labels_ = np.asarray(Y).shape[1]
        return self

    def predict_proba(self, X):
        X = np.asarray(X, dtype=float)
        return [np.column_stack([1.0 - X[:, j], X[:, j]]) for j in range(X.shape[1])]


class DecisionScoreLearner(BaseEstimator):
    """Only ``decision_function``; scores are ``2 * X - 1``."""

    def fit(self, X, Y):
        self.n_labels_ = np.asarray(Y).shape[1]
        return self

    def decision_function(self, X):
        return 2.0 * np.asarray(X, dtype=float) - 1.0


class HardLabelLearner(BaseEstimator):
    """Only ``predict``; produces bipartitions without confidences."""

    def fit(self, X, Y):
        self.n_labels_ = np.asarray(Y).shape[1]
        return self

    def predict(self, X):
        return (np.asarray(X, dtype=float) >= 0.5).astype(int)


class ExplodingLearner(BaseEstimator):
    """Raises on ``fit``; used to check that nothing is trained."""

    def fit(self, X, Y):
        raise RuntimeError("base learner training failed")

    def predict_proba(self, X):
        return np.asarray(X, dtype=float)


class BinaryProbaLearner(BaseEstimator):
    """Single-output binary classifier on the first feature.

    ``predict_proba`` has one column per class in ``classes_``, as for a
    scikit-learn classifier trained on a single label.
    """

    def fit(self, X, Y):
        self.classes_ = np.unique(np.asarray(Y).ravel())
        self.n_fit_samples_ = len(X)
        return self

    def predict_proba(self, X):
        positive = np.asarray(X, dtype=float)[:, 0]
        columns = {0: 1.0 - positive, 1: positive}
        return np.column_stack([columns[int(c)] for c in self.classes_])


class IndicatorProbaLearner(BaseEstimator):
    """Multi-label learner with one ``classes_`` entry per label.

    Mirrors estimators such as ``MLPClassifier`` trained on a label indicator
    matrix: ``predict_proba`` is ``(n, L)`` and ``n_outputs_`` is ``L``.
    """

    def fit(self, X, Y):
        n_labels = np.asarray(Y).shape[1]
        self.classes_ = np.arange(n_labels)
        self.n_outputs_ = n_labels
        return self

    def predict_proba(self, X):
        return np.asarray(X, dtype=float).copy()
