"""Meta-learned bipartitions: predict a threshold or a label count per example.

A second estimator (the meta estimator) is trained to predict, for every
example, either the confidence threshold that best separates its relevant
from its irrelevant labels or the number of its relevant labels. The meta
estimator sees one of three feature spaces:

``content``
    The input features of the example.
``scores``
    The base learner's confidences, in label order.
``ranks``
    The base learner's confidences sorted descending.

Targets, and the scores/ranks features, are computed from out-of-fold
confidences so the meta estimator learns from the kind of confidences it
will see at prediction time.
"""

import logging
from typing import Any

import numpy as np
from sklearn.base import is_classifier  # type: ignore[import-untyped]
from sklearn.tree import (  # type: ignore[import-untyped]
    DecisionTreeClassifier,
    DecisionTreeRegressor,
)

from .base import ThresholdingLearner
from .cv import out_of_fold_confidences
from .learners import clone_learner, confidence_matrix
from .ranking import ranks_from_matrix
from .results import ThresholdModel, create_model
from .types_minimal import META_FEATURES, MetaFeatures, ModelKind
from .validation import ConfigurationError, validate_choice, validate_cv

logger = logging.getLogger(__name__)


def meta_features(
    features: str, X: np.ndarray[Any, Any], confidences: np.ndarray[Any, Any]
) -> np.ndarray[Any, Any]:
    """Feature matrix of the meta estimator."""
    if features == MetaFeatures.CONTENT:
        X_arr = np.asarray(X)
        return X_arr.reshape(len(X_arr), -1)
    if features == MetaFeatures.SCORES:
        return confidences
    return -np.sort(-confidences, axis=1)


def instance_threshold(
    confidences: np.ndarray[Any, Any], relevance: np.ndarray[Any, Any]
) -> float:
    """Threshold with the fewest misclassified labels for one example.

    Candidates are the midpoints ``(x + previous) / 2`` of consecutive
    ascending confidences, starting with the smallest confidence itself. A
    relevant label scoring at or below the candidate and an irrelevant label
    scoring at or above it both count as errors. The first candidate with the
    fewest errors wins.

    Examples
    --------
    >>> instance_threshold(np.array([0.75, 0.25, 0.5]), np.array([True, False, True]))
    0.375
    """
    ascending = np.sort(confidences)
    previous = np.concatenate(([ascending[0]], ascending[:-1]))
    candidates = (ascending + previous) / 2
    n_labels = confidences.size
    best_errors = n_labels
    best = 0.0
    for candidate in candidates.tolist():
        missed = np.count_nonzero(relevance & (confidences <= candidate))
        extra = np.count_nonzero(~relevance & (confidences >= candidate))
        errors = missed + extra
        if errors < best_errors:
            best_errors = errors
            best = candidate
    return float(best)


class MetaThresholdLearner(ThresholdingLearner):
    """Base for strategies that learn a per-example decision with an estimator.

    Parameters
    ----------
    base_learner:
        Multi-label learner producing confidences.
    meta_estimator:
        scikit-learn estimator trained on the meta dataset. ``None`` uses the
        strategy's default.
    features:
        Feature space of the meta dataset: ``"content"``, ``"scores"`` or
        ``"ranks"``.
    cv:
        Number of folds producing the out-of-fold confidences. ``1`` uses the
        base learner trained on all examples instead.
    random_state:
        Seed for shuffling the folds.
    """

    _param_names = (
        "base_learner",
        "meta_estimator",
        "features",
        "cv",
        "random_state",
    )

    def __init__(
        self,
        base_learner: Any,
        meta_estimator: Any = None,
        features: str = MetaFeatures.CONTENT,
        cv: int | Any = 3,
        random_state: int | None = None,
    ) -> None:
        super().__init__(base_learner)
        self.meta_estimator = meta_estimator
        self.features = features
        self.cv = cv
        self.random_state = random_state

    def _default_meta_estimator(self) -> Any:
        raise NotImplementedError

    def _meta_targets(
        self, confidences: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> np.ndarray[Any, Any]:
        raise NotImplementedError

    def _check_params(self) -> None:
        validate_choice(self.features, META_FEATURES, "features")
        if self.cv is None:
            raise ConfigurationError("cv must be a number of folds or a splitter")
        if not (isinstance(self.cv, int | np.integer) and self.cv == 1):
            validate_cv(self.cv)

    def _training_confidences(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> np.ndarray[Any, Any]:
        if isinstance(self.cv, int | np.integer) and self.cv == 1:
            return confidence_matrix(learner, X)
        return out_of_fold_confidences(
            self.base_learner, X, Y, self.cv, self.random_state
        )

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        confidences = self._training_confidences(learner, X, Y)
        covered = np.all(np.isfinite(confidences), axis=1)
        if not np.any(covered):
            raise ValueError("No example received an out-of-fold prediction")
        if not np.all(covered):
            logger.debug(
                "%d examples were never held out, left out of the meta dataset",
                int(np.count_nonzero(~covered)),
            )
        confidences = confidences[covered]
        relevance = Y[covered].astype(bool)

        meta_X = meta_features(self.features, X[covered], confidences)
        targets = self._meta_targets(confidences, relevance)
        template = (
            self._default_meta_estimator()
            if self.meta_estimator is None
            else self.meta_estimator
        )
        estimator = clone_learner(template)
        estimator.fit(meta_X, targets)
        logger.debug(
            "meta estimator %s trained on %d examples (%s features)",
            type(estimator).__name__,
            len(targets),
            self.features,
        )
        return create_model(
            kind=ModelKind.META,
            n_labels=Y.shape[1],
            estimator=estimator,
            features=self.features,
        )

    def _predict_meta(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        meta_X = meta_features(model.metadata["features"], X, confidences)
        return np.asarray(model.metadata["estimator"].predict(meta_X))


class InstanceThresholdPredictor(MetaThresholdLearner):
    """Predict a confidence threshold for every example.

    The meta target of a training example is :func:`instance_threshold` of its
    confidences. Labels with ``confidence >= predicted threshold`` are
    predicted relevant. The default meta estimator is a
    :class:`~sklearn.tree.DecisionTreeRegressor` trained on the confidences.
    """

    def __init__(
        self,
        base_learner: Any,
        meta_estimator: Any = None,
        features: str = MetaFeatures.SCORES,
        cv: int | Any = 3,
        random_state: int | None = None,
    ) -> None:
        super().__init__(base_learner, meta_estimator, features, cv, random_state)

    def _default_meta_estimator(self) -> Any:
        return DecisionTreeRegressor(random_state=0)

    def _meta_targets(
        self, confidences: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> np.ndarray[Any, Any]:
        return np.array(
            [instance_threshold(conf, rel) for conf, rel in zip(confidences, Y)]
        )

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        thresholds = self._predict_meta(model, confidences, X).astype(np.float64)
        return confidences >= thresholds.reshape(-1, 1)


class LabelCountPredictor(MetaThresholdLearner):
    """Predict the number of relevant labels of every example.

    The meta target is the count of relevant labels. A classifier predicts it
    as a class; any other estimator is treated as a regressor whose output is
    rounded. The top ranked ``k`` labels are predicted relevant. The default
    meta estimator is a :class:`~sklearn.tree.DecisionTreeClassifier`.
    """

    def _default_meta_estimator(self) -> Any:
        return DecisionTreeClassifier(random_state=0)

    def _meta_targets(
        self, confidences: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> np.ndarray[Any, Any]:
        return Y.sum(axis=1).astype(np.int64)

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        predicted = self._predict_meta(model, confidences, X)
        if is_classifier(model.metadata["estimator"]):
            counts = predicted.astype(np.int64)
        else:
            counts = np.floor(predicted.astype(np.float64) + 0.5).astype(np.int64)
        ranks = ranks_from_matrix(confidences)
        return ranks <= counts.reshape(-1, 1)
