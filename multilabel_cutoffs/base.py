"""Estimator base shared by all thresholding strategies."""

import logging
from typing import Any, Self

import numpy as np
from numpy.typing import ArrayLike

from .learners import clone_learner, confidence_matrix
from .results import MultiLabelOutput, ThresholdModel
from .validation import validate_label_matrix, validate_training_data

logger = logging.getLogger(__name__)


class ThresholdingLearner:
    """Multi-label learner that bipartitions the confidences of a base learner.

    ``fit`` trains a copy of the base learner, tunes the strategy and stores the
    result as a frozen :class:`ThresholdModel` in ``model_``. ``predict`` only
    reads that model.

    Subclasses list their constructor arguments in ``_param_names`` and
    implement ``_build_model`` and ``_decide``.
    """

    _param_names: tuple[str, ...] = ("base_learner",)

    def __init__(self, base_learner: Any) -> None:
        self.base_learner = base_learner

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _check_params(self) -> None:
        """Validate the configuration before any learner is trained."""

    def _build_model(
        self, learner: Any, X: np.ndarray[Any, Any], Y: np.ndarray[Any, Any]
    ) -> ThresholdModel:
        raise NotImplementedError

    def _decide(
        self,
        model: ThresholdModel,
        confidences: np.ndarray[Any, Any],
        X: np.ndarray[Any, Any],
    ) -> np.ndarray[Any, Any]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Estimator API
    # ------------------------------------------------------------------

    def fit(self, X: ArrayLike, Y: ArrayLike) -> Self:
        """Train the base learner and tune the bipartition strategy.

        Parameters
        ----------
        X:
            Feature matrix of shape (n_samples, n_features).
        Y:
            Ground truth of shape (n_samples, n_labels) in {0, 1}. ``NaN`` or
            ``-1`` marks a missing label; examples with a missing label are
            left out of training and tuning.

        Returns
        -------
        Self
            Fitted instance with ``model_`` and ``learner_`` set.
        """
        self._check_params()
        X_arr, Y_arr = validate_training_data(X, Y)
        relevance, complete = validate_label_matrix(Y_arr)
        n_skipped = int(np.count_nonzero(~complete))
        if n_skipped == len(complete):
            raise ValueError("Every training example has at least one missing label")
        if n_skipped:
            logger.debug("skipping %d examples with missing labels", n_skipped)
        X_fit = X_arr[complete]
        Y_fit = relevance[complete].astype(np.int64)

        learner = clone_learner(self.base_learner)
        learner.fit(X_fit, Y_fit)
        model = self._build_model(learner, X_fit, Y_fit)
        logger.info(
            "%s fitted: kind=%s threshold=%s cut=%s",
            type(self).__name__,
            model.kind,
            model.threshold,
            model.cut,
        )

        self.learner_ = learner
        self.n_labels_ = int(Y_fit.shape[1])
        self.model_ = model
        return self

    def _fitted_model(self) -> ThresholdModel:
        model = getattr(self, "model_", None)
        if model is None:
            raise RuntimeError(f"{type(self).__name__} has not been fitted.")
        return model

    def _confidences(self, X: np.ndarray[Any, Any]) -> np.ndarray[Any, Any]:
        confidences = confidence_matrix(self.learner_, X)
        if confidences.shape[1] != self.n_labels_:
            raise ValueError(
                f"Expected {self.n_labels_} labels, base learner returned "
                f"{confidences.shape[1]}."
            )
        return confidences

    def predict(self, X: ArrayLike) -> np.ndarray[Any, Any]:
        """Predict the bipartition of every example.

        Returns
        -------
        np.ndarray[Any, Any]
            Boolean matrix of shape (n_samples, n_labels).
        """
        model = self._fitted_model()
        X_arr = np.asarray(X)
        return self._decide(model, self._confidences(X_arr), X_arr)

    def predict_outputs(self, X: ArrayLike) -> list[MultiLabelOutput]:
        """Predict bipartitions together with the unchanged base confidences."""
        model = self._fitted_model()
        X_arr = np.asarray(X)
        confidences = self._confidences(X_arr)
        bipartitions = self._decide(model, confidences, X_arr)
        return [
            MultiLabelOutput(bipartition=bip, confidences=conf)
            for bip, conf in zip(bipartitions, confidences)
        ]

    def get_params(self, deep: bool = True) -> dict[str, Any]:
        """Get parameters for this estimator.

        Parameters
        ----------
        deep : bool, default=True
            If True, will return the parameters for this estimator and
            contained subobjects that are estimators.

        Returns
        -------
        dict[str, Any]
            Parameter names mapped to their values.
        """
        params = {name: getattr(self, name) for name in self._param_names}
        if deep:
            for name, value in list(params.items()):
                if hasattr(value, "get_params") and not isinstance(value, type):
                    for key, sub_value in value.get_params(deep=True).items():
                        params[f"{name}__{key}"] = sub_value
        return params

    def set_params(self, **params: Any) -> Self:
        """Set the parameters of this estimator.

        Parameters
        ----------
        **params : dict
            Estimator parameters. Nested parameters use ``<component>__<name>``.

        Returns
        -------
        Self
            Estimator instance.
        """
        valid_params = self.get_params(deep=False)
        nested: dict[str, dict[str, Any]] = {}
        for key, value in params.items():
            name, delim, sub_key = key.partition("__")
            if name not in valid_params:
                raise ValueError(f"Invalid parameter {name!r}")
            if delim:
                nested.setdefault(name, {})[sub_key] = value
            else:
                setattr(self, name, value)
        for name, sub_params in nested.items():
            getattr(self, name).set_params(**sub_params)
        return self

    def __repr__(self) -> str:
        args = ", ".join(
            f"{name}={getattr(self, name)!r}" for name in self._param_names
        )
        return f"{type(self).__name__}({args})"
