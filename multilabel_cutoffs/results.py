"""Prediction outputs and fitted threshold models.

A fitted strategy holds exactly one :class:`ThresholdModel`. The model is
frozen: it is created once at the end of ``fit`` and only read afterwards, so
predicting from several threads never observes a half-written threshold.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .ranking import ranks_from_values
from .types_minimal import MODEL_KINDS


@dataclass(frozen=True, slots=True, eq=False)
class MultiLabelOutput:
    """Output of a multi-label learner for a single example.

    Attributes
    ----------
    bipartition : NDArray[np.bool_] | None
        Relevant/irrelevant decision per label.
    confidences : NDArray[np.float64] | None
        Per-label confidence scores, passed through unchanged.
    ranking : NDArray[np.int64] | None
        1-based rank per label. Derived from ``confidences`` when those are
        given and no ranking is supplied.
    """

    bipartition: NDArray[np.bool_] | None = None
    confidences: NDArray[np.float64] | None = None
    ranking: NDArray[np.int64] | None = None

    def __post_init__(self) -> None:
        if all(
            arr is None for arr in (self.bipartition, self.confidences, self.ranking)
        ):
            raise ValueError(
                "either bipartition, confidences or ranking must be provided"
            )
        if self.bipartition is not None:
            object.__setattr__(
                self, "bipartition", np.asarray(self.bipartition, dtype=bool).copy()
            )
        if self.confidences is not None:
            object.__setattr__(
                self,
                "confidences",
                np.asarray(self.confidences, dtype=np.float64).copy(),
            )
            if self.ranking is None:
                object.__setattr__(self, "ranking", ranks_from_values(self.confidences))
        if self.ranking is not None:
            object.__setattr__(
                self, "ranking", np.asarray(self.ranking, dtype=np.int64).copy()
            )
        sizes = {
            arr.size
            for arr in (self.bipartition, self.confidences, self.ranking)
            if arr is not None
        }
        if len(sizes) != 1:
            raise ValueError(
                "The dimensions of the bipartition, confidences and ranking arrays "
                "do not match."
            )

    @property
    def has_bipartition(self) -> bool:
        return self.bipartition is not None

    @property
    def has_confidences(self) -> bool:
        return self.confidences is not None

    @property
    def has_ranking(self) -> bool:
        return self.ranking is not None

    @property
    def n_labels(self) -> int:
        for arr in (self.bipartition, self.confidences, self.ranking):
            if arr is not None:
                return int(arr.size)
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiLabelOutput):
            return NotImplemented

        def _same(x: Any, y: Any) -> bool:
            if x is None or y is None:
                return x is None and y is None
            return bool(np.array_equal(x, y))

        return (
            _same(self.bipartition, other.bipartition)
            and _same(self.ranking, other.ranking)
            and _same(self.confidences, other.confidences)
        )


@dataclass(frozen=True, slots=True)
class ThresholdModel:
    """Learned state of a thresholding strategy.

    Attributes
    ----------
    kind : str
        One of ``"cut"``, ``"threshold"``, ``"per_label"``, ``"meta"`` or
        ``"per_example"``.
    threshold : float | NDArray[np.float64] | None
        Global threshold or per-label thresholds.
    cut : int | None
        Number of top-ranked labels predicted relevant.
    score : float | None
        Distance from the measure's ideal value reached during tuning.
    n_labels : int
        Number of labels seen at fit time.
    metadata : MappingProxyType
        Read-only tuning details (stage thresholds, fold thresholds, ...).
    """

    kind: str
    n_labels: int
    threshold: float | NDArray[np.float64] | None = None
    cut: int | None = None
    score: float | None = None
    metadata: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_per_label(self) -> bool:
        return isinstance(self.threshold, np.ndarray) and self.threshold.ndim == 1


def create_model(
    *,
    kind: str,
    n_labels: int,
    threshold: float | NDArray[np.float64] | None = None,
    cut: int | None = None,
    score: float | None = None,
    **kwargs: Any,
) -> ThresholdModel:
    """Factory function to create a frozen ThresholdModel.

    Parameters
    ----------
    kind : str
        Model kind, see :class:`ThresholdModel`.
    n_labels : int
        Number of labels.
    threshold : float | NDArray[np.float64] | None
        Threshold value(s). Arrays are copied and made read-only.
    cut : int | None
        Number of top-ranked labels.
    score : float | None
        Tuning score.
    **kwargs : Any
        Additional metadata

    Returns
    -------
    ThresholdModel
        Frozen model

    Raises
    ------
    ValueError
        If inputs are inconsistent or invalid
    """
    if kind not in MODEL_KINDS:
        raise ValueError(f"Unknown model kind '{kind}'. Must be one of: {MODEL_KINDS}")

    thr_norm: float | NDArray[np.float64] | None = threshold
    if isinstance(thr_norm, np.ndarray):
        if thr_norm.ndim == 0:
            thr_norm = float(thr_norm)
        elif thr_norm.ndim != 1 or thr_norm.size != n_labels:
            raise ValueError(
                f"Per-label thresholds must have shape ({n_labels},), "
                f"got {thr_norm.shape}."
            )
        else:
            thr_norm = thr_norm.astype(np.float64, copy=True)
            thr_norm.setflags(write=False)
    elif thr_norm is not None:
        thr_norm = float(thr_norm)

    if cut is not None:
        cut = int(cut)

    if score is not None:
        score = float(score)

    metadata = {}
    for key, value in kwargs.items():
        if isinstance(value, np.ndarray):
            value = value.copy()
            value.setflags(write=False)
        metadata[key] = value

    return ThresholdModel(
        kind=kind,
        n_labels=int(n_labels),
        threshold=thr_norm,
        cut=cut,
        score=score,
        metadata=MappingProxyType(metadata),
    )
