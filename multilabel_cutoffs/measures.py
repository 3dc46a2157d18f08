"""Bipartition measure registry, accumulators, and built-in measures."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from .types_minimal import CountMeasureFunc
from .validation import ConfigurationError


class UndefinedMeasureError(ArithmeticError):
    """Raised when a measure has no value for the given confusion counts."""


@dataclass(frozen=True, slots=True)
class BipartitionMeasure:
    """An evaluation criterion computed from per-example confusion counts.

    Attributes
    ----------
    name : str
        Registry key of the measure.
    func : CountMeasureFunc
        Callable ``(tp, fp, fn, n_labels) -> float``. Raises
        :class:`UndefinedMeasureError` when the value does not exist.
    ideal_value : float
        Best achievable value (1 for F-measure, 0 for Hamming loss).
    worst_value : float
        Worst achievable value, used where an undefined value has to be scored.
    skip_undefined : bool
        If True, accumulators silently drop examples whose value is undefined
        instead of raising.
    count_based : bool
        Whether the value depends only on the confusion counts. Measures that
        need the identity of the labels cannot be factorised over independent
        label probabilities.
    """

    name: str
    func: CountMeasureFunc
    ideal_value: float
    worst_value: float
    skip_undefined: bool = False
    count_based: bool = True

    def value_from_counts(self, tp: int, fp: int, fn: int, n_labels: int) -> float:
        """Compute the measure for one example from its confusion counts."""
        return float(self.func(tp, fp, fn, n_labels))

    def distance(self, tp: int, fp: int, fn: int, n_labels: int) -> float:
        """Absolute distance of the measure value from the ideal value."""
        return abs(self.ideal_value - self.value_from_counts(tp, fp, fn, n_labels))

    def worst_distance(self) -> float:
        """Distance from the ideal value that scores an undefined evaluation."""
        return abs(self.ideal_value - self.worst_value)

    def value_on_bipartition(self, bipartition: ArrayLike, truth: ArrayLike) -> float:
        """Compute the measure on a predicted bipartition against ground truth."""
        tp, fp, fn, n_labels = confusion_counts(bipartition, truth)
        return self.value_from_counts(tp, fp, fn, n_labels)

    def clone(self) -> BipartitionMeasure:
        """Return an independent copy of this measure."""
        return dataclasses.replace(self)

    def strict(self, strict: bool = True) -> BipartitionMeasure:
        """Return a copy that raises on undefined values (or skips them)."""
        return dataclasses.replace(self, skip_undefined=not strict)


def confusion_counts(
    bipartition: ArrayLike, truth: ArrayLike
) -> tuple[int, int, int, int]:
    """Count (tp, fp, fn, n_labels) of a single example.

    Raises
    ------
    ValueError
        If the two vectors differ in length
    """
    pred = np.asarray(bipartition, dtype=bool)
    true = np.asarray(truth, dtype=bool)
    if pred.shape != true.shape:
        raise ValueError(
            "The dimensions of the bipartition and the ground truth array do not "
            f"match: {pred.shape} vs {true.shape}"
        )
    tp = int(np.count_nonzero(pred & true))
    fp = int(np.count_nonzero(pred & ~true))
    fn = int(np.count_nonzero(~pred & true))
    return tp, fp, fn, int(pred.size)


def confusion_counts_matrix(
    bipartitions: np.ndarray[Any, Any], truth: np.ndarray[Any, Any]
) -> tuple[np.ndarray[Any, Any], np.ndarray[Any, Any], np.ndarray[Any, Any]]:
    """Vectorised per-example (tp, fp, fn) for boolean (n_samples, n_labels) inputs."""
    tp = np.count_nonzero(bipartitions & truth, axis=1)
    fp = np.count_nonzero(bipartitions & ~truth, axis=1)
    fn = np.count_nonzero(~bipartitions & truth, axis=1)
    return tp, fp, fn


class MeasureAccumulator:
    """Example-averaged value of a measure over a stream of predictions.

    The accumulated value is the sum of the per-example values divided by the
    number of examples that contributed.
    """

    __slots__ = ("measure", "total", "count")

    def __init__(self, measure: BipartitionMeasure) -> None:
        self.measure = measure
        self.total = 0.0
        self.count = 0

    def update(self, bipartition: ArrayLike, truth: ArrayLike) -> float | None:
        """Add one example; returns its value or None when it was skipped."""
        tp, fp, fn, n_labels = confusion_counts(bipartition, truth)
        return self.update_counts(tp, fp, fn, n_labels)

    def update_counts(self, tp: int, fp: int, fn: int, n_labels: int) -> float | None:
        """Add one example given by its confusion counts."""
        try:
            value = self.measure.value_from_counts(tp, fp, fn, n_labels)
        except UndefinedMeasureError:
            if self.measure.skip_undefined:
                return None
            raise
        self.total += value
        self.count += 1
        return value

    def value(self) -> float:
        """Average value so far.

        Raises
        ------
        UndefinedMeasureError
            If no example has contributed yet
        """
        if self.count == 0:
            raise UndefinedMeasureError(f"{self.measure.name}: no examples evaluated")
        return self.total / self.count

    def distance(self) -> float:
        """Absolute distance of the averaged value from the ideal value."""
        return abs(self.measure.ideal_value - self.value())

    def reset(self) -> None:
        """Forget all accumulated examples."""
        self.total = 0.0
        self.count = 0

    def clone(self) -> MeasureAccumulator:
        """Return an independent copy including the accumulated state."""
        other = MeasureAccumulator(self.measure.clone())
        other.total = self.total
        other.count = self.count
        return other

    def __repr__(self) -> str:
        try:
            value = self.value()
        except UndefinedMeasureError:
            value = float("nan")
        return f"{self.measure.name}: {value}"


def mean_distance(
    measure: BipartitionMeasure,
    tp: ArrayLike,
    fp: ArrayLike,
    fn: ArrayLike,
    n_labels: int,
) -> float:
    """Distance of the example-averaged measure from its ideal value.

    Every (tp[i], fp[i], fn[i]) triple is one example. The result is ``inf``
    when the average is undefined: an example raised
    :class:`UndefinedMeasureError` in strict mode, or every example was
    skipped.
    """
    accumulator = MeasureAccumulator(measure)
    try:
        for a, b, c in zip(
            np.asarray(tp).tolist(), np.asarray(fp).tolist(), np.asarray(fn).tolist()
        ):
            accumulator.update_counts(a, b, c, n_labels)
        return accumulator.distance()
    except UndefinedMeasureError:
        return float("inf")


# ============================================================================
# Registry
# ============================================================================

MEASURE_REGISTRY: dict[str, BipartitionMeasure] = {}


def register_measure(
    name: str | None = None,
    func: CountMeasureFunc | None = None,
    ideal_value: float = 1.0,
    worst_value: float = 0.0,
    skip_undefined: bool = False,
    count_based: bool = True,
) -> BipartitionMeasure | Callable[[CountMeasureFunc], CountMeasureFunc]:
    """Register a bipartition measure.

    Parameters
    ----------
    name:
        Optional key under which to store the measure. If not provided the
        function's ``__name__`` is used.
    func:
        Callable accepting ``tp, fp, fn, n_labels`` and returning a float. When
        supplied the measure is registered immediately. If omitted, the returned
        decorator can be used to annotate a measure function.
    ideal_value:
        Best achievable value of the measure.
    worst_value:
        Worst achievable value of the measure.
    skip_undefined:
        Whether examples with an undefined value are dropped from averages.
    count_based:
        Whether the measure depends on the confusion counts only.

    Returns
    -------
    BipartitionMeasure | Callable[[CountMeasureFunc], CountMeasureFunc]
        The registered measure or a decorator.
    """
    if func is not None:
        measure = BipartitionMeasure(
            name=name or func.__name__,
            func=func,
            ideal_value=ideal_value,
            worst_value=worst_value,
            skip_undefined=skip_undefined,
            count_based=count_based,
        )
        MEASURE_REGISTRY[measure.name] = measure
        return measure

    def decorator(f: CountMeasureFunc) -> CountMeasureFunc:
        register_measure(
            name, f, ideal_value, worst_value, skip_undefined, count_based
        )
        return f

    return decorator


def get_measure(measure: str | BipartitionMeasure) -> BipartitionMeasure:
    """Resolve a measure name or pass a measure object through.

    Raises
    ------
    ConfigurationError
        If the name is not registered
    """
    if isinstance(measure, BipartitionMeasure):
        return measure
    if measure not in MEASURE_REGISTRY:
        available = sorted(MEASURE_REGISTRY)
        raise ConfigurationError(
            f"Unknown measure '{measure}'. Available: {available}"
        )
    return MEASURE_REGISTRY[measure]


# ============================================================================
# Built-in example-based measures
# ============================================================================


def hamming_loss(tp: int, fp: int, fn: int, n_labels: int) -> float:
    """Fraction of labels whose relevance is predicted wrongly."""
    return (fp + fn) / n_labels


def example_based_accuracy(tp: int, fp: int, fn: int, n_labels: int) -> float:
    """Jaccard index between predicted and relevant label sets."""
    union = tp + fp + fn
    if union == 0:
        raise UndefinedMeasureError("Both predicted and relevant label sets are empty")
    return tp / union


def example_based_precision(tp: int, fp: int, fn: int, n_labels: int) -> float:
    """Fraction of predicted labels that are relevant."""
    if tp + fp == 0:
        raise UndefinedMeasureError("No label predicted")
    return tp / (tp + fp)


def example_based_recall(tp: int, fp: int, fn: int, n_labels: int) -> float:
    """Fraction of relevant labels that are predicted."""
    if tp + fn == 0:
        raise UndefinedMeasureError("No relevant label")
    return tp / (tp + fn)


def subset_accuracy(tp: int, fp: int, fn: int, n_labels: int) -> float:
    """1 when the predicted label set matches the relevant set exactly."""
    return 1.0 if fp == 0 and fn == 0 else 0.0


def make_f_measure(
    beta: float = 1.0, name: str | None = None, strict: bool = True
) -> BipartitionMeasure:
    r"""Create the example-based F\ :sub:`beta` measure.

    Parameters
    ----------
    beta : float, default=1.0
        Weight of recall relative to precision (beta > 0).
    name : str, optional
        Name of the measure, defaults to ``"example_based_f_measure"`` for
        beta=1 and ``"example_based_f{beta}_measure"`` otherwise.
    strict : bool, default=True
        If False, examples with empty predicted and relevant sets are
        skipped when averaging instead of raising.

    Returns
    -------
    BipartitionMeasure
        Measure with ideal value 1 and worst value 0.
    """
    if not beta > 0:
        raise ValueError(f"beta must be positive, got {beta}")
    beta2 = beta * beta

    def _f_measure(tp: int, fp: int, fn: int, n_labels: int) -> float:
        denom = (1 + beta2) * tp + beta2 * fn + fp
        if denom == 0:
            raise UndefinedMeasureError(
                "Both predicted and relevant label sets are empty"
            )
        return (1 + beta2) * tp / denom

    if name is None:
        name = (
            "example_based_f_measure"
            if beta == 1.0
            else f"example_based_f{beta:g}_measure"
        )
    _f_measure.__name__ = name
    return BipartitionMeasure(
        name=name,
        func=_f_measure,
        ideal_value=1.0,
        worst_value=0.0,
        skip_undefined=not strict,
    )


# Register built-in measures manually to avoid decorator type issues
register_measure("hamming_loss", hamming_loss, ideal_value=0.0, worst_value=1.0)
register_measure("example_based_accuracy", example_based_accuracy)
register_measure("jaccard", example_based_accuracy)
register_measure("example_based_precision", example_based_precision)
register_measure("example_based_recall", example_based_recall)
register_measure("subset_accuracy", subset_accuracy)
MEASURE_REGISTRY["example_based_f_measure"] = make_f_measure(1.0)
MEASURE_REGISTRY["f1"] = make_f_measure(1.0, name="f1")
