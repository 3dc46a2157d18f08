"""Minimal type definitions for multilabel_cutoffs package.

This module contains only the essential type aliases and string constants
needed for the public API.
"""

# ============================================================================
# Core Type Aliases
# ============================================================================
from collections.abc import Callable
from typing import Any, TypeAlias

import numpy as np
from numpy.typing import ArrayLike, NDArray

CountMeasureFunc: TypeAlias = Callable[[int, int, int, int], float]
"""Function signature for bipartition measures: (tp, fp, fn, n_labels) -> value."""

ConfidenceVector: TypeAlias = NDArray[np.float64]
"""Per-label confidence scores of a single example, shape (n_labels,)."""

ConfidenceMatrix: TypeAlias = NDArray[np.float64]
"""Confidence scores of many examples, shape (n_samples, n_labels)."""

Bipartition: TypeAlias = NDArray[np.bool_]
"""Predicted relevant/irrelevant decision per label."""

Ranking: TypeAlias = NDArray[np.int64]
"""1-based rank per label, rank 1 is the most confident label."""

LabelMatrixLike: TypeAlias = ArrayLike
"""Ground truth in {0, 1}; NaN or -1 marks a missing label."""

CVLike: TypeAlias = int | Any | None
"""Number of folds, a splitter exposing ``split`` or None for no CV."""

# String literals for configuration parameters
MetaFeaturesLiteral: TypeAlias = str
MeasureLiteral: TypeAlias = str

# ============================================================================
# Simple enum-like classes for public API compatibility
# ============================================================================


class MetaFeatures:
    """Feature spaces a meta-learner can be trained on."""

    CONTENT = "content"
    SCORES = "scores"
    RANKS = "ranks"


class ModelKind:
    """Kinds of fitted threshold models."""

    CUT = "cut"
    THRESHOLD = "threshold"
    PER_LABEL = "per_label"
    META = "meta"
    PER_EXAMPLE = "per_example"


# Validation sets
META_FEATURES = {"content", "scores", "ranks"}

MODEL_KINDS = {"cut", "threshold", "per_label", "meta", "per_example"}

# Encodings accepted for a missing ground-truth label
MISSING_LABEL = -1
