"""Multi-label cutoffs - turn label confidences into bipartitions.

This library wraps any scikit-learn compatible multi-label learner and decides,
for every example, which labels are relevant, optimising an example-based
bipartition measure:

**Rank and cut:**
- FixedCutThreshold: the top ``t`` labels, ``t`` given, from the label
  cardinality, or tuned for a measure

**Thresholds:**
- GlobalScalarThreshold: one threshold for all labels (two-stage grid search)
- PerLabelThreshold: one threshold per label (coordinate search)

**Per-example decisions:**
- ExpectedFMeasureBipartition: closed-form expected F-measure
- ProbabilisticThresholdOptimizer: exact expected distance of any count-based
  measure under label independence
- InstanceThresholdPredictor / LabelCountPredictor: a meta estimator predicts
  the threshold or the number of relevant labels

**Measures:**
- hamming_loss, example_based_f_measure, example_based_accuracy,
  example_based_precision, example_based_recall, subset_accuracy
"""

# Single source of truth for version
try:
    from importlib.metadata import version

    __version__ = version("multilabel-cutoffs")
except Exception:
    import pathlib
    import tomllib

    pyproject_path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    else:
        __version__ = "unknown"

from .base import ThresholdingLearner

# Cross-validation helpers
from .cv import fold_learners, make_splitter, out_of_fold_confidences

# Per-example strategies
from .expected import (
    ExpectedFMeasureBipartition,
    expected_f_bipartition,
    expected_f_top_n,
)

# Rank and cut
from .fixed_cut import FixedCutThreshold, cut_distances, select_cut

# Thresholds
from .global_threshold import (
    GlobalScalarThreshold,
    grid_search_threshold,
    two_stage_threshold,
)

# Base-learner adapter
from .learners import (
    cardinality,
    clone_learner,
    confidence_matrix,
    predict_outputs,
    supports_ranking,
)

# Measures
from .measures import (
    MEASURE_REGISTRY,
    BipartitionMeasure,
    MeasureAccumulator,
    UndefinedMeasureError,
    confusion_counts,
    example_based_accuracy,
    example_based_precision,
    example_based_recall,
    get_measure,
    hamming_loss,
    make_f_measure,
    mean_distance,
    register_measure,
    subset_accuracy,
)

# Meta-learned bipartitions
from .meta import (
    InstanceThresholdPredictor,
    LabelCountPredictor,
    MetaThresholdLearner,
    instance_threshold,
)
from .per_label import PerLabelThreshold, coordinate_search_thresholds
from .probabilistic import (
    ProbabilisticThresholdOptimizer,
    expected_distances,
    optimal_cut_size,
    prefix_table,
    probabilistic_threshold,
    suffix_table,
)
from .ranking import RankedConfidenceVector, ranks_from_values

# Core result types
from .results import MultiLabelOutput, ThresholdModel, create_model
from .types_minimal import MetaFeatures, ModelKind
from .validation import ConfigurationError

# ============================================================================
# Main API Exports
# ============================================================================

__all__ = [
    "__version__",
    # === Strategies ===
    "ThresholdingLearner",
    "FixedCutThreshold",
    "GlobalScalarThreshold",
    "PerLabelThreshold",
    "ExpectedFMeasureBipartition",
    "ProbabilisticThresholdOptimizer",
    "MetaThresholdLearner",
    "InstanceThresholdPredictor",
    "LabelCountPredictor",
    # === Algorithms ===
    "cut_distances",
    "select_cut",
    "grid_search_threshold",
    "two_stage_threshold",
    "coordinate_search_thresholds",
    "expected_f_bipartition",
    "expected_f_top_n",
    "suffix_table",
    "prefix_table",
    "expected_distances",
    "optimal_cut_size",
    "probabilistic_threshold",
    "instance_threshold",
    # === Measures ===
    "MEASURE_REGISTRY",
    "BipartitionMeasure",
    "MeasureAccumulator",
    "UndefinedMeasureError",
    "confusion_counts",
    "mean_distance",
    "get_measure",
    "register_measure",
    "make_f_measure",
    "hamming_loss",
    "example_based_accuracy",
    "example_based_precision",
    "example_based_recall",
    "subset_accuracy",
    # === Learners and cross-validation ===
    "predict_outputs",
    "confidence_matrix",
    "clone_learner",
    "supports_ranking",
    "cardinality",
    "make_splitter",
    "fold_learners",
    "out_of_fold_confidences",
    # === Types ===
    "RankedConfidenceVector",
    "ranks_from_values",
    "MultiLabelOutput",
    "ThresholdModel",
    "create_model",
    "MetaFeatures",
    "ModelKind",
    "ConfigurationError",
]
