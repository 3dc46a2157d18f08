"""Test fixtures and utilities for multilabel cutoff testing.

This module provides standardized data generation, realistic datasets,
stand-in base learners and assertion helpers for consistent testing across
all test modules.
"""

# Export all data generators (simple numpy-based)
from .data_generators import (
    generate_multilabel_data,
    generate_tied_confidences,
    with_missing_labels,
)

# Export stand-in base learners
from .learners import (
    BinaryProbaLearner,
    DecisionScoreLearner,
    ExplodingLearner,
    FixedScoreLearner,
    HardLabelLearner,
    IndicatorProbaLearner,
    ListProbaLearner,
)

# Export realistic datasets (sklearn-based)
from .realistic_datasets import (
    MultiLabelDataset,
    make_realistic_multilabel_dataset,
    make_probabilistic_learner,
)

# Export assertion helpers
from .assertions import (
    assert_valid_bipartitions,
    assert_valid_ranking,
    assert_valid_threshold,
)

__all__ = [
    # Data generators (simple)
    "generate_multilabel_data",
    "generate_tied_confidences",
    "with_missing_labels",
    # Stand-in learners
    "BinaryProbaLearner",
    "DecisionScoreLearner",
    "ExplodingLearner",
    "FixedScoreLearner",
    "HardLabelLearner",
    "IndicatorProbaLearner",
    "ListProbaLearner",
    # Realistic datasets (sklearn-based)
    "MultiLabelDataset",
    "make_realistic_multilabel_dataset",
    "make_probabilistic_learner",
    # Assertion helpers
    "assert_valid_bipartitions",
    "assert_valid_ranking",
    "assert_valid_threshold",
]
