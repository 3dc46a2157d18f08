"""Tests for prediction outputs and frozen threshold models."""

import dataclasses

import numpy as np
import pytest

from multilabel_cutoffs import ModelKind, MultiLabelOutput, create_model


class TestMultiLabelOutput:
    """Per-example outputs of a multi-label learner."""

    def test_ranking_derived_from_confidences(self):
        """Confidences without a ranking get the stable descending ranking."""
        output = MultiLabelOutput(confidences=[0.9, 0.1, 0.6])
        assert output.ranking.tolist() == [1, 3, 2]
        assert output.has_confidences
        assert output.has_ranking
        assert not output.has_bipartition
        assert output.n_labels == 3

    def test_bipartition_only(self):
        """A hard-label learner has neither confidences nor ranking."""
        output = MultiLabelOutput(bipartition=[1, 0, 1])
        assert output.bipartition.dtype == bool
        assert not output.has_ranking
        assert not output.has_confidences

    def test_requires_some_content(self):
        """An output with nothing in it is rejected."""
        with pytest.raises(ValueError, match="must be provided"):
            MultiLabelOutput()

    def test_size_mismatch(self):
        """All present arrays must have the same number of labels."""
        with pytest.raises(ValueError, match="do not match"):
            MultiLabelOutput(bipartition=[True, False], confidences=[0.1, 0.2, 0.3])

    def test_confidences_copied(self):
        """Later changes to the source array do not leak into the output."""
        source = np.array([0.2, 0.7])
        output = MultiLabelOutput(confidences=source)
        source[0] = 0.99
        assert output.confidences.tolist() == [0.2, 0.7]

    def test_equality(self):
        """Outputs compare by content."""
        a = MultiLabelOutput(bipartition=[True, False], confidences=[0.8, 0.1])
        b = MultiLabelOutput(bipartition=[True, False], confidences=[0.8, 0.1])
        c = MultiLabelOutput(bipartition=[True, True], confidences=[0.8, 0.1])
        assert a == b
        assert a != c

    def test_frozen(self):
        """Outputs cannot be reassigned."""
        output = MultiLabelOutput(confidences=[0.5])
        with pytest.raises(dataclasses.FrozenInstanceError):
            output.confidences = np.array([0.1])


class TestCreateModel:
    """Factory for frozen threshold models."""

    def test_scalar_threshold(self):
        """Scalar thresholds are stored as floats."""
        model = create_model(kind=ModelKind.THRESHOLD, n_labels=3, threshold=0.35)
        assert model.threshold == pytest.approx(0.35)
        assert isinstance(model.threshold, float)
        assert not model.is_per_label

    def test_per_label_thresholds_read_only(self):
        """Per-label thresholds are copied and made read-only."""
        source = np.array([0.2, 0.4])
        model = create_model(kind=ModelKind.PER_LABEL, n_labels=2, threshold=source)
        source[0] = 0.9
        assert model.threshold.tolist() == [0.2, 0.4]
        assert model.is_per_label
        with pytest.raises(ValueError):
            model.threshold[0] = 0.5

    def test_threshold_shape_checked(self):
        """Per-label thresholds need one entry per label."""
        with pytest.raises(ValueError, match="shape"):
            create_model(
                kind=ModelKind.PER_LABEL, n_labels=3, threshold=np.array([0.1, 0.2])
            )

    def test_unknown_kind(self):
        """Model kinds are validated."""
        with pytest.raises(ValueError, match="Unknown model kind"):
            create_model(kind="bogus", n_labels=2)

    def test_metadata_read_only(self):
        """Metadata is exposed as a read-only mapping."""
        model = create_model(
            kind=ModelKind.CUT, n_labels=2, cut=1, distances=np.array([0.5, 0.1, 0.3])
        )
        with pytest.raises(TypeError):
            model.metadata["distances"] = None
        with pytest.raises(ValueError):
            model.metadata["distances"][0] = 0.0

    def test_model_frozen(self):
        """The model itself cannot be modified after creation."""
        model = create_model(kind=ModelKind.CUT, n_labels=2, cut=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            model.cut = 2
