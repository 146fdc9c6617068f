"""Tests for pairwise patient similarity."""

import numpy as np
import pytest

from conftest import make_patient
from phenocompare.similarity import (
    compute_similarity_matrix,
    jaccard_similarity,
    overlap_similarity,
)


@pytest.fixture
def patients():
    return [
        make_patient("P1", "PIGO", "HP:0001250", "HP:0001252"),
        make_patient("P2", "PIGO", "HP:0001250", "HP:0001252", "HP:0000316", "HP:0001263"),
        make_patient("P3", "PIGV", "HP:0000175"),
        make_patient("P4", "PIGG", "HP:0001263"),
    ]


class TestMeasures:

    def test_overlap(self):
        assert overlap_similarity({1, 2}, {1, 2, 3, 4}) == 0.5
        assert overlap_similarity({1, 2}, {1, 2}) == 1.0
        assert overlap_similarity({1}, {2}) == 0.0
        assert overlap_similarity(set(), set()) == 0.0

    def test_jaccard(self):
        assert jaccard_similarity({1, 2}, {2, 3}) == pytest.approx(1 / 3)
        assert jaccard_similarity(set(), set()) == 0.0


class TestSimilarityMatrix:

    def test_diagonal_and_symmetry(self, patients):
        matrix = compute_similarity_matrix(patients)
        values = matrix.values
        assert values.shape == (4, 4)
        assert np.all(np.diag(values) == 1.0)
        assert np.array_equal(values, values.T)

    def test_overlap_values(self, patients):
        matrix = compute_similarity_matrix(patients, method="overlap")
        assert matrix[1, 0] == 0.5
        assert matrix[0, 2] == 0.0
        assert matrix[3, 1] == 0.25

    def test_self_similarity_off_diagonal(self):
        p = make_patient("P1", "PIGO", "HP:0001250", "HP:0001252")
        q = make_patient("P1b", "PIGO", "HP:0001250", "HP:0001252")
        matrix = compute_similarity_matrix([p, q])
        assert matrix[0, 1] == 1.0

    def test_jaccard_values(self, patients):
        matrix = compute_similarity_matrix(patients, method="jaccard")
        assert matrix[0, 1] == 0.5

    def test_ontology_jaccard_relates_sibling_terms(self, patients, ontology):
        plain = compute_similarity_matrix(patients, method="jaccard")
        aware = compute_similarity_matrix(patients, method="ontology-jaccard", ontology=ontology)
        # P3 (cleft palate) and P4 (global developmental delay) share only general ancestors
        assert plain[2, 3] == 0.0
        assert aware[2, 3] > 0.0
        assert np.all(np.diag(aware.values) == 1.0)

    def test_ontology_jaccard_needs_ontology(self, patients):
        with pytest.raises(ValueError, match="needs an ontology"):
            compute_similarity_matrix(patients, method="ontology-jaccard")

    def test_unknown_method(self, patients):
        with pytest.raises(ValueError):
            compute_similarity_matrix(patients, method="cosine")

    def test_to_frame_and_dissimilarity(self, patients):
        matrix = compute_similarity_matrix(patients)
        frame = matrix.to_frame()
        assert list(frame.index) == ["P1", "P2", "P3", "P4"]
        assert list(frame.columns) == ["P1", "P2", "P3", "P4"]
        assert matrix.dissimilarity()[1, 0] == 0.5
        assert np.all(np.diag(matrix.dissimilarity()) == 0.0)

    def test_empty(self):
        matrix = compute_similarity_matrix([])
        assert len(matrix) == 0
