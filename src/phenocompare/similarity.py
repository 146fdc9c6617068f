"""Pairwise patient similarity from phenotype term sets.

Three measures are available:

- ``overlap``: |A & B| / max(|A|, |B|) on annotated terms
- ``jaccard``: |A & B| / |A | B| on annotated terms
- ``ontology-jaccard``: Jaccard on ancestor-closed term sets, so that two
  patients with related but not identical terms still score above zero

All measures are symmetric and lie in [0, 1]. Dissimilarity (1 - s) is
left to the report writer.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional, Sequence

import numpy as np
import pandas as pd

from phenocompare.config import SIMILARITY_METHODS
from phenocompare.model import Patient, TermId
from phenocompare.ontology import AncestorProvider
from phenocompare.propagation import ancestor_closure

logger = logging.getLogger(__name__)


def overlap_similarity(a: AbstractSet, b: AbstractSet) -> float:
    """Shared terms over the size of the larger set."""
    larger = max(len(a), len(b))
    if larger == 0:
        return 0.0
    return len(a & b) / larger


def jaccard_similarity(a: AbstractSet, b: AbstractSet) -> float:
    """Shared terms over all terms of either set."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


@dataclass(frozen=True, eq=False)
class SimilarityMatrix:
    """Symmetric patient-by-patient similarity with a unit diagonal."""

    patients: List[Patient]
    values: np.ndarray
    method: str = "overlap"

    @property
    def labels(self) -> List[str]:
        return [p.pid for p in self.patients]

    def dissimilarity(self) -> np.ndarray:
        return 1.0 - self.values

    def to_frame(self) -> pd.DataFrame:
        """Similarity as a DataFrame labelled by patient id on both axes."""
        return pd.DataFrame(self.values, index=self.labels, columns=self.labels)

    def __len__(self) -> int:
        return len(self.patients)

    def __getitem__(self, key):
        return self.values[key]


def _term_sets(
    patients: Sequence[Patient],
    method: str,
    ontology: Optional[AncestorProvider],
) -> List[FrozenSet[TermId]]:
    if method != "ontology-jaccard":
        return [p.terms for p in patients]
    if ontology is None:
        raise ValueError("ontology-jaccard similarity needs an ontology")
    return [ancestor_closure(p.terms, ontology) for p in patients]


_MEASURES: Dict[str, Callable[[AbstractSet, AbstractSet], float]] = {
    "overlap": overlap_similarity,
    "jaccard": jaccard_similarity,
    "ontology-jaccard": jaccard_similarity,
}


def compute_similarity_matrix(
    patients: Sequence[Patient],
    method: str = "overlap",
    ontology: Optional[AncestorProvider] = None,
) -> SimilarityMatrix:
    """All-pairs similarity for ``patients`` in the given order.

    Only the lower triangle is computed; it is mirrored into the upper one
    and the diagonal is fixed at 1.0.

    Args:
        patients: Patients in matrix order (cohort 0 first, then cohort 1, ...)
        method: One of ``overlap``, ``jaccard``, ``ontology-jaccard``
        ontology: Required for ``ontology-jaccard``

    Raises:
        ValueError: for an unknown method, or ``ontology-jaccard`` without
            an ontology.
    """
    if method not in SIMILARITY_METHODS:
        raise ValueError(
            f"Unknown similarity method {method!r}; expected one of {', '.join(SIMILARITY_METHODS)}"
        )
    measure = _MEASURES[method]
    term_sets = _term_sets(patients, method, ontology)

    dim = len(patients)
    values = np.zeros((dim, dim), dtype=float)
    for r in range(dim):
        values[r, r] = 1.0
        for c in range(r):
            values[r, c] = values[c, r] = measure(term_sets[r], term_sets[c])

    logger.info("Computed %s similarity for %d patients", method, dim)
    return SimilarityMatrix(patients=list(patients), values=values, method=method)
