"""TSV report files for a phenotype comparison.

Writes, into one results directory:

- ``chiSquared.tsv``: significant terms with per-cohort counts and statistics
- ``dissim.tsv``: patient dissimilarity matrix (1 - similarity) for clustering
- ``terms/<term>.tsv``: for each significant term, the patients carrying it
"""

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Set, Union

from phenocompare.config import (
    CHI_SQUARED_FILENAME,
    DISSIMILARITY_FILENAME,
    TERM_DETAIL_DIRNAME,
)
from phenocompare.model import TermId
from phenocompare.ontology import AncestorProvider, UnknownTermError
from phenocompare.propagation import SubgroupTable
from phenocompare.similarity import SimilarityMatrix
from phenocompare.stats import ChiSquaredResult

logger = logging.getLogger(__name__)


def find_subtypes(
    terms: Iterable[TermId], parent: TermId, ontology: AncestorProvider
) -> Set[TermId]:
    """Terms among ``terms`` that are ``parent`` or one of its descendants."""
    subtypes: Set[TermId] = set()
    for term in terms:
        try:
            if parent in ontology.ancestors(term):
                subtypes.add(term)
        except UnknownTermError:
            continue
    return subtypes


def term_filename(term: TermId) -> str:
    return f"{term.prefix}_{term.local_id}.tsv"


class ReportWriter:
    """Writes comparison outputs as tab-separated files.

    Args:
        results_dir: Output directory, created if missing.
    """

    def __init__(self, results_dir: Union[str, Path]) -> None:
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    def write_chi_squared(
        self,
        results: Sequence[ChiSquaredResult],
        group_names: Sequence[str],
        group_sizes: Sequence[int],
        ontology: AncestorProvider,
    ) -> Path:
        """Write one row per result, in the order given.

        Raises:
            ValueError: if a result does not carry one count per group.
        """
        for result in results:
            if len(result.counts) != len(group_sizes):
                raise ValueError(
                    f"{result.term} has {len(result.counts)} counts for {len(group_sizes)} groups"
                )

        path = self.results_dir / CHI_SQUARED_FILENAME
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter="\t", lineterminator="\n")
            writer.writerow(
                ["#HPO TermId", "Term Name", *group_names, "ChiSq", "Uncorr p Value", "Corr p Value"]
            )
            for result in results:
                writer.writerow([
                    result.term.curie,
                    ontology.term_name(result.term),
                    *(f"{c}/{n}" for c, n in zip(result.counts, group_sizes)),
                    f"{result.chi_square:.3f}",
                    f"{result.p_value:.5f}",
                    f"{result.corrected_p:.5f}" if result.corrected_p is not None else "NA",
                ])
        logger.info("Wrote %d terms to %s", len(results), path)
        return path

    def write_dissimilarity(self, matrix: SimilarityMatrix) -> Path:
        """Write ``1 - similarity`` with patient ids as header row and index."""
        path = self.results_dir / DISSIMILARITY_FILENAME
        frame = matrix.to_frame()
        (1.0 - frame).to_csv(path, sep="\t", float_format="%.2f")
        logger.info("Wrote %d x %d dissimilarity matrix to %s", len(matrix), len(matrix), path)
        return path

    def write_term_details(
        self,
        results: Sequence[ChiSquaredResult],
        table: SubgroupTable,
        ontology: AncestorProvider,
    ) -> List[Path]:
        """Write, per result term, which patients of each cohort carry it.

        Each row lists the patient's annotated terms that explain the
        match, i.e. the reported term itself or its descendants.
        """
        detail_dir = self.results_dir / TERM_DETAIL_DIRNAME
        detail_dir.mkdir(parents=True, exist_ok=True)

        paths: List[Path] = []
        for result in results:
            path = detail_dir / term_filename(result.term)
            with path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, delimiter="\t", lineterminator="\n")
                writer.writerow([f"#{result.term.curie}", ontology.term_name(result.term)])
                writer.writerow(["group", "patient_id", "gene", "matching_terms"])
                for subgroup in table.subgroups(result.term):
                    for patient in subgroup:
                        matching = sorted(find_subtypes(patient.terms, result.term, ontology))
                        writer.writerow([
                            subgroup.name,
                            patient.pid,
                            patient.gene,
                            ";".join(t.curie for t in matching),
                        ])
            paths.append(path)
        logger.info("Wrote %d term detail files to %s", len(paths), detail_dir)
        return paths
