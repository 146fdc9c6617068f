"""Phenotype comparison pipeline orchestrator.

Loads gene groups, patients and the ontology, assigns patients to cohorts,
aggregates propagated terms, tests every term and computes patient
similarity. ``write_reports`` then serialises the result.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from phenocompare.cohorts import CohortAssignment, assign_cohorts
from phenocompare.config import CompareConfig
from phenocompare.genes import GeneGroups
from phenocompare.ontology import AncestorProvider, ProntoOntology
from phenocompare.patients import read_patients
from phenocompare.propagation import SubgroupTable, aggregate
from phenocompare.report import ReportWriter
from phenocompare.similarity import SimilarityMatrix, compute_similarity_matrix
from phenocompare.stats import ComparisonSummary, compare_terms

logger = logging.getLogger(__name__)


class ComparisonResult:
    """Container for everything a comparison run produces."""

    def __init__(
        self,
        gene_groups: GeneGroups,
        cohorts: CohortAssignment,
        table: SubgroupTable,
        summary: ComparisonSummary,
        similarity: SimilarityMatrix,
        ontology: AncestorProvider,
    ):
        self.gene_groups = gene_groups
        self.cohorts = cohorts
        self.table = table
        self.summary = summary
        self.similarity = similarity
        self.ontology = ontology
        self.warnings: List[str] = []

    @property
    def group_names(self) -> List[str]:
        return self.gene_groups.names

    @property
    def group_sizes(self) -> List[int]:
        return self.cohorts.group_sizes

    def get_stats(self) -> Dict[str, int]:
        stats = {f"patients_{g.name}": len(g) for g in self.cohorts.groups}
        stats["patients_rejected"] = len(self.cohorts.rejected)
        stats["terms_observed"] = self.summary.n_observed
        stats["terms_tested"] = self.summary.n_tested
        stats["terms_significant"] = self.summary.n_significant
        stats["annotations_unresolved"] = sum(self.table.unresolved.values())
        stats["warnings"] = len(self.warnings)
        return stats


def load_ontology(hpo_path: Optional[Path]) -> ProntoOntology:
    if hpo_path is None:
        raise FileNotFoundError(
            "No ontology file given (use --hpo or set PHENOCOMPARE_HPO_PATH)"
        )
    return ProntoOntology.from_obo(hpo_path)


def run_comparison(
    config: CompareConfig,
    ontology: Optional[AncestorProvider] = None,
) -> ComparisonResult:
    """Run the full comparison described by ``config``.

    Args:
        config: Input paths and statistical settings
        ontology: Ancestor provider to use instead of loading
            ``config.hpo_path``

    Raises:
        FileNotFoundError: for a missing genes, patients or ontology file.
        OntologyFormatError: if the ontology file cannot be parsed.
        EmptyGroupError: if the gene file has no groups or a cohort ends up
            with no patients.
        UnknownGeneError: for an unassignable patient when
            ``config.on_unknown_gene == "error"``.
    """
    # Fail on configuration problems before any parsing work.
    for label, path in (("genes", config.genes_path), ("patients", config.patients_path)):
        if not path.exists():
            raise FileNotFoundError(f"Cannot find {label} input {path}")

    gene_groups = GeneGroups.from_file(config.genes_path)
    if ontology is None:
        ontology = load_ontology(config.hpo_path)

    patient_data = read_patients(config.patients_path)
    cohorts = assign_cohorts(patient_data.patients, gene_groups, config.on_unknown_gene)
    cohorts.require_nonempty()

    table = aggregate(cohorts.groups, ontology)
    summary = compare_terms(
        table,
        cohorts.group_sizes,
        min_expected=config.min_expected,
        alpha=config.alpha,
    )
    similarity = compute_similarity_matrix(
        cohorts.all_patients(),
        method=config.similarity_method,
        ontology=ontology,
    )

    result = ComparisonResult(
        gene_groups=gene_groups,
        cohorts=cohorts,
        table=table,
        summary=summary,
        similarity=similarity,
        ontology=ontology,
    )
    result.warnings.extend(patient_data.warnings)
    result.warnings.extend(cohorts.warnings)
    result.warnings.extend(
        f"Term {term} not found in ontology ({n} patients)"
        for term, n in sorted(table.unresolved.items())
    )
    return result


def write_reports(
    result: ComparisonResult,
    results_dir: Path,
    term_details: bool = True,
) -> List[Path]:
    """Write all report files for ``result``; return the paths written."""
    writer = ReportWriter(results_dir)
    paths = [
        writer.write_chi_squared(
            result.summary.results,
            result.group_names,
            result.group_sizes,
            result.ontology,
        ),
        writer.write_dissimilarity(result.similarity),
    ]
    if term_details:
        paths.extend(writer.write_term_details(result.summary.results, result.table, result.ontology))
    return paths
