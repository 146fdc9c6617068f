"""Phenotype comparison across gene-defined patient cohorts.

Propagates each patient's HPO annotations up the ontology, counts every
term per cohort, and reports terms whose prevalence differs significantly
between cohorts (chi-squared test, Bonferroni-corrected), together with a
patient similarity matrix for clustering.

Usage::

    from phenocompare import CompareConfig, run_comparison, write_reports

    config = CompareConfig(
        genes_path="genes.txt",
        patients_path="patients.tsv",
        hpo_path="hp.obo",
    )
    result = run_comparison(config)
    write_reports(result, config.results_dir)
"""

from phenocompare.cohorts import CohortAssignment, UnknownGeneError, assign_cohorts
from phenocompare.config import CompareConfig
from phenocompare.genes import EmptyGroupError, GeneGroup, GeneGroups
from phenocompare.model import Patient, PatientGroup, TermId
from phenocompare.ontology import (
    AncestorProvider,
    MappingOntology,
    OntologyFormatError,
    ProntoOntology,
    UnknownTermError,
)
from phenocompare.patients import PatientFormatError, parse_patient_line, read_patients
from phenocompare.pipeline import ComparisonResult, run_comparison, write_reports
from phenocompare.propagation import SubgroupTable, aggregate, ancestor_closure
from phenocompare.report import ReportWriter
from phenocompare.similarity import SimilarityMatrix, compute_similarity_matrix
from phenocompare.stats import (
    ChiSquaredResult,
    ComparisonSummary,
    bonferroni_correct,
    chi_square,
    chi_square_for_term,
    compare_terms,
)

__all__ = [
    "AncestorProvider",
    "ChiSquaredResult",
    "CohortAssignment",
    "CompareConfig",
    "ComparisonResult",
    "ComparisonSummary",
    "EmptyGroupError",
    "GeneGroup",
    "GeneGroups",
    "MappingOntology",
    "OntologyFormatError",
    "Patient",
    "PatientFormatError",
    "PatientGroup",
    "ProntoOntology",
    "ReportWriter",
    "SimilarityMatrix",
    "SubgroupTable",
    "TermId",
    "UnknownGeneError",
    "UnknownTermError",
    "aggregate",
    "ancestor_closure",
    "assign_cohorts",
    "bonferroni_correct",
    "chi_square",
    "chi_square_for_term",
    "compare_terms",
    "compute_similarity_matrix",
    "parse_patient_line",
    "read_patients",
    "run_comparison",
    "write_reports",
]
