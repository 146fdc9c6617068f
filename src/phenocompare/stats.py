"""Chi-squared comparison of term prevalence across patient cohorts.

For each observed term an N x 2 contingency table is built (patients with
and without the term, per cohort). Terms whose table has an expected cell
count below ``MIN_EXPECTED_COUNT`` are not tested, since the chi-squared
approximation does not hold there. The remaining p-values are
Bonferroni-corrected over the number of terms actually tested, and only
terms significant after correction are kept.

Usage::

    from phenocompare.stats import compare_terms

    summary = compare_terms(table, group_sizes=[87, 19, 84])
    for result in summary.results:
        print(result.term, result.chi_square, result.corrected_p)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import chi2_contingency
from scipy.stats.contingency import expected_freq
from statsmodels.stats.multitest import multipletests

from phenocompare.config import MIN_EXPECTED_COUNT, SIGNIFICANCE_LEVEL
from phenocompare.model import TermId
from phenocompare.propagation import SubgroupTable

logger = logging.getLogger(__name__)


@dataclass
class ChiSquaredResult:
    """Chi-squared test outcome for one term."""

    term: TermId
    chi_square: float
    p_value: float
    counts: Tuple[int, ...] = ()
    group_sizes: Tuple[int, ...] = ()
    corrected_p: Optional[float] = None

    def correct_p_value(self, n_tests: int) -> float:
        """Apply the Bonferroni correction for ``n_tests`` simultaneous tests."""
        if n_tests < 1:
            raise ValueError(f"n_tests must be >= 1, got {n_tests}")
        self.corrected_p = min(self.p_value * n_tests, 1.0)
        return self.corrected_p

    def __repr__(self) -> str:
        corr = f"{self.corrected_p:.3e}" if self.corrected_p is not None else "N/A"
        return (
            f"ChiSquaredResult({self.term}, chi2={self.chi_square:.3f}, "
            f"p={self.p_value:.3e}, p_corr={corr})"
        )


def result_order_key(result: ChiSquaredResult) -> Tuple[float, str]:
    """Ascending order: chi-squared statistic, then term CURIE."""
    return (result.chi_square, result.term.curie)


def rank_results(results: Sequence[ChiSquaredResult]) -> List[ChiSquaredResult]:
    """Most significant first: statistic descending, ties broken by term ascending."""
    return sorted(results, key=lambda r: (-r.chi_square, r.term.curie))


def chi_square(observed) -> Tuple[float, float, int, np.ndarray]:
    """Pearson chi-squared test of independence on an r x c table.

    No continuity correction is applied, also for 2 x 2 tables.

    Returns:
        (statistic, p_value, degrees_of_freedom, expected)
    """
    table = np.asarray(observed, dtype=float)
    statistic, p_value, dof, expected = chi2_contingency(table, correction=False)
    return float(statistic), float(p_value), int(dof), expected


def contingency_table(counts: Sequence[int], group_sizes: Sequence[int]) -> np.ndarray:
    """N x 2 table of (with term, without term) per cohort.

    Raises:
        ValueError: on mismatched lengths, negative counts or counts larger
            than their group.
    """
    if len(counts) != len(group_sizes):
        raise ValueError(
            f"{len(counts)} counts given for {len(group_sizes)} groups"
        )
    rows = []
    for observed, size in zip(counts, group_sizes):
        if observed < 0 or observed > size:
            raise ValueError(f"Count {observed} outside group of size {size}")
        rows.append((observed, size - observed))
    return np.array(rows, dtype=float)


def chi_square_for_term(
    term: TermId,
    counts: Sequence[int],
    group_sizes: Sequence[int],
    min_expected: float = MIN_EXPECTED_COUNT,
) -> Optional[ChiSquaredResult]:
    """Chi-squared test for one term, or None if the table is not testable.

    The table is untestable when any expected count is below
    ``min_expected`` or is zero (the term is carried by every patient or by
    none).
    """
    table = contingency_table(counts, group_sizes)
    if table.sum() <= 0:
        return None
    expected = expected_freq(table)
    if np.any(expected <= 0) or np.any(expected < min_expected):
        return None

    statistic, p_value, _, _ = chi_square(table)
    return ChiSquaredResult(
        term=term,
        chi_square=statistic,
        p_value=p_value,
        counts=tuple(int(c) for c in counts),
        group_sizes=tuple(int(s) for s in group_sizes),
    )


def bonferroni_correct(results: Sequence[ChiSquaredResult]) -> List[ChiSquaredResult]:
    """Set ``corrected_p = min(p * k, 1)`` on each result, k = len(results)."""
    results = list(results)
    if not results:
        return results
    pvals = np.array([r.p_value for r in results])
    _, corrected, _, _ = multipletests(pvals, method="bonferroni")
    for result, value in zip(results, corrected):
        result.corrected_p = float(min(value, 1.0))
    return results


@dataclass
class ComparisonSummary:
    """Significant results plus how many terms were observed and tested."""

    results: List[ChiSquaredResult] = field(default_factory=list)
    n_observed: int = 0
    n_tested: int = 0
    n_untestable: int = 0
    alpha: float = SIGNIFICANCE_LEVEL

    @property
    def n_significant(self) -> int:
        return len(self.results)


def compare_terms(
    table: SubgroupTable,
    group_sizes: Sequence[int],
    min_expected: float = MIN_EXPECTED_COUNT,
    alpha: float = SIGNIFICANCE_LEVEL,
) -> ComparisonSummary:
    """Test every observed term, correct, filter on ``alpha`` and rank.

    Args:
        table: Per-term cohort subgroups from ``aggregate``
        group_sizes: Number of patients in each cohort
        min_expected: Smallest expected cell count accepted for testing
        alpha: Corrected p-values above this are dropped

    Returns:
        ComparisonSummary with results ranked by statistic descending.
    """
    if len(group_sizes) != table.n_groups:
        raise ValueError(
            f"{len(group_sizes)} group sizes given for {table.n_groups} groups"
        )

    tested: List[ChiSquaredResult] = []
    terms = table.terms()
    for term in terms:
        result = chi_square_for_term(term, table.counts(term), group_sizes, min_expected)
        if result is not None:
            tested.append(result)

    bonferroni_correct(tested)
    significant = [r for r in tested if r.corrected_p <= alpha]

    summary = ComparisonSummary(
        results=rank_results(significant),
        n_observed=len(terms),
        n_tested=len(tested),
        n_untestable=len(terms) - len(tested),
        alpha=alpha,
    )
    logger.info(
        "Tested %d of %d observed terms (%d below expected-count threshold); "
        "%d significant at corrected p <= %g",
        summary.n_tested,
        summary.n_observed,
        summary.n_untestable,
        summary.n_significant,
        alpha,
    )
    return summary
