"""Constants and run configuration for phenotype comparison.

Settings come from, in increasing priority: the defaults below, a
``.env`` file / process environment, and explicit arguments (the CLI).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# =============================================================================
# Statistical constants
# =============================================================================

# Chi-squared approximation is not trusted when any expected cell is below this.
MIN_EXPECTED_COUNT = 5.0

# Family-wise significance level applied to Bonferroni-corrected p-values.
SIGNIFICANCE_LEVEL = 0.05

# =============================================================================
# Input / output conventions
# =============================================================================

PATIENT_FILE_SUFFIXES = (".tab", ".tsv")
COMMENT_PREFIX = "#"

CHI_SQUARED_FILENAME = "chiSquared.tsv"
DISSIMILARITY_FILENAME = "dissim.tsv"
TERM_DETAIL_DIRNAME = "terms"

SIMILARITY_METHODS = ("overlap", "jaccard", "ontology-jaccard")
UNKNOWN_GENE_POLICIES = ("skip", "error")

ENV_HPO_PATH = "PHENOCOMPARE_HPO_PATH"
ENV_RESULTS_DIR = "PHENOCOMPARE_RESULTS_DIR"
DEFAULT_RESULTS_DIR = Path("results")


@dataclass
class CompareConfig:
    """Everything a single comparison run needs."""

    genes_path: Path
    patients_path: Path
    hpo_path: Optional[Path] = None
    results_dir: Path = DEFAULT_RESULTS_DIR
    similarity_method: str = "overlap"
    min_expected: float = MIN_EXPECTED_COUNT
    alpha: float = SIGNIFICANCE_LEVEL
    on_unknown_gene: str = "skip"
    write_term_details: bool = True

    def __post_init__(self) -> None:
        self.genes_path = Path(self.genes_path)
        self.patients_path = Path(self.patients_path)
        if self.hpo_path is not None:
            self.hpo_path = Path(self.hpo_path)
        self.results_dir = Path(self.results_dir)
        if self.similarity_method not in SIMILARITY_METHODS:
            raise ValueError(
                f"Unknown similarity method {self.similarity_method!r}; "
                f"expected one of {', '.join(SIMILARITY_METHODS)}"
            )
        if self.on_unknown_gene not in UNKNOWN_GENE_POLICIES:
            raise ValueError(
                f"Unknown gene policy {self.on_unknown_gene!r}; "
                f"expected one of {', '.join(UNKNOWN_GENE_POLICIES)}"
            )
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if self.min_expected < 0:
            raise ValueError(f"min_expected must be >= 0, got {self.min_expected}")

    @classmethod
    def from_env(
        cls,
        genes_path: Path,
        patients_path: Path,
        hpo_path: Optional[Path] = None,
        results_dir: Optional[Path] = None,
        **overrides,
    ) -> "CompareConfig":
        """Build a config, filling unset paths from ``.env`` / the environment.

        Args:
            genes_path: Gene-group file
            patients_path: Patient file or directory of patient files
            hpo_path: HPO OBO file; falls back to ``PHENOCOMPARE_HPO_PATH``
            results_dir: Output directory; falls back to
                ``PHENOCOMPARE_RESULTS_DIR`` and then ``./results``
            **overrides: Any other ``CompareConfig`` field
        """
        load_dotenv()

        if hpo_path is None:
            env_hpo = os.environ.get(ENV_HPO_PATH)
            hpo_path = Path(env_hpo) if env_hpo else None
        if results_dir is None:
            results_dir = Path(os.environ.get(ENV_RESULTS_DIR, str(DEFAULT_RESULTS_DIR)))

        return cls(
            genes_path=genes_path,
            patients_path=patients_path,
            hpo_path=hpo_path,
            results_dir=results_dir,
            **overrides,
        )
