from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from phenocompare.cohorts import UnknownGeneError
from phenocompare.config import (
    MIN_EXPECTED_COUNT,
    SIGNIFICANCE_LEVEL,
    SIMILARITY_METHODS,
    UNKNOWN_GENE_POLICIES,
    CompareConfig,
)
from phenocompare.genes import EmptyGroupError
from phenocompare.ontology import OntologyFormatError
from phenocompare.pipeline import run_comparison, write_reports


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool) -> None:
    """Compare HPO phenotype prevalence across gene-defined patient cohorts."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


@cli.command("compare")
@click.option(
    "--genes",
    "-g",
    "genes_path",
    type=click.Path(path_type=Path),
    required=True,
    help="Gene-group file: one whitespace-separated gene list per line.",
)
@click.option(
    "--patients",
    "-p",
    "patients_path",
    type=click.Path(path_type=Path),
    required=True,
    help="Patient file, or directory of *.tab / *.tsv patient files.",
)
@click.option(
    "--hpo",
    "hpo_path",
    type=click.Path(path_type=Path),
    default=None,
    help="HPO ontology in OBO format. Defaults to $PHENOCOMPARE_HPO_PATH.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for report files. Defaults to $PHENOCOMPARE_RESULTS_DIR or ./results.",
)
@click.option(
    "--similarity",
    "similarity_method",
    type=click.Choice(SIMILARITY_METHODS),
    default="overlap",
    show_default=True,
    help="Patient similarity measure for the dissimilarity matrix.",
)
@click.option(
    "--alpha",
    type=click.FloatRange(0.0, 1.0, min_open=True),
    default=SIGNIFICANCE_LEVEL,
    show_default=True,
    help="Significance level for Bonferroni-corrected p-values.",
)
@click.option(
    "--min-expected",
    type=click.FloatRange(min=0.0),
    default=MIN_EXPECTED_COUNT,
    show_default=True,
    help="Smallest expected cell count for a term to be tested.",
)
@click.option(
    "--on-unknown-gene",
    type=click.Choice(UNKNOWN_GENE_POLICIES),
    default="skip",
    show_default=True,
    help="Skip patients whose gene is in no group, or stop with an error.",
)
@click.option(
    "--no-term-details",
    is_flag=True,
    help="Do not write per-term patient detail files.",
)
def compare_command(
    genes_path: Path,
    patients_path: Path,
    hpo_path: Optional[Path],
    output_dir: Optional[Path],
    similarity_method: str,
    alpha: float,
    min_expected: float,
    on_unknown_gene: str,
    no_term_details: bool,
) -> None:
    """Find HPO terms whose prevalence differs between patient cohorts."""
    config = CompareConfig.from_env(
        genes_path=genes_path,
        patients_path=patients_path,
        hpo_path=hpo_path,
        results_dir=output_dir,
        similarity_method=similarity_method,
        alpha=alpha,
        min_expected=min_expected,
        on_unknown_gene=on_unknown_gene,
        write_term_details=not no_term_details,
    )

    try:
        result = run_comparison(config)
    except (FileNotFoundError, OntologyFormatError, EmptyGroupError, UnknownGeneError) as exc:
        raise click.ClickException(str(exc)) from exc

    paths = write_reports(result, config.results_dir, term_details=config.write_term_details)

    stats = result.get_stats()
    click.echo("\n" + "=" * 60)
    click.echo("COMPARISON SUMMARY")
    click.echo("=" * 60)
    for group, size in zip(result.gene_groups, result.group_sizes):
        click.echo(f"{group.name}: {size} patients ({group})")
    click.echo(f"Rejected patients: {stats['patients_rejected']}")
    click.echo(
        f"Terms: {stats['terms_observed']} observed, {stats['terms_tested']} tested, "
        f"{stats['terms_significant']} significant"
    )
    if result.warnings:
        click.echo(f"⚠ {len(result.warnings)} warning(s):", err=True)
        for warning in result.warnings:
            click.echo(f"  - {warning}", err=True)
    click.echo(f"\nReports written to {config.results_dir} ({len(paths)} files)")
    click.echo("=" * 60)


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
