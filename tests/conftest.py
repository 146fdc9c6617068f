"""Shared fixtures: a small HPO hierarchy and a three-cohort patient dataset."""

from pathlib import Path

import pytest

from phenocompare.model import Patient, TermId
from phenocompare.ontology import MappingOntology

DATA_DIR = Path(__file__).resolve().parent / "data"

ALL = TermId.parse("HP:0000001")
PHENOTYPIC_ABNORMALITY = TermId.parse("HP:0000118")
NERVOUS = TermId.parse("HP:0000707")
NEURODEV_DELAY = TermId.parse("HP:0012758")
GLOBAL_DEV_DELAY = TermId.parse("HP:0001263")
SEIZURE = TermId.parse("HP:0001250")
HYPOTONIA = TermId.parse("HP:0001252")
EYE = TermId.parse("HP:0000478")
HYPERTELORISM = TermId.parse("HP:0000316")
METABOLISM = TermId.parse("HP:0001939")
ALK_PHOS = TermId.parse("HP:0003155")
CLEFT_PALATE = TermId.parse("HP:0000175")

PARENTS = {
    PHENOTYPIC_ABNORMALITY: [ALL],
    NERVOUS: [PHENOTYPIC_ABNORMALITY],
    NEURODEV_DELAY: [NERVOUS],
    GLOBAL_DEV_DELAY: [NEURODEV_DELAY, NERVOUS],
    SEIZURE: [NERVOUS],
    HYPOTONIA: [NERVOUS],
    EYE: [PHENOTYPIC_ABNORMALITY],
    HYPERTELORISM: [EYE],
    METABOLISM: [PHENOTYPIC_ABNORMALITY],
    ALK_PHOS: [METABOLISM],
    CLEFT_PALATE: [PHENOTYPIC_ABNORMALITY],
}

NAMES = {
    SEIZURE: "Seizure",
    HYPOTONIA: "Hypotonia",
    HYPERTELORISM: "Hypertelorism",
    CLEFT_PALATE: "Cleft palate",
}

GENE_LINES = [
    "# early",
    "PIGA PIGM PIGO",
    "# mid",
    "PIGV\tPIGW",
    "# late",
    "PGAP2 PIGG",
]

COHORT_SIZE = 20
# Patients per cohort carrying Seizure: expected 10 in every cell, chi2 = 25.6.
SEIZURE_COUNTS = {"E": 18, "M": 10, "L": 2}
HYPERTELORISM_PER_COHORT = 8
CLEFT_PALATE_LATE = 3
UNKNOWN_TERM = "HP:9999999"


@pytest.fixture
def ontology():
    return MappingOntology(PARENTS, NAMES)


@pytest.fixture
def hpo_obo_path():
    return DATA_DIR / "hp_mini.obo"


def make_patient(pid, gene, *terms):
    return Patient(pid=pid, gene=gene, terms=frozenset(TermId.parse(t) for t in terms))


def _cohort_records():
    genes = {"E": "PIGO", "M": "PIGV", "L": "PIGG"}
    records = []
    for prefix, gene in genes.items():
        for i in range(COHORT_SIZE):
            terms = [HYPOTONIA.curie]
            if i < SEIZURE_COUNTS[prefix]:
                terms.append(SEIZURE.curie)
            if i < HYPERTELORISM_PER_COHORT:
                terms.append(HYPERTELORISM.curie)
            if prefix == "L" and i >= COHORT_SIZE - CLEFT_PALATE_LATE:
                terms.append(CLEFT_PALATE.curie)
            if prefix == "E" and i == 0:
                terms.append(UNKNOWN_TERM)
            pid = f"{prefix}{i + 1:02d}"
            records.append("\t".join([pid, gene, "", "", "", ";".join(terms)]))
    return records


@pytest.fixture
def cohort_files(tmp_path):
    """Gene-group file and patient file for three cohorts of 20 patients.

    The patient file also holds one patient with a gene outside every
    group and one record without phenotype terms.
    """
    genes_path = tmp_path / "genes.txt"
    genes_path.write_text("\n".join(GENE_LINES) + "\n", encoding="utf-8")

    lines = ["#pid\tgene\tpubmed\tsummary\tdescription\tterms"]
    lines.extend(_cohort_records())
    lines.append("X01\tBRCA1\t\t\t\tHP:0001250;HP:0001252")
    lines.append("X02\tPIGA\t12345\tno terms\t\t")
    patients_path = tmp_path / "patients.tsv"
    patients_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return genes_path, patients_path
