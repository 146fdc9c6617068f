"""Patient record parsing.

Patient files are tab-separated, one record per line::

    pid  gene  pubmed_id  summary  description  HP:0001250;HP:0001263

Only the patient id, the gene and the term list are required. Terms are
``PREFIX:local`` identifiers separated by semicolons. Blank lines and
lines starting with ``#`` are skipped. A malformed record is reported and
skipped; it never stops the rest of the file from loading.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Union

from phenocompare.config import COMMENT_PREFIX, PATIENT_FILE_SUFFIXES
from phenocompare.model import Patient, TermId

logger = logging.getLogger(__name__)

# Column positions in a patient record
PID_COLUMN = 0
GENE_COLUMN = 1
PUBMED_COLUMN = 2
SUMMARY_COLUMN = 3
TERMS_COLUMN = 5

TERM_SEPARATOR = ";"


class PatientFormatError(ValueError):
    """Raised when a patient record cannot be parsed."""


def _optional(fields: List[str], index: int) -> Optional[str]:
    if index < len(fields):
        value = fields[index].strip()
        return value or None
    return None


def parse_terms(text: str) -> Set[TermId]:
    """Parse a semicolon-separated term list, skipping malformed tokens."""
    terms: Set[TermId] = set()
    for token in text.split(TERM_SEPARATOR):
        token = token.strip()
        if not token:
            continue
        try:
            terms.add(TermId.parse(token))
        except ValueError:
            logger.warning("Could not parse term %r: no PREFIX:id form", token)
    return terms


def parse_patient_line(line: str) -> Patient:
    """Build a Patient from one tab-separated record.

    Raises:
        PatientFormatError: if the id, gene or term list is missing or the
            term list holds no valid term.
    """
    fields = line.rstrip("\r\n").split("\t")
    pid = fields[PID_COLUMN].strip() if fields else ""
    gene = _optional(fields, GENE_COLUMN) or ""
    terms = parse_terms(fields[TERMS_COLUMN]) if len(fields) > TERMS_COLUMN else set()

    if not pid or not gene or not terms:
        missing = [
            name
            for name, value in (("patient id", pid), ("gene", gene), ("terms", terms))
            if not value
        ]
        raise PatientFormatError(
            f"Cannot parse patient record (missing {', '.join(missing)}): {line.strip()!r}"
        )

    return Patient(
        pid=pid,
        gene=gene,
        terms=frozenset(terms),
        pubmed_id=_optional(fields, PUBMED_COLUMN),
        summary=_optional(fields, SUMMARY_COLUMN),
    )


@dataclass
class PatientFileResult:
    """Patients read from one or more files plus per-record warnings."""

    patients: List[Patient] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "PatientFileResult") -> None:
        self.patients.extend(other.patients)
        self.warnings.extend(other.warnings)


def read_patient_file(path: Union[str, Path]) -> PatientFileResult:
    """Read every record of a patient file.

    Raises:
        FileNotFoundError: if ``path`` is not a file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Cannot find patient file {path}")

    result = PatientFileResult()
    # Each line is decoded on its own; an undecodable line is a bad record.
    with path.open("rb") as fh:
        for lineno, raw in enumerate(fh, start=1):
            try:
                line = raw.decode("utf-8")
                if not line.strip() or line.startswith(COMMENT_PREFIX):
                    continue
                result.patients.append(parse_patient_line(line))
            except UnicodeDecodeError as exc:
                message = f"{path}:{lineno}: Cannot decode patient record as UTF-8 ({exc.reason})"
                logger.warning("Skipping record: %s", message)
                result.warnings.append(message)
            except PatientFormatError as exc:
                message = f"{path}:{lineno}: {exc}"
                logger.warning("Skipping record: %s", message)
                result.warnings.append(message)

    logger.info(
        "Read %d patients from %s (%d skipped)",
        len(result.patients),
        path,
        len(result.warnings),
    )
    return result


def read_patients(path: Union[str, Path]) -> PatientFileResult:
    """Read patients from a file, or from every ``*.tab``/``*.tsv`` file in a directory.

    Directory entries are read in name order.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
    """
    path = Path(path)
    if path.is_file():
        return read_patient_file(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Cannot find patient file or directory {path}")

    result = PatientFileResult()
    files = sorted(
        p for p in path.iterdir()
        if p.is_file() and p.suffix.lower() in PATIENT_FILE_SUFFIXES
    )
    if not files:
        logger.warning("No patient files (%s) in %s", ", ".join(PATIENT_FILE_SUFFIXES), path)
    for patient_file in files:
        result.merge(read_patient_file(patient_file))
    return result
