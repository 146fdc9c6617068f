"""Assignment of patients to cohorts by the gene group of their mutated gene."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from phenocompare.config import UNKNOWN_GENE_POLICIES
from phenocompare.genes import EmptyGroupError, GeneGroups
from phenocompare.model import Patient, PatientGroup

logger = logging.getLogger(__name__)


class UnknownGeneError(LookupError):
    """Raised when a patient's gene is in no gene group and the policy is ``error``."""


@dataclass
class CohortAssignment:
    """Patient groups in gene-group order plus the patients that were rejected."""

    groups: List[PatientGroup]
    rejected: List[Patient] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def group_sizes(self) -> List[int]:
        return [len(g) for g in self.groups]

    def all_patients(self) -> List[Patient]:
        """All assigned patients: group 0 members, then group 1, and so on."""
        return [p for group in self.groups for p in group]

    def require_nonempty(self) -> None:
        """Raise EmptyGroupError if any cohort has no patients."""
        empty = [g.name for g in self.groups if g.is_empty()]
        if empty:
            raise EmptyGroupError(
                f"No patients assigned to {', '.join(empty)}; "
                "cannot compare phenotypes across an empty group"
            )


def assign_cohorts(
    patients: Iterable[Patient],
    gene_groups: GeneGroups,
    on_unknown_gene: str = "skip",
) -> CohortAssignment:
    """Sort patients into one PatientGroup per gene group.

    Args:
        patients: Parsed patients
        gene_groups: Gene groups defining the cohorts
        on_unknown_gene: ``"skip"`` to reject the patient with a warning,
            ``"error"`` to raise UnknownGeneError

    Returns:
        CohortAssignment; groups may still be empty, see ``require_nonempty``.
    """
    if on_unknown_gene not in UNKNOWN_GENE_POLICIES:
        raise ValueError(f"Unknown gene policy {on_unknown_gene!r}")

    assignment = CohortAssignment(groups=[PatientGroup(name=name) for name in gene_groups.names])
    for patient in patients:
        index = gene_groups.which_group(patient.gene)
        if index < 0:
            message = f"Patient {patient.pid!r}: gene {patient.gene} is not in any gene group"
            if on_unknown_gene == "error":
                raise UnknownGeneError(message)
            logger.warning("Skipping %s", message)
            assignment.rejected.append(patient)
            assignment.warnings.append(message)
            continue
        assignment.groups[index].add(patient)

    logger.info(
        "Assigned patients to cohorts: %s (%d rejected)",
        ", ".join(f"{g.name}={len(g)}" for g in assignment.groups),
        len(assignment.rejected),
    )
    return assignment
