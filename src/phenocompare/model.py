"""Core value types shared by every stage of a phenotype comparison.

Pure dataclasses: ontology term identifiers, patients and the groups
patients are sorted into. Nothing here touches the filesystem or the
ontology.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import FrozenSet, Iterable, Iterator, List, Optional


@total_ordering
@dataclass(frozen=True)
class TermId:
    """Identifier of one ontology node, e.g. ``HP:0001250``.

    Ordering is lexicographic on the canonical ``PREFIX:local`` string so
    that iteration over sorted terms is stable across runs.
    """

    prefix: str
    local_id: str

    @classmethod
    def parse(cls, text: str) -> "TermId":
        """Parse ``PREFIX:local`` (surrounding whitespace is ignored).

        Raises:
            ValueError: if there is no colon or either side is empty.
        """
        value = text.strip()
        prefix, sep, local_id = value.partition(":")
        if not sep or not prefix or not local_id:
            raise ValueError(f"Not a term identifier: {text!r}")
        return cls(prefix=prefix, local_id=local_id)

    @property
    def curie(self) -> str:
        return f"{self.prefix}:{self.local_id}"

    def __str__(self) -> str:
        return self.curie

    def __lt__(self, other: "TermId") -> bool:
        if not isinstance(other, TermId):
            return NotImplemented
        return self.curie < other.curie


@dataclass(frozen=True)
class Patient:
    """One patient record: the mutated gene and the directly observed terms.

    Two patients are equal when id, gene, provenance fields and the term
    set all match.
    """

    pid: str
    gene: str
    terms: FrozenSet[TermId]
    pubmed_id: Optional[str] = None
    summary: Optional[str] = None

    def sorted_terms(self) -> List[TermId]:
        """Return annotated terms in canonical order."""
        return sorted(self.terms)

    def __str__(self) -> str:
        terms = ", ".join(t.curie for t in self.sorted_terms())
        return f"Patient(id={self.pid!r}, gene={self.gene}, terms=[{terms}])"


@dataclass
class PatientGroup:
    """Patients whose mutated gene belongs to one gene group."""

    name: str
    members: List[Patient] = field(default_factory=list)

    def add(self, patient: Patient) -> None:
        self.members.append(patient)

    def extend(self, patients: Iterable[Patient]) -> None:
        self.members.extend(patients)

    def is_empty(self) -> bool:
        return not self.members

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Patient]:
        return iter(self.members)

    def __contains__(self, patient: object) -> bool:
        return patient in self.members
