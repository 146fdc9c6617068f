"""Phenotype propagation up the ontology and per-term cohort aggregation.

A patient annotated with a specific term also has every more general
term above it. For each patient the annotated terms are closed under the
ancestor relation, and the patient is then counted once under every term
in that closure for the patient's cohort.
"""

import logging
from collections import Counter
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

import pandas as pd

from phenocompare.model import Patient, PatientGroup, TermId
from phenocompare.ontology import AncestorProvider, UnknownTermError

logger = logging.getLogger(__name__)


def ancestor_closure(
    terms: Iterable[TermId],
    ontology: AncestorProvider,
    unresolved: Optional[Set[TermId]] = None,
) -> FrozenSet[TermId]:
    """Union of the ancestors of ``terms``, each term included.

    Terms the ontology cannot resolve are skipped and, when given, added
    to ``unresolved``; the remaining terms are still closed.
    """
    closure: Set[TermId] = set()
    for term in terms:
        if term in closure:
            continue
        try:
            closure.update(ontology.ancestors(term))
        except UnknownTermError:
            if unresolved is not None:
                unresolved.add(term)
    return frozenset(closure)


class SubgroupTable:
    """For each observed term, the patients of every cohort carrying it.

    Rows are created on first observation; a term never observed has
    implicit zero counts and is not stored.
    """

    def __init__(self, group_names: Sequence[str]) -> None:
        if not group_names:
            raise ValueError("SubgroupTable needs at least one group")
        self.group_names: List[str] = list(group_names)
        self._rows: Dict[TermId, List[PatientGroup]] = {}
        self.unresolved: Counter = Counter()

    @property
    def n_groups(self) -> int:
        return len(self.group_names)

    def add(self, term: TermId, group_index: int, patient: Patient) -> None:
        row = self._rows.get(term)
        if row is None:
            row = [PatientGroup(name=name) for name in self.group_names]
            self._rows[term] = row
        row[group_index].add(patient)

    def counts(self, term: TermId) -> List[int]:
        """Per-cohort patient counts for ``term`` (all zero if never observed)."""
        row = self._rows.get(term)
        if row is None:
            return [0] * self.n_groups
        return [len(g) for g in row]

    def subgroups(self, term: TermId) -> List[PatientGroup]:
        """Per-cohort patients carrying ``term`` (empty groups if never observed)."""
        row = self._rows.get(term)
        if row is None:
            return [PatientGroup(name=name) for name in self.group_names]
        return row

    def terms(self) -> List[TermId]:
        return sorted(self._rows)

    def to_frame(self) -> pd.DataFrame:
        """Counts as a DataFrame indexed by term CURIE, one column per cohort."""
        terms = self.terms()
        return pd.DataFrame(
            [self.counts(t) for t in terms],
            index=pd.Index([t.curie for t in terms], name="term"),
            columns=self.group_names,
        )

    def __contains__(self, term: object) -> bool:
        return term in self._rows

    def __len__(self) -> int:
        return len(self._rows)


def aggregate(groups: Sequence[PatientGroup], ontology: AncestorProvider) -> SubgroupTable:
    """Build the subgroup table for all patients of all cohorts.

    Args:
        groups: Patient cohorts, in cohort order
        ontology: Ancestor provider used to close each patient's terms

    Returns:
        SubgroupTable whose ``unresolved`` counter records, per annotated
        term the ontology could not resolve, how many patients carried it.
    """
    table = SubgroupTable([g.name for g in groups])
    for index, group in enumerate(groups):
        for patient in group:
            unresolved: Set[TermId] = set()
            closure = ancestor_closure(patient.terms, ontology, unresolved)
            for term in unresolved:
                if term not in table.unresolved:
                    logger.warning("Term %s not found in ontology; skipping it", term)
                table.unresolved[term] += 1
            for term in closure:
                table.add(term, index, patient)

    logger.info(
        "Aggregated %d patients over %d terms (%d unresolved annotations)",
        sum(len(g) for g in groups),
        len(table),
        sum(table.unresolved.values()),
    )
    return table
