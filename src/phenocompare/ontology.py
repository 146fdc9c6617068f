"""Ontology adapters exposing ancestor queries over a term DAG.

The comparison engine only needs two things from an ontology: the set of
ancestors of a term (the term itself included) and a human-readable term
name. ``AncestorProvider`` captures that contract; ``ProntoOntology``
implements it on top of an OBO file parsed by ``pronto`` and
``MappingOntology`` implements it over an in-memory parent map.

Usage::

    from phenocompare.ontology import ProntoOntology
    from phenocompare.model import TermId

    hpo = ProntoOntology.from_obo("hp.obo")
    hpo.ancestors(TermId.parse("HP:0001250"))
"""

import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Protocol, Set, Union

import pronto

from phenocompare.model import TermId

logger = logging.getLogger(__name__)


class UnknownTermError(LookupError):
    """Raised when a term cannot be resolved in the ontology."""

    def __init__(self, term: TermId, reason: str = "not found in ontology"):
        super().__init__(f"{term}: {reason}")
        self.term = term


class OntologyFormatError(ValueError):
    """Raised when an ontology file cannot be parsed."""


class AncestorProvider(Protocol):
    """Read-only view of an ontology used by the comparison engine."""

    def ancestors(self, term: TermId) -> FrozenSet[TermId]:
        """Return every term reachable upward from ``term``, including itself.

        An alternate or replaced id stands for its primary term, so the
        result holds the primary id rather than ``term``.

        Raises:
            UnknownTermError: if ``term`` is not part of the ontology.
        """
        ...

    def term_name(self, term: TermId) -> str:
        """Return the label of ``term`` (the CURIE if it has no label)."""
        ...

    def __contains__(self, term: object) -> bool:
        ...


class ProntoOntology:
    """``AncestorProvider`` backed by a ``pronto.Ontology``.

    Alternate ids are resolved to their primary term. An obsolete term with
    a single ``replaced_by`` target is resolved to that target; any other
    obsolete term is treated as unknown. Ancestor sets are memoised per
    instance.

    Args:
        ontology: A loaded ``pronto.Ontology``.
    """

    def __init__(self, ontology: pronto.Ontology) -> None:
        self._ontology = ontology
        self._alt_ids: Dict[str, str] = {}
        for term in ontology.terms():
            for alt_id in term.alternate_ids:
                self._alt_ids[alt_id] = term.id
        self._cache: Dict[TermId, FrozenSet[TermId]] = {}

    @classmethod
    def from_obo(cls, path: Union[str, Path]) -> "ProntoOntology":
        """Parse an OBO file.

        Raises:
            FileNotFoundError: if ``path`` does not exist.
            OntologyFormatError: if the file is not a readable ontology.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Cannot find ontology file {path}")
        logger.info("Reading ontology from %s", path)
        try:
            ontology = pronto.Ontology(str(path))
        except (SyntaxError, ValueError) as exc:
            raise OntologyFormatError(f"Cannot parse ontology file {path}: {exc}") from exc
        logger.info("Loaded %d terms", len(ontology.terms()))
        return cls(ontology)

    # -----------------------------------------------------------------
    # AncestorProvider
    # -----------------------------------------------------------------

    def ancestors(self, term: TermId) -> FrozenSet[TermId]:
        # Alternate and obsolete ids map onto the primary term's ancestors.
        resolved = self._resolve(term)
        primary = TermId.parse(resolved.id)
        cached = self._cache.get(primary)
        if cached is None:
            cached = frozenset(
                TermId.parse(t.id) for t in resolved.superclasses(with_self=True)
            )
            self._cache[primary] = cached
        return cached

    def term_name(self, term: TermId) -> str:
        try:
            resolved = self._resolve(term)
        except UnknownTermError:
            return term.curie
        return resolved.name or term.curie

    def __contains__(self, term: object) -> bool:
        if not isinstance(term, TermId):
            return False
        try:
            self._resolve(term)
        except UnknownTermError:
            return False
        return True

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _resolve(self, term: TermId) -> pronto.Term:
        curie = self._alt_ids.get(term.curie, term.curie)
        try:
            resolved = self._ontology.get_term(curie)
        except KeyError:
            raise UnknownTermError(term) from None

        if resolved.obsolete:
            replacements = list(resolved.replaced_by)
            if len(replacements) != 1:
                raise UnknownTermError(term, "obsolete with no unique replacement")
            logger.debug("%s is obsolete, using %s", term, replacements[0].id)
            resolved = replacements[0]
        return resolved


class MappingOntology:
    """``AncestorProvider`` over an explicit ``term -> parents`` mapping.

    Every term named as a key or as a parent is part of the ontology; a
    term with no entry is a root. Useful for small curated hierarchies and
    for tests.
    """

    def __init__(
        self,
        parents: Mapping[TermId, Iterable[TermId]],
        names: Optional[Mapping[TermId, str]] = None,
    ) -> None:
        self._parents: Dict[TermId, FrozenSet[TermId]] = {
            term: frozenset(ps) for term, ps in parents.items()
        }
        self._terms: Set[TermId] = set(self._parents)
        for ps in self._parents.values():
            self._terms.update(ps)
        self._names: Dict[TermId, str] = dict(names or {})
        self._cache: Dict[TermId, FrozenSet[TermId]] = {}

    def ancestors(self, term: TermId) -> FrozenSet[TermId]:
        if term not in self._terms:
            raise UnknownTermError(term)
        cached = self._cache.get(term)
        if cached is not None:
            return cached

        seen: Set[TermId] = {term}
        stack = [term]
        while stack:
            current = stack.pop()
            for parent in self._parents.get(current, ()):
                if parent not in seen:
                    seen.add(parent)
                    stack.append(parent)
        result = frozenset(seen)
        self._cache[term] = result
        return result

    def term_name(self, term: TermId) -> str:
        return self._names.get(term, term.curie)

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def __len__(self) -> int:
        return len(self._terms)
