"""Gene groups: named sets of gene symbols that define patient cohorts.

The gene-group file lists one group per line, gene symbols separated by
whitespace. Blank lines and lines starting with ``#`` are ignored::

    # early
    PIGA PIGC PIGH PIGM PIGO
    # mid
    PIGV PIGW
    # late
    PGAP1 PGAP2 PIGG
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from phenocompare.config import COMMENT_PREFIX

logger = logging.getLogger(__name__)


class EmptyGroupError(ValueError):
    """Raised when a gene-group file or a patient cohort has no members."""


@dataclass(frozen=True)
class GeneGroup:
    """A named, immutable set of gene symbols."""

    name: str
    genes: FrozenSet[str]

    def contains(self, gene: str) -> bool:
        return gene in self.genes

    def is_empty(self) -> bool:
        return not self.genes

    def __contains__(self, gene: object) -> bool:
        return gene in self.genes

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.genes))

    def __str__(self) -> str:
        return ", ".join(sorted(self.genes))


class GeneGroups:
    """Ordered collection of gene groups, built once and never mutated.

    A gene listed in more than one group belongs to the first group that
    lists it; such genes are reported when the groups are built.
    """

    def __init__(self, groups: Iterable[GeneGroup]) -> None:
        self._groups: List[GeneGroup] = list(groups)
        if not self._groups:
            raise EmptyGroupError("No gene groups given")
        self._index: Dict[str, int] = {}
        for i, group in enumerate(self._groups):
            for gene in group.genes:
                if gene in self._index:
                    logger.warning(
                        "Gene %s listed in %s and %s; using %s",
                        gene,
                        self._groups[self._index[gene]].name,
                        group.name,
                        self._groups[self._index[gene]].name,
                    )
                    continue
                self._index[gene] = i

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "<lines>") -> "GeneGroups":
        """Build groups from gene-group file lines.

        Raises:
            EmptyGroupError: if no line defines a group.
        """
        groups: List[GeneGroup] = []
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith(COMMENT_PREFIX):
                continue
            groups.append(
                GeneGroup(name=f"Group{len(groups) + 1}", genes=frozenset(stripped.split()))
            )
        if not groups:
            raise EmptyGroupError(f"No gene groups found in file {source}")
        return cls(groups)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "GeneGroups":
        """Read a gene-group file.

        Raises:
            FileNotFoundError: if the file does not exist.
            EmptyGroupError: if the file holds only comments and blank lines.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Cannot find genes file {path}")
        with path.open("r", encoding="utf-8") as fh:
            gene_groups = cls.from_lines(fh, source=str(path))
        logger.info(
            "Read %d gene groups from %s (%s)",
            len(gene_groups),
            path,
            ", ".join(f"{g.name}: {len(g)} genes" for g in gene_groups),
        )
        return gene_groups

    def group(self, index: int) -> Optional[GeneGroup]:
        """Return the group at ``index``, or None if out of range."""
        if 0 <= index < len(self._groups):
            return self._groups[index]
        return None

    def which_group(self, gene: str) -> int:
        """Index of the group containing ``gene``, or -1 if none does."""
        return self._index.get(gene, -1)

    @property
    def names(self) -> List[str]:
        return [g.name for g in self._groups]

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[GeneGroup]:
        return iter(self._groups)
