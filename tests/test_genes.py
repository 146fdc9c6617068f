"""Tests for gene-group loading and lookup."""

import logging

import pytest

from conftest import DATA_DIR
from phenocompare.genes import EmptyGroupError, GeneGroup, GeneGroups


class TestGeneGroupsFromFile:

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError, match="Cannot find genes file"):
            GeneGroups.from_file(DATA_DIR / "missingGenes.tsv")

    def test_only_comments(self):
        with pytest.raises(EmptyGroupError, match="No gene groups found in file"):
            GeneGroups.from_file(DATA_DIR / "badGenes.txt")

    def test_normal_file(self):
        ggs = GeneGroups.from_file(DATA_DIR / "goodGenes.txt")
        assert len(ggs) == 3
        early, mid, late = ggs.group(0), ggs.group(1), ggs.group(2)
        assert ggs.which_group("PIGO") == 0
        assert ggs.which_group("PIGV") == 1
        assert ggs.which_group("PIGG") == 2
        assert early.contains("PIGM")
        assert not early.contains("PIGV")
        assert late.contains("PIGG")
        # mid line mixes tabs and spaces
        assert set(mid.genes) == {"PIGV", "PIGW", "PIGN"}

    def test_unknown_gene(self):
        ggs = GeneGroups.from_file(DATA_DIR / "goodGenes.txt")
        assert ggs.which_group("BRCA1") == -1

    def test_group_out_of_range(self):
        ggs = GeneGroups.from_file(DATA_DIR / "goodGenes.txt")
        assert ggs.group(3) is None
        assert ggs.group(-1) is None

    def test_names_follow_line_order(self):
        ggs = GeneGroups.from_file(DATA_DIR / "goodGenes.txt")
        assert ggs.names == ["Group1", "Group2", "Group3"]


class TestGeneGroupsFromLines:

    def test_three_lines_give_three_disjoint_groups(self):
        lines = ["PIGA PIGO", "PIGV", "PGAP2  PIGG\tPIGT"]
        ggs = GeneGroups.from_lines(lines)
        assert len(ggs) == 3
        for group, line in zip(ggs, lines):
            for gene in line.split():
                assert group.contains(gene)
        all_genes = [gene for group in ggs for gene in group]
        assert len(all_genes) == len(set(all_genes)) == 6

    def test_first_group_wins_for_duplicate_gene(self, caplog):
        with caplog.at_level(logging.WARNING):
            ggs = GeneGroups.from_lines(["PIGA PIGO", "PIGO PIGV"])
        assert ggs.which_group("PIGO") == 0
        assert "PIGO" in caplog.text

    def test_blank_and_comment_lines_skipped(self):
        ggs = GeneGroups.from_lines(["", "# comment", "PIGA", "   ", "PIGV"])
        assert len(ggs) == 2


class TestGeneGroup:

    def test_str_is_sorted(self):
        g = GeneGroup(name="Group1", genes=frozenset({"PIGO", "PIGA", "PIGM"}))
        assert str(g) == "PIGA, PIGM, PIGO"
        assert len(g) == 3
        assert "PIGA" in g
