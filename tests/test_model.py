"""Unit tests for phenocompare.model value types."""

import pytest

from phenocompare.model import Patient, PatientGroup, TermId


# ---------------------------------------------------------------------------
# TermId
# ---------------------------------------------------------------------------

class TestTermId:

    def test_parse(self):
        t = TermId.parse("HP:0001250")
        assert t.prefix == "HP"
        assert t.local_id == "0001250"
        assert str(t) == "HP:0001250"

    def test_parse_strips_whitespace(self):
        assert TermId.parse("  HP:0001250\n") == TermId("HP", "0001250")

    @pytest.mark.parametrize("text", ["0001250", "HP:", ":0001250", ""])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            TermId.parse(text)

    def test_order_is_lexicographic_on_curie(self):
        terms = [TermId.parse(t) for t in ["HP:0001252", "HP:0000118", "MP:0000001", "HP:0001250"]]
        assert [t.curie for t in sorted(terms)] == [
            "HP:0000118",
            "HP:0001250",
            "HP:0001252",
            "MP:0000001",
        ]

    def test_hashable(self):
        assert len({TermId.parse("HP:0001250"), TermId("HP", "0001250")}) == 1


# ---------------------------------------------------------------------------
# Patient
# ---------------------------------------------------------------------------

class TestPatient:

    def _terms(self, *curies):
        return frozenset(TermId.parse(c) for c in curies)

    def test_equality_uses_all_fields(self):
        a = Patient("P1", "PIGV", self._terms("HP:0001250", "HP:0000316"))
        b = Patient("P1", "PIGV", self._terms("HP:0000316", "HP:0001250"))
        c = Patient("P1", "PIGV", self._terms("HP:0001250"))
        d = Patient("P1", "PIGV", self._terms("HP:0001250", "HP:0000316"), pubmed_id="123")
        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert a != d

    def test_not_equal_to_other_types(self):
        p = Patient("P1", "PIGV", self._terms("HP:0001250"))
        assert p != [1, 2, 3]

    def test_sorted_terms(self):
        p = Patient("P1", "PIGV", self._terms("HP:0001250", "HP:0000316"))
        assert [t.curie for t in p.sorted_terms()] == ["HP:0000316", "HP:0001250"]

    def test_immutable(self):
        p = Patient("P1", "PIGV", self._terms("HP:0001250"))
        with pytest.raises(AttributeError):
            p.gene = "PIGO"


# ---------------------------------------------------------------------------
# PatientGroup
# ---------------------------------------------------------------------------

class TestPatientGroup:

    def test_add_and_len(self):
        group = PatientGroup(name="Group1")
        assert group.is_empty()
        p = Patient("P1", "PIGO", frozenset({TermId.parse("HP:0001250")}))
        group.add(p)
        assert len(group) == 1
        assert p in group
        assert list(group) == [p]
