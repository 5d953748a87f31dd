"""
Tests for genotype interpretation, impact partitioning, category
completeness and trait scoring against the bundled reference table.
"""

import pytest

from app.services.insights.interpreter import GenotypeInterpreter, create_interpreter, normalize_gene_name
from app.services.insights.models import Impact, MarkerRecord, UNKNOWN_JUDGMENT
from app.services.insights.reference_loader import TraitPanel, load_reference_table


@pytest.fixture(scope="module")
def interpreter():
    return GenotypeInterpreter(load_reference_table())


class TestInterpret:

    def test_actn3_rr_power(self, interpreter):
        judgment = interpreter.interpret("Power and Strength", "ACTN3", "RR")
        assert judgment.impact == Impact.BENEFICIAL
        assert judgment.color_hint == "green"

    def test_challenging_genotype(self, interpreter):
        judgment = interpreter.interpret("Mental Health", "COMT", "AA")
        assert judgment.impact == Impact.CHALLENGING

    def test_default_wildcard(self, interpreter):
        """GSK3B only defines a default entry; any genotype falls back to it."""
        judgment = interpreter.interpret("Core Sleep markers", "GSK3B", "AG")
        assert judgment.impact == Impact.NEUTRAL
        assert judgment.color_hint == "blue"

    def test_unknown_genotype_without_default(self, interpreter):
        assert interpreter.interpret("Power and Strength", "ACTN3", "ZZ") == UNKNOWN_JUDGMENT

    def test_unknown_gene_and_category(self, interpreter):
        assert interpreter.interpret("Power and Strength", "NOPE1", "AA") == UNKNOWN_JUDGMENT
        assert interpreter.interpret("Nonexistent", "ACTN3", "RR") == UNKNOWN_JUDGMENT

    def test_unknown_sentinel_text(self):
        assert UNKNOWN_JUDGMENT.impact == Impact.UNKNOWN
        assert UNKNOWN_JUDGMENT.description == "Analysis not available"
        assert UNKNOWN_JUDGMENT.color_hint == "gray"

    def test_pure(self, interpreter):
        first = interpreter.interpret("Endurance Capability", "ACE", "II")
        second = interpreter.interpret("Endurance Capability", "ACE", "II")
        assert first == second

    def test_same_gene_differs_by_category(self, interpreter):
        """AGT TT is challenging for cardiovascular health but beneficial for strength."""
        assert interpreter.interpret("Cardiovascular markers", "AGT", "TT").impact == Impact.CHALLENGING
        assert interpreter.interpret("Power and Strength", "AGT", "TT").impact == Impact.BENEFICIAL


class TestInterpretAny:

    def test_first_category_in_table_order(self, interpreter):
        # COMT appears first under Core Sleep markers
        judgment = interpreter.interpret_any("COMT", "GG")
        assert judgment.description.startswith("Better dopamine metabolism")

    def test_name_normalization(self, interpreter):
        judgment = interpreter.interpret_any("mthfr  c677t", "TT")
        assert judgment.impact == Impact.CHALLENGING

    def test_unknown_gene(self, interpreter):
        assert interpreter.interpret_any("NOPE1", "AA") == UNKNOWN_JUDGMENT
        assert interpreter.interpret_any("", "AA") == UNKNOWN_JUDGMENT


class TestPartition:

    def test_buckets(self, interpreter):
        markers = [
            {"gene": "ACTN3", "genotype": "RR", "category": "Power and Strength"},
            {"gene": "ACTN3", "genotype": "RX", "category": "Power and Strength"},
            {"gene": "COL5A1", "genotype": "TT", "category": "Injury Risk"},
            {"gene": "ACTN3", "genotype": "RR", "category": ""},
            {"gene": "FOO", "genotype": "AA", "category": "Injury Risk"},
        ]
        result = interpreter.partition(markers)
        assert [m.genotype for m in result.beneficial] == ["RR"]
        assert [m.genotype for m in result.neutral] == ["RX"]
        assert [m.gene for m in result.challenging] == ["COL5A1"]
        assert [m.gene for m in result.unknown] == ["ACTN3", "FOO"]
        assert result.counts() == {"beneficial": 1, "neutral": 1, "challenging": 1, "unknown": 2}

    def test_empty(self, interpreter):
        assert interpreter.partition([]).counts() == {
            "beneficial": 0, "neutral": 0, "challenging": 0, "unknown": 0,
        }


class TestCategoryCompleteness:

    def test_counts_distinct_defined_genes(self, interpreter):
        markers = [
            {"gene": "COL1A1", "genotype": "GG"},
            {"gene": "col1a1", "genotype": "GT"},
            {"gene": "GDF5", "genotype": "TT"},
            {"gene": "ACTN3", "genotype": "RR"},
        ]
        result = interpreter.category_completeness("Injury Risk", markers)
        assert result.observed == 2
        assert result.total == 3
        assert result.observed_genes == ["COL1A1", "GDF5"]
        assert result.ratio == pytest.approx(2 / 3)

    def test_observed_never_exceeds_total(self, interpreter):
        markers = [{"gene": "COMT", "genotype": g} for g in ("GG", "GA", "AA", "GG")]
        result = interpreter.category_completeness("Recovery & Adaptation", markers)
        assert result.observed == 1
        assert result.observed <= result.total

    def test_unknown_category(self, interpreter):
        result = interpreter.category_completeness("Nonexistent", [{"gene": "COMT"}])
        assert (result.observed, result.total, result.ratio) == (0, 0, 0.0)

    def test_report_covers_every_category(self, interpreter):
        report = interpreter.completeness_report([{"gene": "APOE", "genotype": "E3/E3"}])
        assert len(report) == 8
        cardio = next(r for r in report if r.category == "Cardiovascular markers")
        assert cardio.observed == 1


class TestTraitScores:

    def test_no_panel_genes_is_neutral(self, interpreter):
        score, present = interpreter.trait_score([{"gene": "FTO", "genotype": "AA"}], ["COL1A1", "GDF5"])
        assert score == 50
        assert present == []

    def test_all_beneficial(self, interpreter):
        markers = [{"gene": "COL1A1", "genotype": "GG"}, {"gene": "GDF5", "genotype": "TT"}]
        score, present = interpreter.trait_score(markers, ["COL1A1", "COL5A1", "GDF5", "IL6"])
        assert score == 100
        assert present == ["COL1A1", "GDF5"]

    def test_mixed(self, interpreter):
        markers = [
            {"gene": "COL1A1", "genotype": "GG"},   # +1
            {"gene": "COL5A1", "genotype": "TT"},   # -1
            {"gene": "GDF5", "genotype": "TC"},     # 0
            {"gene": "IL6", "genotype": "GG"},      # -1
        ]
        score, _ = interpreter.trait_score(markers, ["COL1A1", "COL5A1", "GDF5", "IL6"])
        # avg = -0.25 -> (0.75) * 50 = 37.5 -> 38
        assert score == 38

    def test_unknown_genotype_counts_as_zero(self, interpreter):
        score, _ = interpreter.trait_score([{"gene": "PEMT", "genotype": "AA"}], ["PEMT"])
        assert score == 50

    def test_all_reference_panels(self, interpreter):
        scores = interpreter.trait_scores([{"gene": "ACTN3", "genotype": "RR"}])
        assert [s.key for s in scores] == ["power", "endurance", "recovery", "tissue", "concussion"]
        power = scores[0]
        assert power.label == "Scrum/Collision Power"
        assert power.score == 100
        assert scores[3].score == 50

    def test_custom_panels(self, interpreter):
        panel = TraitPanel(key="sleep", label="Sleep", genes=("CLOCK",))
        scores = interpreter.trait_scores([{"gene": "CLOCK", "genotype": "CC"}], panels=[panel])
        assert scores[0].score == 0


class TestCategoryCounts:

    def test_descending(self, interpreter):
        markers = [
            MarkerRecord(gene="A", category="Injury Risk"),
            MarkerRecord(gene="B", category="Mental Health"),
            MarkerRecord(gene="C", category="Mental Health"),
            MarkerRecord(gene="D"),
        ]
        assert interpreter.category_counts(markers) == [
            ("Mental Health", 2),
            ("Injury Risk", 1),
            ("Uncategorized", 1),
        ]


class TestHelpers:

    def test_normalize_gene_name(self):
        assert normalize_gene_name(" mthfr c677t ") == "MTHFRC677T"
        assert normalize_gene_name(None) == ""

    def test_factory_uses_given_table(self):
        table = load_reference_table()
        assert create_interpreter(table).table is table
