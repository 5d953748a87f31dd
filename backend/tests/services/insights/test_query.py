"""
Tests for the marker query pipeline.
"""

import pytest

from app.services.insights.models import ImpactBand, MarkerRecord, QueryOptions, SortKey
from app.services.insights.query import available_categories, in_impact_band, query


@pytest.fixture
def markers():
    return [
        {"Gene": "COMT", "GeneticCall": "GG", "DbsnpRsId": "rs4680", "Category": "Mental Health"},
        {"Gene": "actn3", "GeneticCall": "RR", "RSID": "rs1815739", "Category": "Power and Strength"},
        {"Gene": "ACE", "GeneticCall": "ID", "Category": "Power and Strength"},
        {"Gene": "COMT", "GeneticCall": "GG", "DbsnpRsId": "rs4680", "Category": "Mental Health"},
        {"Gene": "FTO", "GeneticCall": "ag", "RSID": "rs9939609", "Category": "Metabolic Health"},
        {"Gene": "BDNF", "GeneticCall": "Val/Met", "Category": "Mental Health"},
    ]


class TestQueryPipeline:

    def test_default_dedups_and_sorts_by_gene(self, markers):
        result = query(markers)
        assert [m.gene for m in result] == ["ACE", "actn3", "BDNF", "COMT", "FTO"]

    def test_search_is_case_insensitive(self, markers):
        result = query(markers, QueryOptions(search_term="RS4680"))
        assert [m.gene for m in result] == ["COMT"]

    def test_search_matches_genotype(self, markers):
        result = query(markers, QueryOptions(search_term="val"))
        assert [m.gene for m in result] == ["BDNF"]

    def test_category_filter(self, markers):
        result = query(markers, QueryOptions(category="Power and Strength"))
        assert [m.gene for m in result] == ["ACE", "actn3"]

    def test_category_all_disables_filter(self, markers):
        assert len(query(markers, QueryOptions(category="all"))) == 5

    def test_high_impact_band(self, markers):
        result = query(markers, QueryOptions(impact_band=ImpactBand.HIGH))
        assert [m.gene for m in result] == ["COMT"]

    def test_medium_impact_band_uppercases_genotype(self, markers):
        result = query(markers, QueryOptions(impact_band=ImpactBand.MEDIUM))
        assert [m.gene for m in result] == ["FTO"]

    def test_sort_by_category_is_stable(self, markers):
        result = query(markers, QueryOptions(sort_key=SortKey.CATEGORY))
        assert [(m.category, m.gene) for m in result] == [
            ("Mental Health", "COMT"),
            ("Mental Health", "BDNF"),
            ("Metabolic Health", "FTO"),
            ("Power and Strength", "actn3"),
            ("Power and Strength", "ACE"),
        ]

    def test_sort_none_keeps_dedup_order(self, markers):
        result = query(markers, QueryOptions(sort_key=SortKey.NONE))
        assert [m.gene for m in result] == ["COMT", "actn3", "ACE", "FTO", "BDNF"]

    def test_sort_by_rsid_empty_first(self, markers):
        result = query(markers, QueryOptions(sort_key=SortKey.RSID))
        assert [m.rsid for m in result] == ["", "", "", "rs1815739", "rs9939609"]

    def test_combined_filters(self, markers):
        options = QueryOptions(search_term="c", category="Mental Health", impact_band=ImpactBand.HIGH)
        assert [m.gene for m in query(markers, options)] == ["COMT"]

    def test_input_not_mutated(self, markers):
        snapshot = [dict(m) for m in markers]
        query(markers, QueryOptions(sort_key=SortKey.GENE))
        assert markers == snapshot

    def test_empty_input(self):
        assert query([]) == []


class TestImpactBand:

    @pytest.mark.parametrize("genotype, band, expected", [
        ("AA", ImpactBand.HIGH, True),
        ("cc", ImpactBand.HIGH, True),
        ("AG", ImpactBand.HIGH, False),
        ("CT", ImpactBand.MEDIUM, True),
        ("RR", ImpactBand.MEDIUM, False),
        ("", ImpactBand.ALL, True),
    ])
    def test_bands(self, genotype, band, expected):
        assert in_impact_band(MarkerRecord(gene="X", genotype=genotype), band) is expected


class TestAvailableCategories:

    def test_first_seen_order(self, markers):
        assert available_categories(markers) == ["Mental Health", "Power and Strength", "Metabolic Health"]
