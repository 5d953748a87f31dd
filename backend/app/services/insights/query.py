"""
Marker query pipeline: deduplicate -> search -> category -> impact band -> sort.

The impact band is a display heuristic over the genotype string
(homozygous vs heterozygous codes). It is unrelated to the curated
impact produced by the GenotypeInterpreter.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from .identity import deduplicate
from .models import ImpactBand, MarkerRecord, QueryOptions, SortKey

HIGH_BAND_CODES = ("AA", "GG", "TT", "CC")
MEDIUM_BAND_CODES = ("AG", "CT", "AC")

ALL_CATEGORIES = "all"

_SORT_FIELDS: Dict[SortKey, Callable[[MarkerRecord], str]] = {
    SortKey.GENE: lambda m: m.gene,
    SortKey.DBSNP: lambda m: m.dbsnp_id,
    SortKey.CATEGORY: lambda m: m.category,
    SortKey.RSID: lambda m: m.rsid,
}


def matches_search(marker: MarkerRecord, search_term: str) -> bool:
    """Case-insensitive substring match over gene, dbSNP id, rsID and genotype."""
    needle = search_term.lower()
    return any(
        needle in value.lower()
        for value in (marker.gene, marker.dbsnp_id, marker.rsid, marker.genotype)
    )


def in_impact_band(marker: MarkerRecord, band: ImpactBand) -> bool:
    if band == ImpactBand.ALL:
        return True
    genotype = marker.genotype.upper()
    codes = HIGH_BAND_CODES if band == ImpactBand.HIGH else MEDIUM_BAND_CODES
    return any(code in genotype for code in codes)


def query(markers: Iterable[Any], options: Optional[QueryOptions] = None) -> List[MarkerRecord]:
    """
    Run the marker query pipeline.

    Args:
        markers: MarkerRecords or raw marker rows (any key casing)
        options: Search/filter/sort options; defaults to "everything, by gene"

    Returns:
        New list of deduplicated, filtered and sorted MarkerRecords.
        The input is not modified.
    """
    options = options or QueryOptions()
    results = deduplicate(markers)

    if options.search_term:
        results = [m for m in results if matches_search(m, options.search_term)]

    if options.category and options.category != ALL_CATEGORIES:
        results = [m for m in results if m.category == options.category]

    if options.impact_band != ImpactBand.ALL:
        results = [m for m in results if in_impact_band(m, options.impact_band)]

    sort_field = _SORT_FIELDS.get(options.sort_key)
    if sort_field is not None:
        # sorted() is stable; ties keep deduplicated order
        results = sorted(results, key=lambda m: sort_field(m).casefold())

    return results


def available_categories(markers: Iterable[Any]) -> List[str]:
    """Distinct non-empty categories of the deduplicated markers, first-seen order."""
    categories: List[str] = []
    for marker in deduplicate(markers):
        if marker.category and marker.category not in categories:
            categories.append(marker.category)
    return categories
