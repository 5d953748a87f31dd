"""
Genotype Interpreter - Maps (category, gene, genotype) to curated impact judgments.

Pure functions over an injected, immutable ReferenceTable:
- interpret: exact genotype -> gene ``default`` wildcard -> unknown sentinel
- partition: markers bucketed by impact, each against its own category
- category_completeness: coverage of a category's defined genes
- trait_score(s): panel-averaged impact mapped onto 0-100
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .identity import coerce_markers
from .models import (
    CategoryCompleteness,
    Impact,
    ImpactJudgment,
    ImpactPartition,
    TraitScore,
    UNKNOWN_JUDGMENT,
)
from .reference_loader import DEFAULT_GENOTYPE, ReferenceTable, TraitPanel, get_reference_table

# Impact contribution to trait scores
IMPACT_VALUES: Dict[Impact, int] = {
    Impact.BENEFICIAL: 1,
    Impact.NEUTRAL: 0,
    Impact.CHALLENGING: -1,
    Impact.UNKNOWN: 0,
}

NEUTRAL_TRAIT_SCORE = 50


def normalize_gene_name(gene: str) -> str:
    """Uppercase with all whitespace removed (``mthfr c677t`` -> ``MTHFRC677T``)."""
    return "".join((gene or "").split()).upper()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class GenotypeInterpreter:
    """
    Interprets markers against a curated reference table.
    The table is never mutated; one interpreter may be shared freely.
    """

    def __init__(self, table: ReferenceTable):
        self.table = table
        # First category (document order) defining each normalized gene name
        self._gene_index: Dict[str, Tuple[str, str]] = {}
        for category, gene_ref in table.iter_genes():
            self._gene_index.setdefault(normalize_gene_name(gene_ref.gene), (category, gene_ref.gene))

    # ===== Single lookups =====

    def interpret(self, category: str, gene: str, genotype: str) -> ImpactJudgment:
        """
        Three-tier lookup: exact genotype, then the gene's ``default``
        entry, then the unknown sentinel. Never raises.
        """
        gene_ref = self.table.get_gene(category, gene)
        if gene_ref is None:
            return UNKNOWN_JUDGMENT

        judgment = gene_ref.analysis.get((genotype or "").strip())
        if judgment is None:
            judgment = gene_ref.analysis.get(DEFAULT_GENOTYPE)
        return judgment or UNKNOWN_JUDGMENT

    def locate_gene(self, gene: str) -> Optional[Tuple[str, str]]:
        """(category, canonical gene name) of the first category defining ``gene``."""
        if not gene:
            return None
        for category, entry in self.table.categories.items():
            if gene in entry.genes:
                return category, gene
        return self._gene_index.get(normalize_gene_name(gene))

    def interpret_any(self, gene: str, genotype: str) -> ImpactJudgment:
        """Interpret using the first category, in table order, that defines the gene."""
        located = self.locate_gene(gene)
        if located is None:
            return UNKNOWN_JUDGMENT
        category, canonical = located
        return self.interpret(category, canonical, genotype)

    # ===== Aggregates =====

    def partition(self, markers: Iterable[Any]) -> ImpactPartition:
        """Bucket markers by the impact of their own category's judgment."""
        result = ImpactPartition()
        for marker in coerce_markers(markers):
            judgment = self.interpret(marker.category, marker.gene, marker.genotype)
            result.bucket(judgment.impact).append(marker)
        return result

    def category_completeness(self, category: str, markers: Iterable[Any]) -> CategoryCompleteness:
        """
        How many of the category's defined genes the markers cover.

        Counts distinct defined genes present anywhere in ``markers``,
        matching names case- and whitespace-insensitively, so the observed
        count never exceeds the total. Unknown category -> 0/0.
        """
        entry = self.table.get_category(category)
        if entry is None:
            return CategoryCompleteness(category=category, observed=0, total=0)

        defined = {normalize_gene_name(g): g for g in entry.genes}
        observed: Dict[str, str] = {}
        for marker in coerce_markers(markers):
            key = normalize_gene_name(marker.gene)
            if key in defined and key not in observed:
                observed[key] = defined[key]

        return CategoryCompleteness(
            category=category,
            observed=len(observed),
            total=len(entry.genes),
            observed_genes=list(observed.values()),
        )

    def completeness_report(self, markers: Iterable[Any]) -> List[CategoryCompleteness]:
        """Completeness for every reference category, in table order."""
        records = coerce_markers(markers)
        return [self.category_completeness(name, records) for name in self.table.category_names()]

    def trait_score(self, markers: Iterable[Any], genes: Sequence[str]) -> Tuple[int, List[str]]:
        """
        Score a gene panel on 0-100.

        Each marker whose gene is in the panel contributes +1 / 0 / -1 by
        impact (interpreted across categories); the mean maps linearly onto
        0-100. A panel with no markers present scores 50.

        Returns:
            (score, genes present in the panel)
        """
        panel = {normalize_gene_name(g) for g in genes}
        present = [m for m in coerce_markers(markers) if normalize_gene_name(m.gene) in panel]
        if not present:
            return NEUTRAL_TRAIT_SCORE, []

        total = sum(IMPACT_VALUES[self.interpret_any(m.gene, m.genotype).impact] for m in present)
        average = total / len(present)

        genes_present: List[str] = []
        for marker in present:
            if marker.gene not in genes_present:
                genes_present.append(marker.gene)
        return _round_half_up((average + 1) * 50), genes_present

    def trait_scores(self, markers: Iterable[Any], panels: Optional[Sequence[TraitPanel]] = None) -> List[TraitScore]:
        """Score every trait panel (defaults to the reference table's panels)."""
        records = coerce_markers(markers)
        scores = []
        for panel in (panels if panels is not None else self.table.traits):
            score, present = self.trait_score(records, panel.genes)
            scores.append(TraitScore(key=panel.key, label=panel.label, score=score, genes_present=present))
        return scores

    def category_counts(self, markers: Iterable[Any]) -> List[Tuple[str, int]]:
        """Marker count per category, most populated first (ties keep first-seen order)."""
        counts: Dict[str, int] = {}
        for marker in coerce_markers(markers):
            category = marker.category or "Uncategorized"
            counts[category] = counts.get(category, 0) + 1
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def create_interpreter(table: Optional[ReferenceTable] = None) -> GenotypeInterpreter:
    """Factory function; defaults to the process-wide reference table."""
    return GenotypeInterpreter(table if table is not None else get_reference_table())
