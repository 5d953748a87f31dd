"""
Reference Data Loader - Process-wide immutable reference table.

Builds the curated ``category -> gene -> genotype -> judgment`` table once
(bundled JSON, a local path, or an http(s) URL) and serves it read-only.
Structural problems raise ReferenceDataError; callers treat that as fatal.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import backoff
import httpx

from .config import get_config
from .models import Impact, ImpactJudgment

logger = logging.getLogger(__name__)

BUNDLED_TABLE_PATH = Path(__file__).parent / "data" / "reference_table.json"

DEFAULT_GENOTYPE = "default"


class ReferenceDataError(RuntimeError):
    """Reference table could not be fetched or is structurally invalid."""


@dataclass(frozen=True)
class GeneReference:
    gene: str
    rsid: str
    analysis: Mapping[str, ImpactJudgment]


@dataclass(frozen=True)
class CategoryReference:
    name: str
    description: str
    genes: Mapping[str, GeneReference]


@dataclass(frozen=True)
class TraitPanel:
    key: str
    label: str
    genes: Tuple[str, ...]


class ReferenceTable:
    """
    Read-only view over the curated reference data.
    Category order is preserved from the source document.
    """

    def __init__(
        self,
        categories: Mapping[str, CategoryReference],
        traits: Tuple[TraitPanel, ...] = (),
        version: str = "",
    ):
        self._categories = MappingProxyType(dict(categories))
        self._traits = tuple(traits)
        self.version = version

    @property
    def categories(self) -> Mapping[str, CategoryReference]:
        return self._categories

    @property
    def traits(self) -> Tuple[TraitPanel, ...]:
        return self._traits

    def category_names(self) -> List[str]:
        return list(self._categories)

    def get_category(self, category: str) -> Optional[CategoryReference]:
        return self._categories.get(category)

    def get_gene(self, category: str, gene: str) -> Optional[GeneReference]:
        entry = self._categories.get(category)
        if entry is None:
            return None
        return entry.genes.get(gene)

    def iter_genes(self) -> Iterator[Tuple[str, GeneReference]]:
        """(category, gene reference) pairs in document order."""
        for name, entry in self._categories.items():
            for gene_ref in entry.genes.values():
                yield name, gene_ref

    def __len__(self) -> int:
        return len(self._categories)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_judgment(where: str, raw: Any) -> ImpactJudgment:
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(f"{where}: judgment must be an object")
    try:
        impact = Impact(str(raw.get("impact", "")).strip().lower())
    except ValueError:
        raise ReferenceDataError(f"{where}: unknown impact {raw.get('impact')!r}")
    return ImpactJudgment(
        impact=impact,
        description=str(raw.get("description", "")),
        color_hint=str(raw.get("color") or raw.get("color_hint") or "gray"),
    )


def _parse_gene(category: str, gene: str, raw: Any) -> GeneReference:
    where = f"{category}/{gene}"
    if not isinstance(raw, Mapping) or not isinstance(raw.get("analysis"), Mapping):
        raise ReferenceDataError(f"{where}: gene entry needs an 'analysis' object")
    analysis = {
        str(genotype): _parse_judgment(f"{where}/{genotype}", judgment)
        for genotype, judgment in raw["analysis"].items()
    }
    return GeneReference(
        gene=gene,
        rsid=str(raw.get("rsid") or ""),
        analysis=MappingProxyType(analysis),
    )


def _parse_traits(raw: Any) -> Tuple[TraitPanel, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ReferenceDataError("'traits' must be a list")
    panels = []
    for item in raw:
        if not isinstance(item, Mapping) or not item.get("key") or not isinstance(item.get("genes"), list):
            raise ReferenceDataError(f"invalid trait panel: {item!r}")
        panels.append(TraitPanel(
            key=str(item["key"]),
            label=str(item.get("label") or item["key"]),
            genes=tuple(str(g) for g in item["genes"]),
        ))
    return tuple(panels)


def build_reference_table(document: Any) -> ReferenceTable:
    """Validate a decoded JSON document and freeze it into a ReferenceTable."""
    if not isinstance(document, Mapping) or not isinstance(document.get("categories"), Mapping):
        raise ReferenceDataError("reference document needs a 'categories' object")

    categories: Dict[str, CategoryReference] = {}
    for name, raw_category in document["categories"].items():
        if not isinstance(raw_category, Mapping) or not isinstance(raw_category.get("genes"), Mapping):
            raise ReferenceDataError(f"{name}: category needs a 'genes' object")
        genes = {
            str(gene): _parse_gene(name, str(gene), raw_gene)
            for gene, raw_gene in raw_category["genes"].items()
        }
        categories[str(name)] = CategoryReference(
            name=str(name),
            description=str(raw_category.get("description") or ""),
            genes=MappingProxyType(genes),
        )

    return ReferenceTable(
        categories=categories,
        traits=_parse_traits(document.get("traits")),
        version=str(document.get("version") or ""),
    )


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _fetch_remote(url: str) -> Any:
    remote = get_config().remote

    @backoff.on_exception(
        backoff.expo,
        (httpx.RequestError, httpx.HTTPStatusError),
        max_tries=remote.max_tries,
        giveup=lambda e: isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
    )
    def _get() -> Any:
        with httpx.Client(timeout=remote.timeout_seconds) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.json()

    try:
        return _get()
    except (httpx.HTTPStatusError, httpx.RequestError) as e:
        raise ReferenceDataError(f"Failed to fetch reference table from {url}: {e}") from e
    except ValueError as e:
        raise ReferenceDataError(f"Reference table at {url} is not valid JSON: {e}") from e


def _read_file(path: Path) -> Any:
    if not path.exists():
        raise ReferenceDataError(f"Reference table not found at {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except ValueError as e:
        raise ReferenceDataError(f"Reference table at {path} is not valid JSON: {e}") from e


def load_reference_table(source: Optional[str] = None) -> ReferenceTable:
    """
    Load and validate the reference table.

    Args:
        source: File path or http(s) URL. None loads the bundled table.

    Raises:
        ReferenceDataError: unreachable source, invalid JSON or bad structure.
    """
    if not source:
        document = _read_file(BUNDLED_TABLE_PATH)
        origin = "bundled"
    elif _is_url(source):
        document = _fetch_remote(source)
        origin = source
    else:
        document = _read_file(Path(source))
        origin = source

    table = build_reference_table(document)

    if get_config().verbose_logging:
        gene_count = sum(len(c.genes) for c in table.categories.values())
        logger.info(
            "Reference table loaded from %s: %d categories, %d gene entries, %d trait panels",
            origin, len(table), gene_count, len(table.traits)
        )
    return table


# Global instance
_table: Optional[ReferenceTable] = None


def get_reference_table() -> ReferenceTable:
    """Get the process-wide reference table, loading it on first use."""
    global _table
    if _table is None:
        _table = load_reference_table(get_config().reference_source)
    return _table


def reload_reference_table(source: Optional[str] = None) -> ReferenceTable:
    """Replace the process-wide table (tests, or after a config change)."""
    global _table
    _table = load_reference_table(source if source is not None else get_config().reference_source)
    return _table
