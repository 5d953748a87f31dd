"""
Identity resolution and deduplication for marker records.

Identity key priority:
  1. dbSNP reference id
  2. rsID
  3. synthetic ``{gene}_{genotype}`` (``unknown`` when genotype is missing)

Records with no external identifier and the same gene+genotype collapse into
one, since nothing downstream can tell them apart.
"""

from typing import Any, Dict, Iterable, List

from .models import MarkerRecord


def identity_key(marker: MarkerRecord) -> str:
    if marker.dbsnp_id:
        return marker.dbsnp_id
    if marker.rsid:
        return marker.rsid
    return f"{marker.gene}_{marker.genotype or 'unknown'}"


def coerce_markers(markers: Iterable[Any]) -> List[MarkerRecord]:
    """MarkerRecords or raw rows in, MarkerRecords out; rows without a gene are dropped."""
    records = []
    for marker in markers or []:
        record = MarkerRecord.from_raw(marker)
        if record is not None:
            records.append(record)
    return records


def deduplicate(markers: Iterable[Any]) -> List[MarkerRecord]:
    """Keep the first-seen record per identity key, preserving input order."""
    unique: Dict[str, MarkerRecord] = {}
    for record in coerce_markers(markers):
        key = identity_key(record)
        if key not in unique:
            unique[key] = record
    return list(unique.values())
