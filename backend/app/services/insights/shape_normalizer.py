"""
Shape Normalizer - one entry point for every encoding of a ``Genes`` payload.

The genetic-summary store hands back the same logical map
``{gene: genotype}`` in four encodings:

  1. STRING_ENCODED   - the map serialised as a JSON string
  2. OBJECT_ARRAY     - ``[{"gene": ..., "genotype": ..., "rsid": ...}, ...]``
  3. KEY_VALUE_ARRAY  - ``[{"Key": gene, "Value": genotype}, ...]``
  4. PLAIN_OBJECT     - the map itself

The encoding is detected once, then dispatched to a single handler.
Malformed payloads degrade to "no markers"; nothing here raises.
"""

import json
import logging
from enum import Enum
from typing import Any, Iterable, List, Mapping, NamedTuple

from .field_resolver import resolve, resolve_first
from .models import MarkerRecord

logger = logging.getLogger(__name__)


class PayloadEncoding(str, Enum):
    STRING_ENCODED = "string_encoded"
    OBJECT_ARRAY = "object_array"
    KEY_VALUE_ARRAY = "key_value_array"
    PLAIN_OBJECT = "plain_object"
    UNSUPPORTED = "unsupported"


class NormalizedMarker(NamedTuple):
    gene: str
    genotype: str
    rsid: str


# Keys whose presence on the first array element marks a list of marker objects
_MARKER_OBJECT_KEYS = ("gene", "Gene", "rsid", "RSID")


def detect_encoding(payload: Any) -> PayloadEncoding:
    """Classify a raw payload into exactly one encoding."""
    if isinstance(payload, str):
        return PayloadEncoding.STRING_ENCODED
    if isinstance(payload, (list, tuple)):
        first = payload[0] if payload else None
        if isinstance(first, Mapping) and any(k in first for k in _MARKER_OBJECT_KEYS):
            return PayloadEncoding.OBJECT_ARRAY
        return PayloadEncoding.KEY_VALUE_ARRAY
    if isinstance(payload, Mapping):
        return PayloadEncoding.PLAIN_OBJECT
    return PayloadEncoding.UNSUPPORTED


def is_marker_name(gene: str) -> bool:
    """False for empty names and serializer artifacts (``$id``, ``$type``, ``id``)."""
    if not gene:
        return False
    return not gene.startswith("$") and gene.lower() != "id"


def _text(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value).strip()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _from_string(payload: str) -> List[NormalizedMarker]:
    try:
        parsed = json.loads(payload)
    except (TypeError, ValueError):
        logger.debug("Genes payload is not valid JSON; treating as empty")
        return []
    except RecursionError:
        logger.debug("Genes payload nests too deeply to decode; treating as empty")
        return []
    if isinstance(parsed, str):
        # A JSON string that decodes to another string is not a marker map
        return []
    return normalize(parsed)


def _from_object_array(payload: Iterable[Any]) -> List[NormalizedMarker]:
    markers = []
    for item in payload:
        if not isinstance(item, Mapping):
            continue
        rsid = resolve(item, "rsid")
        markers.append(NormalizedMarker(
            gene=resolve(item, "gene") or rsid,
            genotype=resolve_first(item, "genotype", "genetic_call"),
            rsid=rsid,
        ))
    return markers


def _from_key_value_array(payload: Iterable[Any]) -> List[NormalizedMarker]:
    reduced = {}
    for item in payload:
        if not isinstance(item, Mapping):
            continue
        key = item.get("Key") or item.get("key")
        if key is None:
            continue
        reduced[_text(key)] = item.get("Value") or item.get("value")
    return _from_plain_object(reduced)


def _from_plain_object(payload: Mapping) -> List[NormalizedMarker]:
    markers = []
    for gene, value in payload.items():
        if isinstance(value, Mapping):
            genotype = resolve_first(value, "genotype", "genetic_call")
            rsid = resolve(value, "rsid")
        else:
            genotype = _text(value)
            rsid = ""
        markers.append(NormalizedMarker(gene=_text(gene), genotype=genotype, rsid=rsid))
    return markers


_HANDLERS = {
    PayloadEncoding.STRING_ENCODED: _from_string,
    PayloadEncoding.OBJECT_ARRAY: _from_object_array,
    PayloadEncoding.KEY_VALUE_ARRAY: _from_key_value_array,
    PayloadEncoding.PLAIN_OBJECT: _from_plain_object,
}


def normalize(raw_payload: Any) -> List[NormalizedMarker]:
    """
    Convert a raw ``Genes`` payload into ``(gene, genotype, rsid)`` tuples.

    Never raises. Framework artifacts and empty gene names are dropped; a
    payload with no usable markers returns an empty list.
    """
    encoding = detect_encoding(raw_payload)
    handler = _HANDLERS.get(encoding)
    if handler is None:
        if raw_payload is not None:
            logger.debug("Unsupported Genes payload type %s", type(raw_payload).__name__)
        return []

    return [m for m in handler(raw_payload) if is_marker_name(m.gene)]


def normalize_summaries(summaries: Iterable[Any]) -> List[MarkerRecord]:
    """
    Flatten genetic-summary rows (``Category`` + ``Genes``) into MarkerRecords.
    Rows that are not mappings are skipped.
    """
    records: List[MarkerRecord] = []
    for summary in summaries or []:
        if not isinstance(summary, Mapping):
            continue
        category = resolve(summary, "category")
        payload = next(
            (summary[k] for k in ("Genes", "genes", "GENES") if k in summary),
            None,
        )
        for marker in normalize(payload):
            records.append(MarkerRecord(
                gene=marker.gene,
                genotype=marker.genotype,
                rsid=marker.rsid,
                category=category,
            ))
    return records
