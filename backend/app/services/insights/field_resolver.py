"""
Field Resolver - logical field lookup over records with drifting key casing.

Upstream marker and biometric rows arrive as PascalCase (``Gene``,
``GeneticCall``), snake_case (``genetic_call``), camelCase or SHOUTING_CASE
depending on which service serialised them. Callers ask for a logical name
and get back the first populated value, or ``""`` when nothing matches.
"""

from typing import Any, List, Mapping

# Historical spellings of the dbSNP reference id, most common first.
DBSNP_SPELLINGS = (
    "DbsnpRsId",
    "dbsnp_rs_id",
    "DBSNP_RS_ID",
    "dbsnpRsId",
    "dbSNPRSID",
)

DBSNP_FIELD = "dbsnp_rs_id"


def _snake_joins(name: str) -> List[str]:
    """``genetic_call`` -> ``GeneticCall``, ``geneticCall``."""
    parts = [p for p in name.split("_") if p]
    if len(parts) < 2:
        return []
    pascal = "".join(p[:1].upper() + p[1:].lower() for p in parts)
    camel = pascal[:1].lower() + pascal[1:]
    return [pascal, camel]


def candidate_names(logical_name: str) -> List[str]:
    """
    Ordered, de-duplicated list of keys to try for ``logical_name``.

    Order: exact, lowercase, UPPERCASE, Capitalized, camel-swapped
    (first char lower, rest upper), then PascalCase / camelCase joins of a
    snake_case name. ``dbsnp_rs_id`` puts its known spellings first.
    """
    if not logical_name:
        return []

    candidates: List[str] = []
    if logical_name == DBSNP_FIELD:
        candidates.extend(DBSNP_SPELLINGS)

    candidates.extend([
        logical_name,
        logical_name.lower(),
        logical_name.upper(),
        logical_name[:1].upper() + logical_name[1:].lower(),
        logical_name[:1].lower() + logical_name[1:].upper(),
    ])
    candidates.extend(_snake_joins(logical_name))

    seen = set()
    ordered = []
    for name in candidates:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return str(value)


def resolve(record: Any, logical_name: str) -> str:
    """
    Resolve ``logical_name`` against ``record``.

    Returns the first candidate key holding a truthy value, as a string.
    Unresolved fields and non-mapping records yield ``""``.
    """
    if not isinstance(record, Mapping):
        return ""

    for name in candidate_names(logical_name):
        value = record.get(name)
        if value:
            text = _as_text(value)
            if text:
                return text
    return ""


def resolve_first(record: Any, *logical_names: str) -> str:
    """Try several logical names in order (e.g. ``genetic_call`` then ``genotype``)."""
    for logical_name in logical_names:
        value = resolve(record, logical_name)
        if value:
            return value
    return ""
