"""
Cohort Aggregator - Team averages over a biometric population.

Only valid records with a positive value for the metric contribute, so a
sparse population is never diluted by placeholder zeros. An empty
contribution yields None, which callers must check before display.
"""

import logging
from typing import Any, Iterable, Optional

from .field_resolver import candidate_names
from .models import BIOMETRIC_FIELDS, BiometricRecord, TeamComparison
from .series import filter_valid_records, latest_valid_record

logger = logging.getLogger(__name__)

_METRIC_FIELDS = BIOMETRIC_FIELDS + ("light_sleep_pct",)


def resolve_metric_name(metric_name: str) -> Optional[str]:
    """
    Canonical field for a metric name in any supported casing
    (``restingHr``, ``RestingHr``, ``RESTING_HR`` -> ``resting_hr``).
    """
    if not metric_name:
        return None
    name = metric_name.strip()
    for field in _METRIC_FIELDS:
        if name in candidate_names(field):
            return field
    return None


def _same_athlete(record: BiometricRecord, athlete_id: Optional[str]) -> bool:
    return athlete_id is not None and record.athlete_id == str(athlete_id).strip()


def team_average(
    metric_name: str,
    exclude_athlete_id: Optional[str],
    population: Iterable[Any],
) -> Optional[float]:
    """
    Mean of ``metric_name`` across valid records in ``population``.

    Args:
        metric_name: Biometric field, any supported casing
        exclude_athlete_id: Athlete whose records are left out; None keeps everyone
        population: BiometricRecords or raw rows

    Returns:
        The mean, or None when the metric is unknown or nothing contributes.
    """
    field = resolve_metric_name(metric_name)
    if field is None:
        logger.debug("Unknown biometric metric %r", metric_name)
        return None

    values = []
    for record in filter_valid_records(population):
        if _same_athlete(record, exclude_athlete_id):
            continue
        value = record.metric(field)
        if value is not None:
            values.append(value)

    if not values:
        return None
    return sum(values) / len(values)


def compare_to_team(metric_name: str, athlete_id: str, population: Iterable[Any]) -> TeamComparison:
    """Athlete's latest valid reading against everyone else's average."""
    field = resolve_metric_name(metric_name) or metric_name
    records = filter_valid_records(population)

    own = [r for r in records if _same_athlete(r, athlete_id)]
    latest = latest_valid_record(own)
    athlete_value = latest.metric(field) if latest is not None else None
    average = team_average(field, athlete_id, records)

    delta = None
    if athlete_value is not None and average is not None:
        delta = round(athlete_value - average, 2)

    return TeamComparison(
        metric=field,
        athlete_id=str(athlete_id),
        athlete_value=athlete_value,
        team_average=round(average, 2) if average is not None else None,
        delta=delta,
    )
