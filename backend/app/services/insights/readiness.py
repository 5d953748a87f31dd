"""
Biometric Readiness Scorer - Composite 0-100 readiness from one day's readings.

Each configured field is scaled linearly between its ``poor`` and ``optimal``
anchors and clamped to [0, 1]; resting heart rate runs the other way. The
score is the weighted mean over the fields actually present, so a missing
reading removes its weight instead of counting as a bad one.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import FieldScale, ReadinessConfig, get_readiness_config
from .models import BiometricRecord, ReadinessBreakdown, TimelinePoint
from .series import coerce_records, latest_valid_record, sort_by_date
from .signals import recovery_events

logger = logging.getLogger(__name__)


def scale_value(value: float, scale: FieldScale) -> float:
    """Map a reading onto [0, 1] in the field's direction."""
    span = scale.optimal - scale.poor
    if span == 0:
        # Degenerate anchors act as a threshold
        if scale.higher_is_better:
            return 1.0 if value >= scale.optimal else 0.0
        return 1.0 if value <= scale.optimal else 0.0
    return min(1.0, max(0.0, (value - scale.poor) / span))


class ReadinessScorer:
    """
    Computes readiness fresh per record; nothing is cached.
    """

    def __init__(self, config: Optional[ReadinessConfig] = None):
        self.config = config or get_readiness_config()

    def score_breakdown(self, record: Any) -> ReadinessBreakdown:
        """Per-field components plus the weighted composite."""
        record = BiometricRecord.from_raw(record)

        components: Dict[str, float] = {}
        weighted_sum = 0.0
        total_weight = 0.0
        for name, scale in self.config.scales().items():
            value = record.metric(name)
            if value is None or scale.weight <= 0:
                continue
            component = scale_value(value, scale)
            components[name] = round(component, 4)
            weighted_sum += component * scale.weight
            total_weight += scale.weight

        if total_weight == 0:
            return ReadinessBreakdown(score=0.0)

        score = round(100.0 * weighted_sum / total_weight, 1)
        return ReadinessBreakdown(
            score=min(100.0, max(0.0, score)),
            components=components,
            fields_used=list(components),
        )

    def score(self, record: Any) -> float:
        """
        Readiness in [0, 100]. A record with no usable fields scores 0;
        callers should hide readiness rather than show that zero.
        """
        return self.score_breakdown(record).score

    def display_readiness(self, series: Iterable[Any]) -> float:
        """
        Latest non-zero readiness, walking back from the newest record.
        Falls back to the latest valid record's score (which may be 0).
        """
        records = coerce_records(series)
        if not records:
            return 0.0

        for record in sort_by_date(records, newest_first=True):
            value = self.score(record)
            if value > 0:
                return value

        latest = latest_valid_record(records)
        return self.score(latest) if latest is not None else 0.0

    def readiness_timeline(self, series: Iterable[Any]) -> List[TimelinePoint]:
        """One point per record in date order, with the day's recovery events."""
        points = []
        for record in sort_by_date(series):
            points.append(TimelinePoint(
                date=record.date,
                readiness_score=self.score(record),
                hrv=record.hrv_night,
                resting_hr=record.resting_hr,
                sleep_duration=record.sleep_duration_h,
                spo2=record.spo2_night,
                training_load=record.training_load_pct,
                events=recovery_events(record),
            ))
        logger.debug("Built readiness timeline with %d points", len(points))
        return points


def create_readiness_scorer(config: Optional[ReadinessConfig] = None) -> ReadinessScorer:
    """Factory function to create a ReadinessScorer instance."""
    return ReadinessScorer(config)
