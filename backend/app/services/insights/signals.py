"""
Biometric Signals - Status bands, recovery alerts, training-load trend
and per-day recovery events.

All rules read thresholds from AlertConfig / metric_thresholds. A missing
reading never satisfies a rule.
"""

import logging
from datetime import time
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .config import AlertConfig, StatusBand, get_alert_config, get_metric_thresholds
from .models import BiometricRecord, RecoveryAlert, TrainingLoadTrend
from .series import filter_valid_records, sort_by_date

logger = logging.getLogger(__name__)

TREND_WINDOW_DAYS = 7


# ---------------------------------------------------------------------------
# Metric status
# ---------------------------------------------------------------------------

def _in_band(value: float, band: Tuple[float, float]) -> bool:
    return band[0] <= value <= band[1]


def metric_status(value: Optional[float], metric: str) -> str:
    """
    Status colour of a reading: green / yellow / red, or unknown when the
    metric has no bands or the value falls between them.
    """
    bands: Optional[StatusBand] = get_metric_thresholds().get(metric)
    if bands is None or value is None:
        return "unknown"
    if _in_band(value, bands.green):
        return "green"
    if _in_band(value, bands.yellow):
        return "yellow"
    if _in_band(value, bands.red):
        return "red"
    return "unknown"


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

def _parse_clock(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    try:
        return time.fromisoformat(value.strip()[:5])
    except ValueError:
        return None


def is_late_sleep_onset(onset: Optional[str], threshold: str) -> bool:
    """
    True when onset is at/after ``threshold`` or after midnight
    (00:00-11:59 is treated as the tail of the previous night).
    """
    onset_time = _parse_clock(onset)
    limit = _parse_clock(threshold)
    if onset_time is None or limit is None:
        return False
    return onset_time >= limit or onset_time < time(12, 0)


def _relative_change(previous: Optional[float], latest: Optional[float]) -> Optional[float]:
    if previous is None or latest is None:
        return None
    return (latest - previous) / previous


def _trend_flags(latest: BiometricRecord, previous: Optional[BiometricRecord], cfg: AlertConfig) -> Tuple[bool, bool]:
    """(hrv_drop, rhr_rise) from the last two records, or single-record fallbacks."""
    if previous is None:
        hrv = latest.metric("hrv_night")
        rhr = latest.metric("resting_hr")
        return (
            hrv is not None and hrv < cfg.hrv_low_fallback,
            rhr is not None and rhr > cfg.rhr_high_fallback,
        )

    hrv_change = _relative_change(previous.metric("hrv_night"), latest.metric("hrv_night"))
    rhr_change = _relative_change(previous.metric("resting_hr"), latest.metric("resting_hr"))
    return (
        hrv_change is not None and -hrv_change > cfg.hrv_drop_ratio,
        rhr_change is not None and rhr_change > cfg.rhr_rise_ratio,
    )


def _below(value: Optional[float], limit: float) -> bool:
    return value is not None and value < limit


def _at_most(value: Optional[float], limit: float) -> bool:
    return value is not None and value <= limit


def _at_least(value: Optional[float], limit: float) -> bool:
    return value is not None and value >= limit


NO_DATA_ALERT = RecoveryAlert(
    type="no_data",
    title="No Data",
    cause="No recent biometric data available",
    recommendation="Please ensure data collection is active.",
)


def generate_alert(series: Iterable[Any], config: Optional[AlertConfig] = None) -> RecoveryAlert:
    """
    Classify an athlete's latest recovery state.

    Rules are evaluated in order and the first match wins:
    inflammation, circadian, nutrition, airway; otherwise green.
    Only valid records are considered, oldest to newest.
    """
    cfg = config or get_alert_config()
    records = sort_by_date(filter_valid_records(series))
    if not records:
        logger.debug("No valid biometric records; reporting no_data")
        return NO_DATA_ALERT

    latest = records[-1]
    previous = records[-2] if len(records) >= 2 else None
    hrv_drop, rhr_rise = _trend_flags(latest, previous, cfg)

    temp = latest.temp_trend_c
    temp_high = _at_least(temp, cfg.temp_high_c)
    temp_stable = temp is not None and temp < cfg.temp_high_c
    spo2_low = _at_most(latest.metric("spo2_night"), cfg.spo2_low)
    deep_low = _below(latest.metric("deep_sleep_pct"), cfg.deep_sleep_low_pct)
    rem_low = _below(latest.metric("rem_sleep_pct"), cfg.rem_sleep_low_pct)
    resp_high = _at_least(latest.metric("resp_rate_night"), cfg.resp_rate_high)
    sleep_late = is_late_sleep_onset(latest.sleep_onset_time, cfg.late_sleep_onset)

    if hrv_drop and rhr_rise and temp_high and spo2_low:
        return RecoveryAlert(
            type="inflammation",
            title="Inflammation/Illness Risk",
            cause=(
                f"HRV down ({latest.hrv_night}) + RHR up ({latest.resting_hr}) + "
                f"Temp up ({temp}) + SpO2 down ({latest.spo2_night})"
            ),
            recommendation="Prioritize rest, hydration, anti-inflammatory nutrition. Monitor temperature closely.",
        )
    if hrv_drop and deep_low and sleep_late:
        return RecoveryAlert(
            type="circadian",
            title="Circadian Misalignment",
            cause=f"HRV down + Deep Sleep down ({latest.deep_sleep_pct}%) + Late Sleep ({latest.sleep_onset_time})",
            recommendation="Advance bedtime by 45min, increase morning light exposure, avoid screens after 9PM.",
        )
    if hrv_drop and rem_low and temp_stable:
        return RecoveryAlert(
            type="nutrition",
            title="Possible Nutrient Gap",
            cause=f"HRV down + REM down ({latest.rem_sleep_pct}%) with stable temperature",
            recommendation="Check iron, magnesium, omega-3, B12 status. Increase nutrient-dense foods.",
        )
    if spo2_low and resp_high:
        return RecoveryAlert(
            type="airway",
            title="Airway/Respiratory Stress",
            cause=f"SpO2={latest.spo2_night}% + Resp Rate={latest.resp_rate_night}/min",
            recommendation="Evaluate sleep environment, nasal breathing. Consider air quality assessment.",
        )
    return RecoveryAlert(
        type="green",
        title="Optimal Recovery State",
        cause="All metrics within target ranges",
        recommendation="Maintain current training and recovery protocols.",
    )


# ---------------------------------------------------------------------------
# Training load
# ---------------------------------------------------------------------------

def _mean_load(records: List[BiometricRecord]) -> float:
    # Missing load counts as 0 within a week window
    return sum(r.training_load_pct or 0.0 for r in records) / len(records)


def training_load_trend(series: Iterable[Any], config: Optional[AlertConfig] = None) -> TrainingLoadTrend:
    """
    Week-over-week training load trend over valid records in date order.

    Fewer than 7 records -> insufficient_data; 7-13 -> new (value is the
    last week's mean); 14+ -> increasing / decreasing / stable by the
    configured delta (value is the change).
    """
    cfg = config or get_alert_config()
    records = sort_by_date(filter_valid_records(series))
    if len(records) < TREND_WINDOW_DAYS:
        return TrainingLoadTrend(trend="insufficient_data", value=0.0)

    recent = _mean_load(records[-TREND_WINDOW_DAYS:])
    if len(records) < 2 * TREND_WINDOW_DAYS:
        return TrainingLoadTrend(trend="new", value=round(recent, 2))

    previous = _mean_load(records[-2 * TREND_WINDOW_DAYS:-TREND_WINDOW_DAYS])
    change = recent - previous
    if change > cfg.training_load_trend_delta:
        trend = "increasing"
    elif change < -cfg.training_load_trend_delta:
        trend = "decreasing"
    else:
        trend = "stable"
    return TrainingLoadTrend(trend=trend, value=round(change, 2))


# ---------------------------------------------------------------------------
# Recovery events
# ---------------------------------------------------------------------------

_EVENT_RULES: List[Tuple[str, str, Callable[[float], bool]]] = [
    ("High Load Session", "training_load_pct", lambda v: v > 90),
    ("Low HRV", "hrv_night", lambda v: v < 40),
    ("Short Sleep", "sleep_duration_h", lambda v: v < 6),
    ("Elevated RHR", "resting_hr", lambda v: v > 70),
]


def recovery_events(record: Any) -> List[str]:
    """Notable events for one day's readings."""
    record = BiometricRecord.from_raw(record)
    events = []
    for label, field, rule in _EVENT_RULES:
        value = record.metric(field)
        if value is not None and rule(value):
            events.append(label)
    return events
