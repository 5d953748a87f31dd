"""
Configuration for the athlete insights engine.
Centralizes tunable parameters for readiness scoring, metric status bands,
alert rules and reference data loading.
"""

import os
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, model_validator

load_dotenv(find_dotenv())


class FieldScale(BaseModel):
    """Linear scale for one readiness input."""

    weight: float = Field(
        default=1.0,
        ge=0.0,
        description="Relative weight of the field in the composite score"
    )

    poor: float = Field(
        ...,
        description="Value at (or beyond) which the field contributes 0"
    )

    optimal: float = Field(
        ...,
        description="Value at (or beyond) which the field contributes 1"
    )

    higher_is_better: bool = Field(
        default=True,
        description="Direction of the field; False for resting heart rate"
    )

    @model_validator(mode="after")
    def _anchors_follow_direction(self) -> "FieldScale":
        # Equal anchors act as a threshold in either direction
        if self.optimal == self.poor:
            return self
        if (self.optimal > self.poor) != self.higher_is_better:
            expected = "above" if self.higher_is_better else "below"
            raise ValueError(
                f"optimal ({self.optimal}) must lie {expected} poor ({self.poor}) "
                f"when higher_is_better is {self.higher_is_better}"
            )
        return self


class ReadinessConfig(BaseModel):
    """Configuration for the composite readiness score."""

    hrv_night: FieldScale = Field(
        default_factory=lambda: FieldScale(poor=35.0, optimal=45.0),
        description="Overnight HRV (ms)"
    )

    resting_hr: FieldScale = Field(
        default_factory=lambda: FieldScale(poor=75.0, optimal=65.0, higher_is_better=False),
        description="Resting heart rate (bpm)"
    )

    sleep_duration_h: FieldScale = Field(
        default_factory=lambda: FieldScale(poor=6.5, optimal=7.5),
        description="Sleep duration (hours)"
    )

    spo2_night: FieldScale = Field(
        default_factory=lambda: FieldScale(poor=94.0, optimal=96.0),
        description="Overnight blood oxygen saturation (%)"
    )

    def scales(self) -> Dict[str, FieldScale]:
        return {
            "hrv_night": self.hrv_night,
            "resting_hr": self.resting_hr,
            "sleep_duration_h": self.sleep_duration_h,
            "spo2_night": self.spo2_night,
        }


class StatusBand(BaseModel):
    """Inclusive [low, high] ranges for green / yellow / red status."""
    green: Tuple[float, float]
    yellow: Tuple[float, float]
    red: Tuple[float, float]


class AlertConfig(BaseModel):
    """Thresholds for the recovery alert rules."""

    hrv_drop_ratio: float = Field(
        default=0.15,
        ge=0.0,
        description="Relative HRV drop between the last two records that counts as a drop"
    )

    rhr_rise_ratio: float = Field(
        default=0.05,
        ge=0.0,
        description="Relative resting HR rise between the last two records that counts as a rise"
    )

    hrv_low_fallback: float = Field(
        default=40.0,
        description="Single-record fallback: HRV below this counts as a drop"
    )

    rhr_high_fallback: float = Field(
        default=70.0,
        description="Single-record fallback: resting HR above this counts as a rise"
    )

    temp_high_c: float = Field(default=37.0, description="Temperature trend treated as elevated")
    spo2_low: float = Field(default=94.0, description="SpO2 at or below this is low")
    deep_sleep_low_pct: float = Field(default=17.0, description="Deep sleep below this is low")
    rem_sleep_low_pct: float = Field(default=16.0, description="REM sleep below this is low")
    resp_rate_high: float = Field(default=17.0, description="Respiratory rate at or above this is high")

    late_sleep_onset: str = Field(
        default="23:30",
        description="Sleep onset at or after this HH:MM counts as late"
    )

    training_load_trend_delta: float = Field(
        default=5.0,
        ge=0.0,
        description="Week-over-week training load change that counts as a trend"
    )


class RemoteConfig(BaseModel):
    """HTTP settings for remote reference data."""

    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_tries: int = Field(default=3, ge=1)


def _default_metric_thresholds() -> Dict[str, StatusBand]:
    return {
        "hrv_night": StatusBand(green=(45, 100), yellow=(35, 44), red=(0, 34)),
        "resting_hr": StatusBand(green=(45, 65), yellow=(66, 75), red=(76, 120)),
        "spo2_night": StatusBand(green=(96, 100), yellow=(94, 95), red=(0, 93)),
        "deep_sleep_pct": StatusBand(green=(18, 30), yellow=(15, 17), red=(0, 14)),
        "rem_sleep_pct": StatusBand(green=(18, 30), yellow=(15, 17), red=(0, 14)),
        "sleep_duration_h": StatusBand(green=(7.5, 10), yellow=(6.5, 7.4), red=(0, 6.4)),
        "temp_trend_c": StatusBand(green=(36.0, 36.8), yellow=(36.9, 36.9), red=(37.0, 40.0)),
    }


class InsightsConfig(BaseModel):
    """Main configuration for the insights engine."""

    readiness: ReadinessConfig = Field(
        default_factory=ReadinessConfig,
        description="Readiness score weights and anchors"
    )

    metric_thresholds: Dict[str, StatusBand] = Field(
        default_factory=_default_metric_thresholds,
        description="Status bands per biometric field"
    )

    alerts: AlertConfig = Field(
        default_factory=AlertConfig,
        description="Recovery alert thresholds"
    )

    remote: RemoteConfig = Field(
        default_factory=RemoteConfig,
        description="Remote reference data settings"
    )

    # None means the reference table bundled with the package
    reference_source: Optional[str] = Field(
        default_factory=lambda: os.getenv("ATHLETE_REFERENCE_SOURCE") or None,
        description="Path or http(s) URL of the reference table JSON"
    )

    verbose_logging: bool = Field(
        default=True,
        description="Log reference loading details at INFO"
    )


# Global configuration instance
_config: InsightsConfig = InsightsConfig()


def get_config() -> InsightsConfig:
    """Get the global configuration instance."""
    return _config


def update_config(**kwargs):
    """Update configuration parameters."""
    global _config
    current_dict = _config.model_dump()

    for key, value in kwargs.items():
        if '.' in key:
            # Nested keys like 'readiness.hrv_night.weight'
            parts = key.split('.')
            current = current_dict
            for part in parts[:-1]:
                current = current[part]
            current[parts[-1]] = value
        else:
            current_dict[key] = value

    _config = InsightsConfig(**current_dict)
    return _config


def reset_config():
    """Restore defaults."""
    global _config
    _config = InsightsConfig()
    return _config


def load_config_from_file(filepath: str):
    """Load configuration from a JSON file."""
    import json
    global _config

    with open(filepath, 'r') as f:
        config_dict = json.load(f)

    _config = InsightsConfig(**config_dict)
    return _config


def save_config_to_file(filepath: str):
    """Save current configuration to a JSON file."""
    import json

    with open(filepath, 'w') as f:
        json.dump(_config.model_dump(), f, indent=2)


# Convenience accessors
def get_readiness_config() -> ReadinessConfig:
    return _config.readiness


def get_alert_config() -> AlertConfig:
    return _config.alerts


def get_metric_thresholds() -> Dict[str, StatusBand]:
    return _config.metric_thresholds
