"""
Internal data models for the athlete insights engine.
These models represent normalized genetic markers, curated impact judgments,
biometric readings and the derived structures returned to the presentation layer.
"""

import math
from datetime import date as date_type, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .field_resolver import candidate_names, resolve, resolve_first


class Impact(str, Enum):
    """Curated qualitative judgment for a gene/genotype pair."""
    BENEFICIAL = "beneficial"
    NEUTRAL = "neutral"
    CHALLENGING = "challenging"
    UNKNOWN = "unknown"


class ImpactBand(str, Enum):
    """Display heuristic used by the marker query (not the curated impact)."""
    ALL = "all"
    HIGH = "high"  # homozygous codes
    MEDIUM = "medium"  # heterozygous codes


class SortKey(str, Enum):
    GENE = "gene"
    DBSNP = "dbsnp"
    CATEGORY = "category"
    RSID = "rsid"
    NONE = "none"


class ImpactJudgment(BaseModel):
    """Interpretation of one gene/genotype pair within a category."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    impact: Impact = Field(..., description="beneficial / neutral / challenging / unknown")
    description: str = Field(..., description="Human-readable interpretation")
    color_hint: str = Field(..., alias="colorHint", description="Display color hint (green, yellow, red, gray...)")


UNKNOWN_JUDGMENT = ImpactJudgment(
    impact=Impact.UNKNOWN,
    description="Analysis not available",
    color_hint="gray",
)


class MarkerRecord(BaseModel):
    """One genetic-test result row after normalization."""
    gene: str = Field(..., min_length=1, description="Gene symbol (e.g., ACTN3)")
    genotype: str = Field("", description="Observed genotype (e.g., RR, GG)")
    rsid: str = Field("", description="rsID reported with the marker")
    dbsnp_id: str = Field("", description="dbSNP reference id")
    category: str = Field("", description="Reporting category")
    description: str = Field("", description="Free-text description from the lab")

    @classmethod
    def from_raw(cls, record: Any, category: str = "") -> Optional["MarkerRecord"]:
        """
        Build a MarkerRecord from an upstream row of unknown key casing.
        Returns None when no gene can be resolved.
        """
        if isinstance(record, MarkerRecord):
            return record
        gene = resolve(record, "gene")
        if not gene:
            return None
        return cls(
            gene=gene,
            genotype=resolve_first(record, "genetic_call", "genotype"),
            rsid=resolve(record, "rsid"),
            dbsnp_id=resolve(record, "dbsnp_rs_id"),
            category=resolve(record, "category") or category,
            description=resolve(record, "description"),
        )


class ImpactPartition(BaseModel):
    """Markers grouped by their curated impact."""
    beneficial: List[MarkerRecord] = Field(default_factory=list)
    neutral: List[MarkerRecord] = Field(default_factory=list)
    challenging: List[MarkerRecord] = Field(default_factory=list)
    unknown: List[MarkerRecord] = Field(default_factory=list)

    def bucket(self, impact: Impact) -> List[MarkerRecord]:
        return getattr(self, impact.value)

    def counts(self) -> Dict[str, int]:
        return {impact.value: len(self.bucket(impact)) for impact in Impact}


class CategoryCompleteness(BaseModel):
    """Test coverage for a category - not a performance score."""
    category: str
    observed: int = Field(..., ge=0, description="Distinct defined genes present in the markers")
    total: int = Field(..., ge=0, description="Genes defined for the category in the reference table")
    observed_genes: List[str] = Field(default_factory=list)

    @property
    def ratio(self) -> float:
        return self.observed / self.total if self.total else 0.0


class TraitScore(BaseModel):
    key: str
    label: str
    score: int = Field(..., ge=0, le=100)
    genes_present: List[str] = Field(default_factory=list)


class QueryOptions(BaseModel):
    """Search / filter / sort options for the marker query."""
    search_term: str = ""
    category: Optional[str] = Field(None, description="Exact category; None or 'all' disables the filter")
    impact_band: ImpactBand = ImpactBand.ALL
    sort_key: SortKey = SortKey.GENE


# ---------------------------------------------------------------------------
# Biometrics
# ---------------------------------------------------------------------------

BIOMETRIC_FIELDS = (
    "hrv_night",
    "resting_hr",
    "deep_sleep_pct",
    "rem_sleep_pct",
    "sleep_duration_h",
    "spo2_night",
    "resp_rate_night",
    "temp_trend_c",
    "training_load_pct",
)


def _first_populated(record: Mapping, name: str) -> Any:
    """Raw value under the first candidate key that ``resolve`` would accept."""
    for key in candidate_names(name):
        value = record.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value:
            return value
    return None


def coerce_number(value: Any) -> Optional[float]:
    """Numeric or numeric-string values to float; anything else to None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class BiometricRecord(BaseModel):
    """One day's readings for one athlete."""
    model_config = ConfigDict(extra="ignore")

    athlete_id: str = ""
    date: str = ""

    hrv_night: Optional[float] = None
    resting_hr: Optional[float] = None
    deep_sleep_pct: Optional[float] = None
    rem_sleep_pct: Optional[float] = None
    light_sleep_pct: Optional[float] = None
    sleep_duration_h: Optional[float] = None
    spo2_night: Optional[float] = None
    resp_rate_night: Optional[float] = None
    temp_trend_c: Optional[float] = None
    training_load_pct: Optional[float] = None

    sleep_onset_time: Optional[str] = None
    wake_time: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_keys(cls, data: Any) -> Any:
        """Pick each field from the first populated key spelling, as ``resolve`` does."""
        if not isinstance(data, Mapping):
            return data
        resolved = {}
        for name in cls.model_fields:
            value = _first_populated(data, name)
            if value is not None:
                resolved[name] = value
        return resolved

    @field_validator("athlete_id", "date", mode="before")
    @classmethod
    def _identifier_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (datetime, date_type)):
            return value.isoformat()
        return str(value).strip()

    @field_validator(*BIOMETRIC_FIELDS, "light_sleep_pct", mode="before")
    @classmethod
    def _numeric_or_absent(cls, value: Any) -> Optional[float]:
        return coerce_number(value)

    @field_validator("sleep_onset_time", "wake_time", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @classmethod
    def from_raw(cls, record: Any) -> "BiometricRecord":
        if isinstance(record, BiometricRecord):
            return record
        if not isinstance(record, Mapping):
            return cls()
        return cls.model_validate(dict(record))

    def metric(self, name: str) -> Optional[float]:
        """Positive value of a biometric field, else None."""
        if name not in BIOMETRIC_FIELDS and name != "light_sleep_pct":
            return None
        value = getattr(self, name)
        if value is None or value <= 0:
            return None
        return value

    @property
    def is_valid(self) -> bool:
        """Identifiers present and at least one biometric field positive."""
        if not self.athlete_id or not self.date:
            return False
        return any(self.metric(name) is not None for name in BIOMETRIC_FIELDS)


class ReadinessBreakdown(BaseModel):
    score: float = Field(..., ge=0.0, le=100.0)
    components: Dict[str, float] = Field(default_factory=dict, description="Per-field scaled value in [0, 1]")
    fields_used: List[str] = Field(default_factory=list)


class TeamComparison(BaseModel):
    metric: str
    athlete_id: str
    athlete_value: Optional[float] = None
    team_average: Optional[float] = None
    delta: Optional[float] = None


class RecoveryAlert(BaseModel):
    type: str = Field(..., description="inflammation / circadian / nutrition / airway / green / no_data")
    title: str
    cause: str
    recommendation: str


class TrainingLoadTrend(BaseModel):
    trend: str = Field(..., description="insufficient_data / new / increasing / decreasing / stable")
    value: float = 0.0


class TimelinePoint(BaseModel):
    date: str
    readiness_score: float
    hrv: Optional[float] = None
    resting_hr: Optional[float] = None
    sleep_duration: Optional[float] = None
    spo2: Optional[float] = None
    training_load: Optional[float] = None
    events: List[str] = Field(default_factory=list)
