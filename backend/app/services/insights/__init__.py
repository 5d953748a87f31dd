"""
Athlete Insights Service

Reconciles genetic-marker and biometric records arriving in inconsistent
shapes, interprets gene/genotype pairs against a curated reference table,
and scores readiness and team comparisons from biometric series.
"""

from .models import (
    Impact,
    ImpactBand,
    SortKey,
    ImpactJudgment,
    MarkerRecord,
    ImpactPartition,
    CategoryCompleteness,
    TraitScore,
    QueryOptions,
    BiometricRecord,
    ReadinessBreakdown,
    TeamComparison,
    RecoveryAlert,
    TrainingLoadTrend,
    TimelinePoint,
)
from .field_resolver import resolve, resolve_first
from .shape_normalizer import PayloadEncoding, detect_encoding, normalize, normalize_summaries
from .identity import identity_key, deduplicate
from .reference_loader import (
    ReferenceDataError,
    ReferenceTable,
    load_reference_table,
    get_reference_table,
    reload_reference_table,
)
from .interpreter import GenotypeInterpreter, create_interpreter
from .query import query, available_categories
from .readiness import ReadinessScorer, create_readiness_scorer
from .cohort import team_average, compare_to_team
from .signals import metric_status, generate_alert, training_load_trend, recovery_events
from .config import (
    get_config,
    update_config,
    reset_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Models
    'Impact',
    'ImpactBand',
    'SortKey',
    'ImpactJudgment',
    'MarkerRecord',
    'ImpactPartition',
    'CategoryCompleteness',
    'TraitScore',
    'QueryOptions',
    'BiometricRecord',
    'ReadinessBreakdown',
    'TeamComparison',
    'RecoveryAlert',
    'TrainingLoadTrend',
    'TimelinePoint',

    # Normalization
    'resolve',
    'resolve_first',
    'PayloadEncoding',
    'detect_encoding',
    'normalize',
    'normalize_summaries',
    'identity_key',
    'deduplicate',

    # Reference data
    'ReferenceDataError',
    'ReferenceTable',
    'load_reference_table',
    'get_reference_table',
    'reload_reference_table',

    # Interpretation
    'GenotypeInterpreter',
    'create_interpreter',
    'query',
    'available_categories',

    # Biometrics
    'ReadinessScorer',
    'create_readiness_scorer',
    'team_average',
    'compare_to_team',
    'metric_status',
    'generate_alert',
    'training_load_trend',
    'recovery_events',

    # Configuration
    'get_config',
    'update_config',
    'reset_config',
    'load_config_from_file',
    'save_config_to_file',
]
