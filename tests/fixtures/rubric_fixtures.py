"""
Rubric and clock fixtures shared by the scoring tests.
"""

from datetime import datetime, timezone

from core.scorer.models import DimensionSpec, IndexThresholds, PropertyTier, RubricDefinition

FIXED_TIME = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_TIME


def ambiance_service_rubric(
    version: str = "test-v1",
    ambiance_weight: float = 40,
    service_weight: float = 60,
    thresholds: IndexThresholds = None
) -> RubricDefinition:
    """Two-dimension TIER_3 rubric on a 0-10 range, weights out of 100."""
    return RubricDefinition(
        tier=PropertyTier.TIER_3,
        version=version,
        dimensions=(
            DimensionSpec(name='ambiance', weight=ambiance_weight, min_value=0, max_value=10),
            DimensionSpec(name='service', weight=service_weight, min_value=0, max_value=10),
        ),
        weight_total=100,
        thresholds=thresholds or IndexThresholds(
            exceptional=90, distinguished=75, notable=60, curated=0
        ),
    )


def tier1_scores() -> dict:
    """Medical longevity scores for a flagship clinic (all 0-100)."""
    return {
        'clinical_rigor': 96,
        'outcome_evidence': 92,
        'program_depth': 95,
        'experience_quality': 93,
        'value_alignment': 88,
    }
