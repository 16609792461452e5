#!/usr/bin/env python3
"""
Score Interpretation - Display helpers for stored Clarus Index scores.

These helpers only read CompositeScore values; they never recompute a
score.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from core.scorer.classifier import TierClassifier
from core.scorer.models import (
    CompositeScore,
    IndexThresholds,
    IndexTier,
    PropertyTier,
    WeightedContribution,
)

DEVELOPING_BELOW = 60.0


@dataclass(frozen=True)
class TierDescriptor:
    tier: IndexTier
    label: str
    description: str
    min_score: float
    max_score: float


@dataclass(frozen=True)
class ScoreInterpretation:
    tier: IndexTier
    label: str
    description: str


class DimensionLevel(str, Enum):
    EXCELLENT = "excellent"
    STRONG = "strong"
    GOOD = "good"
    DEVELOPING = "developing"
    NEEDS_IMPROVEMENT = "needs_improvement"


@dataclass(frozen=True)
class DimensionInterpretation:
    level: DimensionLevel
    label: str


@dataclass(frozen=True)
class ScoreComparison:
    difference: float
    percent_change: float
    direction: str  # up | down | unchanged


_TIER_TEXT = {
    IndexTier.EXCEPTIONAL: ('Exceptional', 'Among the finest wellness destinations globally'),
    IndexTier.DISTINGUISHED: ('Distinguished', 'Excellent across all dimensions'),
    IndexTier.NOTABLE: ('Notable', 'Strong performance with notable strengths'),
    IndexTier.CURATED: ('Curated', 'Selected for specific areas of excellence'),
}

_DIMENSION_LEVELS = (
    (90.0, DimensionLevel.EXCELLENT, 'Excellent'),
    (75.0, DimensionLevel.STRONG, 'Strong'),
    (60.0, DimensionLevel.GOOD, 'Good'),
    (45.0, DimensionLevel.DEVELOPING, 'Developing'),
)

# Reference averages shown next to a property's score
DEFAULT_TIER_AVERAGES = {
    PropertyTier.TIER_1: 82.0,
    PropertyTier.TIER_2: 78.0,
    PropertyTier.TIER_3: 75.0,
}


def describe_index_tier(tier: IndexTier, thresholds: Optional[IndexThresholds] = None) -> TierDescriptor:
    thresholds = thresholds or IndexThresholds()
    label, description = _TIER_TEXT[tier]
    lower = dict(thresholds.bands())[tier]
    return TierDescriptor(
        tier=tier,
        label=label,
        description=description,
        min_score=lower,
        max_score=thresholds.upper_bound(tier)
    )


def interpret_score(value: float, thresholds: Optional[IndexThresholds] = None) -> ScoreInterpretation:
    """Label a composite value; low CURATED scores read as 'Developing'."""
    tier = TierClassifier.lookup(value, thresholds or IndexThresholds())
    if tier == IndexTier.CURATED and value < DEVELOPING_BELOW:
        return ScoreInterpretation(tier=tier, label='Developing', description='Shows promise in specific areas')

    label, description = _TIER_TEXT[tier]
    return ScoreInterpretation(tier=tier, label=label, description=description)


def interpret_dimension(score: float, min_value: float = 0.0, max_value: float = 100.0) -> DimensionInterpretation:
    normalized = (score - min_value) / (max_value - min_value) * 100.0
    for lower, level, label in _DIMENSION_LEVELS:
        if normalized >= lower:
            return DimensionInterpretation(level=level, label=label)
    return DimensionInterpretation(level=DimensionLevel.NEEDS_IMPROVEMENT, label='Needs Improvement')


def compare_scores(score_a: float, score_b: float) -> ScoreComparison:
    difference = score_a - score_b
    percent_change = (difference / score_b) * 100 if score_b != 0 else 0.0

    if difference > 0:
        direction = 'up'
    elif difference < 0:
        direction = 'down'
    else:
        direction = 'unchanged'

    return ScoreComparison(
        difference=difference,
        percent_change=round(percent_change, 1),
        direction=direction
    )


def rank_contributions(record: CompositeScore) -> List[WeightedContribution]:
    """Contributions sorted by points, highest first (rubric order on ties)."""
    return sorted(record.weighted_contributions, key=lambda c: c.points, reverse=True)


def tier_average(tier: PropertyTier) -> float:
    return DEFAULT_TIER_AVERAGES[PropertyTier.parse(tier)]


def format_score(value: float) -> str:
    return str(Decimal(repr(float(value))).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_score_with_tier(value: float) -> str:
    return f"{format_score(value)} - {interpret_score(value).label}"
