#!/usr/bin/env python3
"""
Scoring Models - Data structures for rubrics, tier scores and score records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from core.scorer.errors import UnknownTierError


class PropertyTier(str, Enum):
    """Property classification that selects the scoring rubric."""
    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"
    TIER_3 = "TIER_3"

    @property
    def scoring_key(self) -> str:
        return _TIER_SCORING_KEYS[self]

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "PropertyTier":
        """Accept a PropertyTier, its database name (TIER_1) or its scoring key (medical_longevity)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip()
            for tier in cls:
                if normalized.upper() == tier.value or normalized.lower() == tier.scoring_key:
                    return tier
        raise UnknownTierError(value)


_TIER_SCORING_KEYS = {
    PropertyTier.TIER_1: "medical_longevity",
    PropertyTier.TIER_2: "integrated_wellness",
    PropertyTier.TIER_3: "luxury_destination",
}

_TIER_LABELS = {
    PropertyTier.TIER_1: "Medical Longevity & Clinical Wellness",
    PropertyTier.TIER_2: "Integrated Wellness Retreat",
    PropertyTier.TIER_3: "Luxury Destination Wellness",
}


class IndexTier(str, Enum):
    """Discrete Clarus Index quality band derived from the composite value."""
    EXCEPTIONAL = "EXCEPTIONAL"
    DISTINGUISHED = "DISTINGUISHED"
    NOTABLE = "NOTABLE"
    CURATED = "CURATED"

    @property
    def rank(self) -> int:
        """Higher rank means a better band."""
        return _INDEX_TIER_RANKS[self]


_INDEX_TIER_RANKS = {
    IndexTier.EXCEPTIONAL: 4,
    IndexTier.DISTINGUISHED: 3,
    IndexTier.NOTABLE: 2,
    IndexTier.CURATED: 1,
}


@dataclass(frozen=True)
class IndexThresholds:
    """Inclusive lower bounds of each index tier on the 0-100 scale."""
    exceptional: float = 90.0
    distinguished: float = 80.0
    notable: float = 70.0
    curated: float = 0.0

    def bands(self) -> Tuple[Tuple[IndexTier, float], ...]:
        """Index tiers paired with their lower bound, best band first."""
        return (
            (IndexTier.EXCEPTIONAL, self.exceptional),
            (IndexTier.DISTINGUISHED, self.distinguished),
            (IndexTier.NOTABLE, self.notable),
            (IndexTier.CURATED, self.curated),
        )

    def upper_bound(self, tier: IndexTier) -> float:
        """Exclusive upper bound of a band (100 for the top band, inclusive)."""
        previous = 100.0
        for band, lower in self.bands():
            if band == tier:
                return previous
            previous = lower
        raise ValueError(f"Unknown index tier: {tier}")


@dataclass(frozen=True)
class DimensionSpec:
    """A single scored dimension of a rubric."""
    name: str
    weight: float
    min_value: float = 0.0
    max_value: float = 100.0
    label: str = ""
    description: str = ""

    @property
    def value_range(self) -> Tuple[float, float]:
        return (self.min_value, self.max_value)


@dataclass(frozen=True)
class RubricDefinition:
    """Weighted set of scoring dimensions for one tier at one version."""
    tier: PropertyTier
    version: str
    dimensions: Tuple[DimensionSpec, ...]
    weight_total: float = 1.0
    thresholds: IndexThresholds = field(default_factory=IndexThresholds)

    @property
    def dimension_names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self.dimensions)

    @property
    def weight_sum(self) -> float:
        return sum(d.weight for d in self.dimensions)

    def get_dimension(self, name: str) -> Optional[DimensionSpec]:
        for dimension in self.dimensions:
            if dimension.name == name:
                return dimension
        return None


@dataclass(frozen=True)
class TierScores:
    """Raw per-dimension scores tagged with the tier they were collected for.

    Use one of the tier variants (Tier1Scores, Tier2Scores, Tier3Scores) or
    TierScores.for_tier() to pick the variant from a PropertyTier.
    """
    values: Mapping[str, Any]
    tier: ClassVar[PropertyTier]

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    @classmethod
    def for_tier(cls, tier: Any, values: Mapping[str, Any]) -> "TierScores":
        tier = PropertyTier.parse(tier)
        return _TIER_SCORE_VARIANTS[tier](values)


@dataclass(frozen=True)
class Tier1Scores(TierScores):
    """Medical longevity scores."""
    tier: ClassVar[PropertyTier] = PropertyTier.TIER_1


@dataclass(frozen=True)
class Tier2Scores(TierScores):
    """Integrated wellness scores."""
    tier: ClassVar[PropertyTier] = PropertyTier.TIER_2


@dataclass(frozen=True)
class Tier3Scores(TierScores):
    """Luxury destination scores."""
    tier: ClassVar[PropertyTier] = PropertyTier.TIER_3


_TIER_SCORE_VARIANTS = {
    PropertyTier.TIER_1: Tier1Scores,
    PropertyTier.TIER_2: Tier2Scores,
    PropertyTier.TIER_3: Tier3Scores,
}


@dataclass(frozen=True)
class WeightedContribution:
    """Contribution of one dimension to the composite.

    contribution lies in [0, weight]; points is the same share expressed on
    the 100-point composite scale.
    """
    dimension: str
    raw_score: Any
    weight: float
    contribution: float
    points: float


@dataclass(frozen=True)
class EditorialOverride:
    """Editorial veto that lowers the displayed index tier."""
    index_tier: IndexTier
    reason: str
    applied_by: Optional[str] = None


def _json_number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


@dataclass(frozen=True)
class CompositeScore:
    """Immutable, auditable result of one scoring run."""
    property_id: str
    tier: PropertyTier
    rubric_version: str
    raw_scores: Mapping[str, Any]
    weighted_contributions: Tuple[WeightedContribution, ...]
    composite_value: float
    index_tier: IndexTier
    computed_tier: IndexTier
    computed_at: datetime
    override: Optional[EditorialOverride] = None

    def __post_init__(self):
        object.__setattr__(self, 'raw_scores', MappingProxyType(dict(self.raw_scores)))
        object.__setattr__(self, 'weighted_contributions', tuple(self.weighted_contributions))

    @property
    def is_overridden(self) -> bool:
        return self.override is not None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe rendering of the record."""
        return {
            'property_id': self.property_id,
            'tier': self.tier.value,
            'rubric_version': self.rubric_version,
            'raw_scores': {k: _json_number(v) for k, v in self.raw_scores.items()},
            'weighted_contributions': [
                {
                    'dimension': c.dimension,
                    'raw_score': _json_number(c.raw_score),
                    'weight': _json_number(c.weight),
                    'contribution': c.contribution,
                    'points': c.points,
                }
                for c in self.weighted_contributions
            ],
            'composite_value': self.composite_value,
            'index_tier': self.index_tier.value,
            'computed_tier': self.computed_tier.value,
            'override': {
                'index_tier': self.override.index_tier.value,
                'reason': self.override.reason,
                'applied_by': self.override.applied_by,
            } if self.override else None,
            'computed_at': self.computed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompositeScore":
        """Rebuild a record from its to_dict() rendering (e.g. a stored history line)."""
        override = data.get('override')
        return cls(
            property_id=data['property_id'],
            tier=PropertyTier(data['tier']),
            rubric_version=data['rubric_version'],
            raw_scores=data['raw_scores'],
            weighted_contributions=tuple(
                WeightedContribution(**c) for c in data['weighted_contributions']
            ),
            composite_value=data['composite_value'],
            index_tier=IndexTier(data['index_tier']),
            computed_tier=IndexTier(data['computed_tier']),
            computed_at=datetime.fromisoformat(data['computed_at']),
            override=EditorialOverride(
                index_tier=IndexTier(override['index_tier']),
                reason=override['reason'],
                applied_by=override.get('applied_by')
            ) if override else None,
        )
