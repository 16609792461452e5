#!/usr/bin/env python3
"""
Dimension Validator - Strict schema check of raw scores against a rubric.

Scores are returned unchanged: no coercion, no clamping, no defaults for
missing dimensions.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from types import MappingProxyType
from typing import Any, Mapping

from core.scorer.errors import (
    InvalidScoreValueError,
    MissingDimensionError,
    OutOfRangeError,
    TierMismatchError,
    UnexpectedDimensionError,
)
from core.scorer.models import PropertyTier, RubricDefinition, TierScores

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Range-confirmed scores, keyed in rubric order."""
    tier: PropertyTier
    rubric_version: str
    scores: Mapping[str, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, (Real, Decimal)) and not isinstance(value, bool)


def _is_finite(value: Any) -> bool:
    # ints are exact and may be too large to convert to float
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def validate_scores(rubric: RubricDefinition, tier_scores: TierScores) -> ValidationResult:
    """Validate tier-tagged scores against the rubric for the same tier.

    Checks every declared dimension in rubric order, then rejects undeclared
    keys.

    Raises:
        TierMismatchError: scores tagged for a different tier than the rubric
        MissingDimensionError: a declared dimension is absent
        InvalidScoreValueError: a value is not a real number
        OutOfRangeError: a value is outside the declared inclusive range
        UnexpectedDimensionError: keys the rubric does not declare
    """
    if tier_scores.tier != rubric.tier:
        raise TierMismatchError(rubric.tier, tier_scores.tier)

    values = tier_scores.values
    validated = {}

    for dimension in rubric.dimensions:
        if dimension.name not in values:
            raise MissingDimensionError(dimension.name)

        value = values[dimension.name]
        if not _is_number(value):
            raise InvalidScoreValueError(dimension.name, value)

        # NaN fails both comparisons, so test inclusion rather than exclusion
        in_range = _is_finite(value) and dimension.min_value <= value <= dimension.max_value
        if not in_range:
            raise OutOfRangeError(dimension.name, value, dimension.value_range)

        validated[dimension.name] = value

    unexpected = set(values) - set(rubric.dimension_names)
    if unexpected:
        raise UnexpectedDimensionError(unexpected)

    return ValidationResult(
        tier=rubric.tier,
        rubric_version=rubric.version,
        scores=MappingProxyType(validated)
    )
