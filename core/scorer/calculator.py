#!/usr/bin/env python3
"""
Composite Calculator - Weighted combination of validated dimension scores.

Formula:
- share = (raw - range_min) / (range_max - range_min)          in [0, 1]
- contribution = share * weight                                 in [0, weight]
- composite = 100 * sum(contributions) / sum(weights)           in [0, 100]

The composite is rounded once, half-to-even, to one decimal place. All
arithmetic runs in decimal.Decimal under a local context so that the same
inputs always produce the same output regardless of caller context.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import Any, Tuple
import logging

from core.scorer.models import RubricDefinition, WeightedContribution
from core.scorer.validator import ValidationResult

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)
COMPOSITE_QUANTUM = Decimal("0.1")
DECIMAL_PRECISION = 28


@dataclass(frozen=True)
class CompositeResult:
    weighted_contributions: Tuple[WeightedContribution, ...]
    composite_value: float


def _to_decimal(value: Any) -> Decimal:
    """Exact decimal of a number's shortest repr (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(repr(float(value)))


def compute_composite(rubric: RubricDefinition, validation: ValidationResult) -> CompositeResult:
    """Combine validated scores into weighted contributions and a 0-100 composite.

    Args:
        rubric: Rubric the scores were validated against
        validation: Output of validate_scores() for the same rubric

    Returns:
        CompositeResult with per-dimension contributions (rubric order) and
        the rounded composite value
    """
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        ctx.rounding = ROUND_HALF_EVEN

        weights = [_to_decimal(d.weight) for d in rubric.dimensions]
        total_weight = sum(weights, Decimal(0))

        contributions = []
        running_total = Decimal(0)
        for dimension, weight in zip(rubric.dimensions, weights):
            raw = validation.scores[dimension.name]
            low = _to_decimal(dimension.min_value)
            high = _to_decimal(dimension.max_value)

            share = (_to_decimal(raw) - low) / (high - low)
            contribution = share * weight
            running_total += contribution

            contributions.append(WeightedContribution(
                dimension=dimension.name,
                raw_score=raw,
                weight=dimension.weight,
                contribution=float(contribution),
                points=float(contribution / total_weight * HUNDRED)
            ))

        composite = (running_total / total_weight * HUNDRED).quantize(COMPOSITE_QUANTUM)

    composite_value = float(composite)
    logger.debug(f"Composite for {rubric.tier.value}/{rubric.version}: {composite_value}")

    return CompositeResult(
        weighted_contributions=tuple(contributions),
        composite_value=composite_value
    )
