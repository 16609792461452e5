#!/usr/bin/env python3
"""
Score Record Builder - Assembles the immutable CompositeScore record.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from core.scorer.calculator import CompositeResult
from core.scorer.classifier import Classification
from core.scorer.models import CompositeScore, RubricDefinition
from core.scorer.validator import ValidationResult

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_score_record(
    property_id: str,
    rubric: RubricDefinition,
    validation: ValidationResult,
    composite: CompositeResult,
    classification: Classification,
    clock: Optional[Clock] = None
) -> CompositeScore:
    """Assemble a score record.

    The record carries the version of the rubric that produced it, so it can
    be recomputed later from that version rather than the live one.

    Args:
        property_id: Identifier of the scored property
        rubric: Rubric used for validation and computation
        validation: Validated raw scores
        composite: Weighted contributions and composite value
        classification: Computed and displayed index tier
        clock: Callable returning the timestamp to record (defaults to UTC now)

    Returns:
        CompositeScore
    """
    clock = clock or utc_now
    return CompositeScore(
        property_id=str(property_id),
        tier=rubric.tier,
        rubric_version=rubric.version,
        raw_scores=validation.scores,
        weighted_contributions=composite.weighted_contributions,
        composite_value=composite.composite_value,
        index_tier=classification.index_tier,
        computed_tier=classification.computed_tier,
        override=classification.override,
        computed_at=clock()
    )
