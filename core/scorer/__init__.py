#!/usr/bin/env python3
"""
Scoring Module - Clarus Index tiered composite scoring.

Public API:
- ScoringService: Scoring entry point (score_property / compute_score)
- RubricRegistry: Process-wide rubric table with atomic reload
- CompositeScore: Immutable, auditable score record

The scoring pipeline is split into single-responsibility modules:

- models.py: Data structures (tiers, rubrics, tier scores, score records)
- errors.py: Typed scoring errors
- rubrics.py: Built-in rubrics and YAML rubric files
- registry.py: Rubric registry and rubric validation
- validator.py: Strict dimension validation
- calculator.py: Weighted composite calculation
- classifier.py: Index tier classification and editorial overrides
- builder.py: Score record assembly
- persistence.py: Score sinks (append-only JSON lines)
- interpretation.py: Display helpers for stored scores
- service.py: ScoringService orchestrator
"""

from core.scorer.models import (
    CompositeScore,
    EditorialOverride,
    IndexTier,
    PropertyTier,
    Tier1Scores,
    Tier2Scores,
    Tier3Scores,
    TierScores,
)
from core.scorer.registry import RubricRegistry
from core.scorer.service import ScoringRequest, ScoringResult, ScoringService

__all__ = [
    'CompositeScore',
    'EditorialOverride',
    'IndexTier',
    'PropertyTier',
    'RubricRegistry',
    'ScoringRequest',
    'ScoringResult',
    'ScoringService',
    'Tier1Scores',
    'Tier2Scores',
    'Tier3Scores',
    'TierScores',
]
