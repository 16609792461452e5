#!/usr/bin/env python3
"""
Scoring Service - Clarus Index scoring entry point.

Runs the scoring pipeline for one property:
- Rubric Registry: rubric for the tier (active or requested version)
- Dimension Validator: strict schema and range check of raw scores
- Composite Calculator: weighted contributions and 0-100 composite
- Tier Classifier: index tier, with optional editorial override
- Score Record Builder: immutable CompositeScore

The service holds no mutable state of its own and may be called
concurrently. Scoring errors are deterministic, so nothing is retried: the
caller has to fix the input.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union
import logging

from core.scorer.builder import Clock, build_score_record, utc_now
from core.scorer.calculator import compute_composite
from core.scorer.classifier import TierClassifier
from core.scorer.errors import ScoringError, TierMismatchError
from core.scorer.models import CompositeScore, EditorialOverride, PropertyTier, TierScores
from core.scorer.persistence import ScoreSink
from core.scorer.registry import RubricRegistry
from core.scorer.validator import validate_scores

logger = logging.getLogger(__name__)

RawScores = Union[TierScores, Mapping[str, Any]]


@dataclass(frozen=True)
class ScoringRequest:
    property_id: str
    tier: Any
    raw_scores: RawScores
    rubric_version: Optional[str] = None
    override: Optional[EditorialOverride] = None


@dataclass(frozen=True)
class ScoringResult:
    """Either a score record or the scoring error that prevented it."""
    score: Optional[CompositeScore] = None
    error: Optional[ScoringError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> CompositeScore:
        if self.error is not None:
            raise self.error
        return self.score


class ScoringService:
    """
    Service for computing Clarus Index scores.

    Successful records are handed to the optional sink; the service never
    reads them back.
    """

    def __init__(
        self,
        registry: RubricRegistry,
        sink: Optional[ScoreSink] = None,
        clock: Optional[Clock] = None
    ):
        self.registry = registry
        self.sink = sink
        self.clock = clock or utc_now
        self.classifier = TierClassifier()

    @staticmethod
    def _tag_scores(tier: PropertyTier, raw_scores: RawScores) -> TierScores:
        if isinstance(raw_scores, TierScores):
            if raw_scores.tier != tier:
                raise TierMismatchError(tier, raw_scores.tier)
            return raw_scores
        if not isinstance(raw_scores, Mapping):
            raise TypeError(f"raw_scores must be a mapping, got {type(raw_scores).__name__}")
        return TierScores.for_tier(tier, raw_scores)

    def _score(
        self,
        property_id: str,
        tier: Any,
        raw_scores: RawScores,
        rubric_version: Optional[str] = None,
        clock: Optional[Clock] = None,
        override: Optional[EditorialOverride] = None
    ) -> CompositeScore:
        tier = PropertyTier.parse(tier)
        rubric = self.registry.get_rubric(tier, rubric_version)
        tier_scores = self._tag_scores(tier, raw_scores)

        validation = validate_scores(rubric, tier_scores)
        composite = compute_composite(rubric, validation)
        classification = self.classifier.classify(
            composite.composite_value, rubric.thresholds, override
        )
        record = build_score_record(
            property_id=property_id,
            rubric=rubric,
            validation=validation,
            composite=composite,
            classification=classification,
            clock=clock or self.clock
        )

        logger.debug(
            f"Property {property_id}: {tier.value}/{rubric.version} "
            f"composite={record.composite_value:.1f} tier={record.index_tier.value}"
        )
        return record

    def compute_score(
        self,
        property_id: str,
        tier: Any,
        raw_scores: RawScores,
        rubric_version: Optional[str] = None,
        clock: Optional[Clock] = None,
        override: Optional[EditorialOverride] = None
    ) -> CompositeScore:
        """Score a property, raising ScoringError on invalid input.

        Args:
            property_id: Identifier of the property
            tier: PropertyTier (or its name / scoring key)
            raw_scores: Tier-tagged scores or a plain dimension -> score mapping
            rubric_version: Rubric version to use (defaults to the tier's active version)
            clock: Timestamp source for computed_at (defaults to the service clock)
            override: Optional editorial override of the index tier

        Returns:
            CompositeScore
        """
        record = self._score(property_id, tier, raw_scores, rubric_version, clock, override)
        if self.sink is not None:
            self.sink.save_score(record)
        return record

    def score_property(
        self,
        property_id: str,
        tier: Any,
        raw_scores: RawScores,
        rubric_version: Optional[str] = None,
        clock: Optional[Clock] = None,
        override: Optional[EditorialOverride] = None
    ) -> ScoringResult:
        """Score a property, returning scoring errors in the result instead of raising."""
        try:
            record = self.compute_score(property_id, tier, raw_scores, rubric_version, clock, override)
        except ScoringError as e:
            logger.warning(f"Scoring rejected for property {property_id}: {e}")
            return ScoringResult(error=e)
        return ScoringResult(score=record)

    def score_properties(
        self,
        requests: Iterable[ScoringRequest],
        clock: Optional[Clock] = None
    ) -> List[ScoringResult]:
        """Score several properties.

        Returns:
            Successful results sorted by composite value (highest first),
            followed by failed results in request order
        """
        results = [
            self.score_property(
                property_id=request.property_id,
                tier=request.tier,
                raw_scores=request.raw_scores,
                rubric_version=request.rubric_version,
                clock=clock,
                override=request.override
            )
            for request in requests
        ]

        scored = [r for r in results if r.ok]
        failed = [r for r in results if not r.ok]
        scored.sort(key=lambda r: r.score.composite_value, reverse=True)

        logger.info(f"Scored {len(scored)} properties, {len(failed)} rejected")
        return scored + failed

    def rescore(
        self,
        previous: CompositeScore,
        raw_scores: Optional[RawScores] = None,
        clock: Optional[Clock] = None,
        override: Optional[EditorialOverride] = None
    ) -> CompositeScore:
        """Score a property again under its tier's active rubric.

        Produces a new record; ``previous`` is not modified and stays
        reproducible under its own rubric version.
        """
        return self.compute_score(
            property_id=previous.property_id,
            tier=previous.tier,
            raw_scores=raw_scores if raw_scores is not None else previous.raw_scores,
            clock=clock,
            override=override
        )

    def reproduce(self, record: CompositeScore) -> CompositeScore:
        """Recompute a stored record from its own rubric version, inputs and timestamp."""
        return self._score(
            property_id=record.property_id,
            tier=record.tier,
            raw_scores=record.raw_scores,
            rubric_version=record.rubric_version,
            clock=lambda: record.computed_at,
            override=record.override
        )

    def is_reproducible(self, record: CompositeScore) -> bool:
        return self.reproduce(record) == record
