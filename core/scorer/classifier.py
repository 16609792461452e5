#!/usr/bin/env python3
"""
Tier Classifier - Maps a composite value to an index tier.

Classification is a small state machine:
- COMPUTED: entered by a single threshold lookup on the composite value
  (inclusive lower bounds, best band first).
- OVERRIDDEN: entered from COMPUTED by an editorial override. The override
  may keep or lower the displayed tier, never raise it. The computed tier
  and the composite value are kept unchanged.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from core.scorer.errors import InvalidOverrideError
from core.scorer.models import EditorialOverride, IndexThresholds, IndexTier

logger = logging.getLogger(__name__)


class ClassificationState(str, Enum):
    COMPUTED = "computed"
    OVERRIDDEN = "overridden"


@dataclass(frozen=True)
class Classification:
    composite_value: float
    computed_tier: IndexTier
    index_tier: IndexTier
    state: ClassificationState = ClassificationState.COMPUTED
    override: Optional[EditorialOverride] = None


class TierClassifier:
    """Threshold lookup plus the editorial override transition."""

    @staticmethod
    def lookup(composite_value: float, thresholds: IndexThresholds) -> IndexTier:
        for tier, lower_bound in thresholds.bands():
            if composite_value >= lower_bound:
                return tier
        # Thresholds end at 0 and composites are never negative
        raise ValueError(f"Composite value {composite_value} below every threshold")

    def classify(
        self,
        composite_value: float,
        thresholds: IndexThresholds,
        override: Optional[EditorialOverride] = None
    ) -> Classification:
        tier = self.lookup(composite_value, thresholds)
        classification = Classification(
            composite_value=composite_value,
            computed_tier=tier,
            index_tier=tier
        )
        if override is not None:
            classification = self.apply_override(classification, override)
        return classification

    @staticmethod
    def apply_override(classification: Classification, override: EditorialOverride) -> Classification:
        """Transition COMPUTED -> OVERRIDDEN.

        Raises:
            InvalidOverrideError: the override tier ranks above the computed tier
        """
        if override.index_tier.rank > classification.computed_tier.rank:
            raise InvalidOverrideError(classification.computed_tier, override.index_tier)

        logger.info(
            f"Editorial override {classification.computed_tier.value} -> "
            f"{override.index_tier.value}: {override.reason}"
        )
        return Classification(
            composite_value=classification.composite_value,
            computed_tier=classification.computed_tier,
            index_tier=override.index_tier,
            state=ClassificationState.OVERRIDDEN,
            override=override
        )
