#!/usr/bin/env python3
"""
Rubric Definitions - Built-in Clarus Index rubrics and YAML rubric files.

A rubric file is a YAML document of the form:

    rubrics:
      - tier: TIER_3
        version: v1.1
        weight_total: 100
        thresholds: {exceptional: 90, distinguished: 80, notable: 70, curated: 0}
        dimensions:
          - {name: experience_quality, weight: 40, min_value: 0, max_value: 100}
          - ...

Structural checks (weight sums, threshold ordering) are done by the
RubricRegistry when the rubrics are registered, not here.
"""

import logging
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from core.scorer.models import DimensionSpec, IndexThresholds, PropertyTier, RubricDefinition

logger = logging.getLogger(__name__)

DEFAULT_RUBRIC_VERSION = "v1.0"


class DimensionSchema(BaseModel):
    name: str
    weight: float
    min_value: float = 0.0
    max_value: float = 100.0
    label: str = ""
    description: str = ""


class ThresholdsSchema(BaseModel):
    exceptional: float = 90.0
    distinguished: float = 80.0
    notable: float = 70.0
    curated: float = 0.0


class RubricSchema(BaseModel):
    tier: str
    version: str
    weight_total: float = 1.0
    thresholds: ThresholdsSchema = Field(default_factory=ThresholdsSchema)
    dimensions: List[DimensionSchema]

    def to_definition(self) -> RubricDefinition:
        return RubricDefinition(
            tier=PropertyTier.parse(self.tier),
            version=self.version,
            dimensions=tuple(DimensionSpec(**d.model_dump()) for d in self.dimensions),
            weight_total=self.weight_total,
            thresholds=IndexThresholds(**self.thresholds.model_dump()),
        )


class RubricFileSchema(BaseModel):
    rubrics: List[RubricSchema] = Field(default_factory=list)


def _dimension(name: str, weight: float, label: str, description: str) -> DimensionSpec:
    return DimensionSpec(name=name, weight=weight, label=label, description=description)


TIER1_RUBRIC = RubricDefinition(
    tier=PropertyTier.TIER_1,
    version=DEFAULT_RUBRIC_VERSION,
    dimensions=(
        _dimension('clinical_rigor', 0.30, 'Clinical Rigor',
                   'Medical credentials, diagnostic depth, evidence-based protocols, physician ratios'),
        _dimension('outcome_evidence', 0.25, 'Outcome Evidence',
                   'Published results, guest-reported outcomes, follow-up protocols'),
        _dimension('program_depth', 0.20, 'Program Depth',
                   'Comprehensiveness, customization, duration options'),
        _dimension('experience_quality', 0.15, 'Experience Quality',
                   'Facilities, service, accommodation, dining'),
        _dimension('value_alignment', 0.10, 'Value Alignment',
                   'Price relative to what is delivered'),
    ),
)

TIER2_RUBRIC = RubricDefinition(
    tier=PropertyTier.TIER_2,
    version=DEFAULT_RUBRIC_VERSION,
    dimensions=(
        _dimension('program_effectiveness', 0.25, 'Program Effectiveness',
                   'Guest-reported outcomes, expert assessment'),
        _dimension('holistic_integration', 0.25, 'Holistic Integration',
                   'How well clinical and wellness elements combine'),
        _dimension('practitioner_quality', 0.20, 'Practitioner Quality',
                   'Credentials, experience, guest feedback on individuals'),
        _dimension('experience_quality', 0.20, 'Experience Quality',
                   'Facilities, service, accommodation, dining'),
        _dimension('value_alignment', 0.10, 'Value Alignment',
                   'Price relative to what is delivered'),
    ),
)

TIER3_RUBRIC = RubricDefinition(
    tier=PropertyTier.TIER_3,
    version=DEFAULT_RUBRIC_VERSION,
    dimensions=(
        _dimension('experience_quality', 0.35, 'Experience Quality',
                   'Facilities, service, ambiance, accommodation'),
        _dimension('wellness_depth', 0.25, 'Wellness Offering Depth',
                   'Range and quality of treatments, practitioner skill'),
        _dimension('transformative_potential', 0.20, 'Transformative Potential',
                   'Can this stay create lasting change?'),
        _dimension('setting_environment', 0.10, 'Setting & Environment',
                   'Location, natural surroundings, sense of escape'),
        _dimension('value_alignment', 0.10, 'Value Alignment',
                   'Price relative to what is delivered'),
    ),
)

BUILTIN_RUBRICS = (TIER1_RUBRIC, TIER2_RUBRIC, TIER3_RUBRIC)


def parse_rubric_document(data: Optional[dict]) -> List[RubricDefinition]:
    """Convert a parsed rubric YAML document into rubric definitions."""
    document = RubricFileSchema(**(data or {}))
    return [rubric.to_definition() for rubric in document.rubrics]


def load_rubric_file(path: str) -> List[RubricDefinition]:
    """Load rubric definitions from a YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f)

    rubrics = parse_rubric_document(data)
    logger.info(f"Loaded {len(rubrics)} rubric(s) from {path}")
    return rubrics
