"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For rubric and clock helpers shared with unittest-style tests, see
tests/fixtures/rubric_fixtures.py
"""

import pytest

from core.scorer.registry import RubricRegistry
from core.scorer.rubrics import BUILTIN_RUBRICS
from core.scorer.service import ScoringService
from tests.fixtures.rubric_fixtures import ambiance_service_rubric, fixed_clock


@pytest.fixture
def example_rubric():
    """TIER_3 rubric with ambiance (40) and service (60), both ranged 0-10."""
    return ambiance_service_rubric()


@pytest.fixture
def registry(example_rubric):
    """Registry holding the built-in rubrics plus the example rubric as active TIER_3."""
    return RubricRegistry(
        rubrics=list(BUILTIN_RUBRICS) + [example_rubric],
        active_versions={'TIER_3': example_rubric.version}
    )


@pytest.fixture
def scoring_service(registry):
    return ScoringService(registry=registry, clock=fixed_clock)
