#!/usr/bin/env python3
"""
Scoring Errors - Typed, non-retriable failures raised by the scoring engine.

Every failure is a local validation error. Rubric errors are raised while
the registry loads and are fatal at startup; score errors are raised per
call and are recoverable by the caller.
"""

from typing import Any, Iterable, Tuple


class ScoringError(Exception):
    """Base exception for scoring engine errors."""
    pass


class UnknownTierError(ScoringError):
    """Raised when a property tier is not known or has no registered rubric."""

    def __init__(self, tier: Any):
        self.tier = tier
        super().__init__(f"Unknown property tier: {tier!r}")


class UnknownRubricVersionError(ScoringError):
    """Raised when a rubric version is not registered for a tier."""

    def __init__(self, tier: Any, version: str):
        self.tier = tier
        self.version = version
        super().__init__(f"No rubric version {version!r} registered for {tier}")


class TierMismatchError(ScoringError):
    """Raised when scores tagged for one tier are scored against another."""

    def __init__(self, expected: Any, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Scores tagged {actual} cannot be scored as {expected}")


class MissingDimensionError(ScoringError):
    """Raised when a dimension declared by the rubric is absent."""

    def __init__(self, dimension: str):
        self.dimension = dimension
        super().__init__(f"Missing required dimension: {dimension}")


class UnexpectedDimensionError(ScoringError):
    """Raised when raw scores contain dimensions the rubric does not declare."""

    def __init__(self, dimensions: Iterable[str]):
        self.dimensions = tuple(sorted(str(d) for d in dimensions))
        super().__init__(f"Unexpected dimension(s): {', '.join(self.dimensions)}")


class OutOfRangeError(ScoringError):
    """Raised when a dimension score lies outside its declared range."""

    def __init__(self, dimension: str, value: Any, expected_range: Tuple[float, float]):
        self.dimension = dimension
        self.value = value
        self.expected_range = tuple(expected_range)
        low, high = self.expected_range
        super().__init__(f"{dimension}={value!r} outside range [{low}, {high}]")


class InvalidScoreValueError(ScoringError):
    """Raised when a dimension score is not a real number."""

    def __init__(self, dimension: str, value: Any):
        self.dimension = dimension
        self.value = value
        super().__init__(f"{dimension} must be numeric, got {type(value).__name__}")


class RubricWeightsInvalidError(ScoringError):
    """Raised at registry load when rubric weights are negative or do not sum to the total."""

    def __init__(self, tier: Any, version: str, detail: str):
        self.tier = tier
        self.version = version
        self.detail = detail
        super().__init__(f"Invalid weights in rubric {tier}/{version}: {detail}")


class RubricDefinitionError(ScoringError):
    """Raised at registry load when a rubric is structurally invalid."""

    def __init__(self, tier: Any, version: str, detail: str):
        self.tier = tier
        self.version = version
        self.detail = detail
        super().__init__(f"Invalid rubric {tier}/{version}: {detail}")


class RubricThresholdsInvalidError(RubricDefinitionError):
    """Raised at registry load when index tier thresholds do not partition 0-100."""
    pass


class InvalidOverrideError(ScoringError):
    """Raised when an editorial override would raise the computed index tier."""

    def __init__(self, computed: Any, requested: Any):
        self.computed = computed
        self.requested = requested
        super().__init__(f"Override to {requested} would upgrade computed tier {computed}")
