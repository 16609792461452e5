#!/usr/bin/env python3
"""
Rubric Registry - Process-wide table of scoring rubrics.

Lifecycle:
- init: the registry is built once at startup (see AppContext.build). Every
  rubric is validated before the registry exists; any error is fatal.
- read: get_rubric() reads the current table through a single attribute
  access. The table is never mutated in place.
- reload/register: the administrative path builds and validates a complete
  new table, then swaps it in with one assignment under the writer lock.
  Readers see either the old table or the new one, never a mix. A failed
  reload leaves the old table in place.

Every registered version of every tier stays addressable so that stored
scores can be reproduced from their own rubric_version.
"""

import logging
import math
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from core.config_loader import ScoringConfig
from core.scorer.errors import (
    RubricDefinitionError,
    RubricThresholdsInvalidError,
    RubricWeightsInvalidError,
    UnknownRubricVersionError,
    UnknownTierError,
)
from core.scorer.models import PropertyTier, RubricDefinition
from core.scorer.rubrics import BUILTIN_RUBRICS, load_rubric_file

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-6


def validate_rubric(rubric: RubricDefinition, tolerance: float = WEIGHT_TOLERANCE) -> None:
    """Check a rubric's structure, weights and thresholds.

    Raises:
        RubricDefinitionError: empty, duplicated or badly ranged dimensions
        RubricWeightsInvalidError: negative weights or a sum off the declared total
        RubricThresholdsInvalidError: thresholds that do not partition [0, 100]
    """
    tier, version = rubric.tier, rubric.version

    if not rubric.dimensions:
        raise RubricDefinitionError(tier, version, "rubric declares no dimensions")

    seen = set()
    for dimension in rubric.dimensions:
        if not dimension.name:
            raise RubricDefinitionError(tier, version, "dimension with empty name")
        if dimension.name in seen:
            raise RubricDefinitionError(tier, version, f"duplicate dimension {dimension.name}")
        seen.add(dimension.name)

        if not (math.isfinite(dimension.min_value) and math.isfinite(dimension.max_value)):
            raise RubricDefinitionError(tier, version, f"{dimension.name} has a non-finite range")
        if dimension.min_value >= dimension.max_value:
            raise RubricDefinitionError(
                tier, version,
                f"{dimension.name} range [{dimension.min_value}, {dimension.max_value}] is empty"
            )

        if not math.isfinite(dimension.weight) or dimension.weight < 0:
            raise RubricWeightsInvalidError(tier, version, f"{dimension.name} has weight {dimension.weight}")

    if not math.isfinite(rubric.weight_total) or rubric.weight_total <= 0:
        raise RubricWeightsInvalidError(tier, version, f"weight total {rubric.weight_total} must be positive")

    weight_sum = rubric.weight_sum
    if weight_sum <= 0:
        raise RubricWeightsInvalidError(tier, version, "all weights are zero")
    if abs(weight_sum - rubric.weight_total) > tolerance:
        raise RubricWeightsInvalidError(
            tier, version, f"weights sum to {weight_sum}, expected {rubric.weight_total}"
        )

    bounds = [lower for _, lower in rubric.thresholds.bands()]
    if any(not math.isfinite(b) or b < 0 or b > 100 for b in bounds):
        raise RubricThresholdsInvalidError(tier, version, f"thresholds {bounds} must lie within [0, 100]")
    if rubric.thresholds.curated != 0:
        raise RubricThresholdsInvalidError(tier, version, "CURATED threshold must be 0")
    if any(higher <= lower for higher, lower in zip(bounds, bounds[1:])):
        raise RubricThresholdsInvalidError(tier, version, f"thresholds {bounds} must be strictly descending")


@dataclass(frozen=True)
class _RubricTable:
    rubrics: Mapping[Tuple[PropertyTier, str], RubricDefinition]
    versions: Mapping[PropertyTier, Tuple[str, ...]]
    active: Mapping[PropertyTier, str]


def _build_table(
    rubrics: Iterable[RubricDefinition],
    active_versions: Optional[Mapping] = None,
    default_version: Optional[str] = None,
    tolerance: float = WEIGHT_TOLERANCE
) -> _RubricTable:
    entries: Dict[Tuple[PropertyTier, str], RubricDefinition] = {}
    versions: Dict[PropertyTier, List[str]] = {}

    for rubric in rubrics:
        validate_rubric(rubric, tolerance)
        key = (rubric.tier, rubric.version)
        if key in entries:
            if entries[key] != rubric:
                raise RubricDefinitionError(
                    rubric.tier, rubric.version, "registered twice with different definitions"
                )
            continue
        entries[key] = rubric
        versions.setdefault(rubric.tier, []).append(rubric.version)

    requested = {PropertyTier.parse(t): v for t, v in (active_versions or {}).items()}
    unregistered = set(requested) - set(versions)
    if unregistered:
        raise UnknownTierError(sorted(t.value for t in unregistered)[0])

    active: Dict[PropertyTier, str] = {}
    for tier, tier_versions in versions.items():
        version = requested.get(tier)
        if version is None:
            if default_version in tier_versions:
                version = default_version
            else:
                version = tier_versions[-1]
                if default_version:
                    logger.warning(
                        f"Rubric version {default_version} not registered for {tier.value}, "
                        f"using {version}"
                    )
        if version not in tier_versions:
            raise UnknownRubricVersionError(tier, version)
        active[tier] = version

    return _RubricTable(
        rubrics=MappingProxyType(entries),
        versions=MappingProxyType({t: tuple(v) for t, v in versions.items()}),
        active=MappingProxyType(active),
    )


class RubricRegistry:
    """Read-mostly registry of rubric definitions keyed by tier and version."""

    def __init__(
        self,
        rubrics: Iterable[RubricDefinition] = BUILTIN_RUBRICS,
        active_versions: Optional[Mapping] = None,
        default_version: Optional[str] = None,
        tolerance: float = WEIGHT_TOLERANCE
    ):
        self._tolerance = tolerance
        self._lock = threading.Lock()
        self._table = _build_table(rubrics, active_versions, default_version, tolerance)
        logger.info(f"Rubric registry loaded: {self._describe(self._table)}")

    @classmethod
    def from_config(cls, config: ScoringConfig) -> "RubricRegistry":
        """Build the registry from built-in rubrics plus configured rubric files."""
        rubrics: List[RubricDefinition] = []
        if config.include_builtin_rubrics:
            rubrics.extend(BUILTIN_RUBRICS)
        for path in config.rubric_files:
            rubrics.extend(load_rubric_file(path))

        return cls(
            rubrics=rubrics,
            active_versions=config.active_versions,
            default_version=config.active_rubric_version,
            tolerance=config.weight_tolerance
        )

    @staticmethod
    def _describe(table: _RubricTable) -> str:
        return ", ".join(f"{tier.value}={version}" for tier, version in sorted(table.active.items()))

    @property
    def tiers(self) -> Tuple[PropertyTier, ...]:
        return tuple(sorted(self._table.active))

    def get_rubric(self, tier, version: Optional[str] = None) -> RubricDefinition:
        """Return the rubric for a tier, at the active version unless one is given."""
        table = self._table
        tier = PropertyTier.parse(tier)
        if tier not in table.active:
            raise UnknownTierError(tier)

        if version is None:
            version = table.active[tier]
        rubric = table.rubrics.get((tier, version))
        if rubric is None:
            raise UnknownRubricVersionError(tier, version)
        return rubric

    load_rubric = get_rubric

    def active_version(self, tier) -> str:
        return self.get_rubric(tier).version

    def versions(self, tier) -> Tuple[str, ...]:
        table = self._table
        tier = PropertyTier.parse(tier)
        if tier not in table.versions:
            raise UnknownTierError(tier)
        return table.versions[tier]

    def reload(
        self,
        rubrics: Iterable[RubricDefinition],
        active_versions: Optional[Mapping] = None,
        default_version: Optional[str] = None
    ) -> None:
        """Replace the whole rubric table.

        Versions missing from ``rubrics`` are no longer addressable after the
        swap; use register() to add a version while keeping history.
        """
        table = _build_table(rubrics, active_versions, default_version, self._tolerance)
        with self._lock:
            self._table = table
        logger.info(f"Rubric registry reloaded: {self._describe(table)}")

    def register(self, rubric: RubricDefinition, activate: bool = False) -> None:
        """Add a rubric version, keeping every version already registered."""
        with self._lock:
            current = self._table
            active = dict(current.active)
            if activate or rubric.tier not in active:
                active[rubric.tier] = rubric.version
            table = _build_table(
                list(current.rubrics.values()) + [rubric],
                active_versions=active,
                tolerance=self._tolerance
            )
            self._table = table
        logger.info(
            f"Registered rubric {rubric.tier.value}/{rubric.version}"
            f"{' (active)' if activate else ''}"
        )
