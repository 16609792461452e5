#!/usr/bin/env python3
"""
Unit tests for the rubric registry and rubric validation.
"""

import os
import tempfile
import threading
import unittest
from dataclasses import replace

import yaml

from core.config_loader import ScoringConfig
from core.scorer.errors import (
    RubricDefinitionError,
    RubricThresholdsInvalidError,
    RubricWeightsInvalidError,
    UnknownRubricVersionError,
    UnknownTierError,
)
from core.scorer.models import DimensionSpec, IndexThresholds, PropertyTier
from core.scorer.registry import RubricRegistry, validate_rubric
from core.scorer.rubrics import BUILTIN_RUBRICS
from tests.fixtures.rubric_fixtures import ambiance_service_rubric


class TestRubricValidation(unittest.TestCase):
    """Checks performed on every rubric at registry load."""

    def test_builtin_rubrics_are_valid(self):
        for rubric in BUILTIN_RUBRICS:
            validate_rubric(rubric)
            self.assertAlmostEqual(rubric.weight_sum, 1.0, places=9)

    def test_weights_must_sum_to_total(self):
        rubric = ambiance_service_rubric(ambiance_weight=40, service_weight=59)
        with self.assertRaises(RubricWeightsInvalidError) as ctx:
            validate_rubric(rubric)
        self.assertEqual(ctx.exception.tier, PropertyTier.TIER_3)

    def test_weight_sum_within_epsilon_is_accepted(self):
        rubric = ambiance_service_rubric(ambiance_weight=40, service_weight=60 + 5e-7)
        validate_rubric(rubric)

    def test_weight_sum_beyond_epsilon_is_rejected(self):
        rubric = ambiance_service_rubric(ambiance_weight=40, service_weight=60 + 2e-6)
        with self.assertRaises(RubricWeightsInvalidError):
            validate_rubric(rubric)

    def test_negative_weight_rejected(self):
        rubric = ambiance_service_rubric(ambiance_weight=-10, service_weight=110)
        with self.assertRaises(RubricWeightsInvalidError):
            validate_rubric(rubric)

    def test_empty_rubric_rejected(self):
        rubric = replace(ambiance_service_rubric(), dimensions=())
        with self.assertRaises(RubricDefinitionError):
            validate_rubric(rubric)

    def test_duplicate_dimension_rejected(self):
        rubric = replace(ambiance_service_rubric(), dimensions=(
            DimensionSpec('ambiance', 50, 0, 10),
            DimensionSpec('ambiance', 50, 0, 10),
        ))
        with self.assertRaises(RubricDefinitionError):
            validate_rubric(rubric)

    def test_empty_range_rejected(self):
        rubric = replace(ambiance_service_rubric(), dimensions=(
            DimensionSpec('ambiance', 40, 10, 10),
            DimensionSpec('service', 60, 0, 10),
        ))
        with self.assertRaises(RubricDefinitionError):
            validate_rubric(rubric)

    def test_thresholds_must_descend(self):
        rubric = ambiance_service_rubric(thresholds=IndexThresholds(90, 60, 75, 0))
        with self.assertRaises(RubricThresholdsInvalidError):
            validate_rubric(rubric)

    def test_curated_threshold_must_be_zero(self):
        rubric = ambiance_service_rubric(thresholds=IndexThresholds(90, 80, 70, 10))
        with self.assertRaises(RubricThresholdsInvalidError):
            validate_rubric(rubric)

    def test_thresholds_must_stay_within_scale(self):
        rubric = ambiance_service_rubric(thresholds=IndexThresholds(101, 80, 70, 0))
        with self.assertRaises(RubricThresholdsInvalidError):
            validate_rubric(rubric)


class TestRubricRegistry(unittest.TestCase):

    def test_default_registry_serves_builtin_rubrics(self):
        registry = RubricRegistry()
        rubric = registry.get_rubric(PropertyTier.TIER_1)

        self.assertEqual(rubric.version, "v1.0")
        self.assertEqual(rubric.dimension_names[0], "clinical_rigor")
        self.assertEqual(registry.tiers, (PropertyTier.TIER_1, PropertyTier.TIER_2, PropertyTier.TIER_3))

    def test_get_rubric_accepts_scoring_key(self):
        registry = RubricRegistry()
        self.assertEqual(registry.get_rubric("luxury_destination").tier, PropertyTier.TIER_3)

    def test_unregistered_tier_raises(self):
        registry = RubricRegistry(rubrics=[ambiance_service_rubric()])
        with self.assertRaises(UnknownTierError):
            registry.get_rubric(PropertyTier.TIER_1)

    def test_unknown_version_raises(self):
        registry = RubricRegistry()
        with self.assertRaises(UnknownRubricVersionError) as ctx:
            registry.get_rubric(PropertyTier.TIER_3, "v9.9")
        self.assertEqual(ctx.exception.version, "v9.9")

    def test_empty_version_is_not_the_active_version(self):
        registry = RubricRegistry()
        with self.assertRaises(UnknownRubricVersionError) as ctx:
            registry.get_rubric(PropertyTier.TIER_3, "")
        self.assertEqual(ctx.exception.version, "")

    def test_invalid_rubric_fails_construction(self):
        bad = ambiance_service_rubric(ambiance_weight=10, service_weight=10)
        with self.assertRaises(RubricWeightsInvalidError):
            RubricRegistry(rubrics=list(BUILTIN_RUBRICS) + [bad])

    def test_conflicting_duplicate_version_rejected(self):
        first = ambiance_service_rubric(version="dup")
        second = ambiance_service_rubric(version="dup", ambiance_weight=50, service_weight=50)
        with self.assertRaises(RubricDefinitionError):
            RubricRegistry(rubrics=[first, second])

    def test_active_version_selection(self):
        example = ambiance_service_rubric()
        registry = RubricRegistry(
            rubrics=list(BUILTIN_RUBRICS) + [example],
            active_versions={'TIER_3': example.version},
            default_version="v1.0"
        )
        self.assertEqual(registry.active_version(PropertyTier.TIER_3), "test-v1")
        self.assertEqual(registry.active_version(PropertyTier.TIER_1), "v1.0")
        self.assertEqual(registry.versions(PropertyTier.TIER_3), ("v1.0", "test-v1"))

    def test_active_version_must_be_registered(self):
        with self.assertRaises(UnknownRubricVersionError):
            RubricRegistry(active_versions={'TIER_1': "v2.0"})

    def test_register_keeps_previous_versions(self):
        registry = RubricRegistry(rubrics=[ambiance_service_rubric(version="v1")])
        registry.register(
            ambiance_service_rubric(version="v2", ambiance_weight=50, service_weight=50),
            activate=True
        )

        self.assertEqual(registry.active_version(PropertyTier.TIER_3), "v2")
        self.assertEqual(registry.get_rubric(PropertyTier.TIER_3, "v1").dimensions[0].weight, 40)

    def test_register_without_activate_keeps_active_version(self):
        registry = RubricRegistry(rubrics=[ambiance_service_rubric(version="v1")])
        registry.register(ambiance_service_rubric(version="v2"))
        self.assertEqual(registry.active_version(PropertyTier.TIER_3), "v1")

    def test_failed_reload_keeps_old_table(self):
        registry = RubricRegistry()
        bad = replace(BUILTIN_RUBRICS[0], version="v2.0", dimensions=(DimensionSpec('clinical_rigor', 0.5),))

        with self.assertRaises(RubricWeightsInvalidError):
            registry.reload([bad])

        self.assertEqual(registry.active_version(PropertyTier.TIER_1), "v1.0")
        self.assertEqual(len(registry.tiers), 3)

    def test_reload_swaps_whole_table(self):
        registry = RubricRegistry()
        registry.reload([ambiance_service_rubric()])

        self.assertEqual(registry.tiers, (PropertyTier.TIER_3,))
        with self.assertRaises(UnknownTierError):
            registry.get_rubric(PropertyTier.TIER_1)

    def test_readers_never_see_partial_table(self):
        """Concurrent readers always get a rubric whose weights sum to its total."""
        v1 = ambiance_service_rubric(version="v1", ambiance_weight=40, service_weight=60)
        v2 = ambiance_service_rubric(version="v2", ambiance_weight=70, service_weight=30)
        registry = RubricRegistry(rubrics=[v1])
        failures = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                rubric = registry.get_rubric(PropertyTier.TIER_3)
                if rubric not in (v1, v2):
                    failures.append(rubric)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(200):
            registry.reload([v2 if i % 2 == 0 else v1])
        stop.set()
        for t in threads:
            t.join()

        self.assertEqual(failures, [])


class TestRegistryFromConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.rubric_path = os.path.join(self.tmpdir.name, "rubrics.yaml")
        with open(self.rubric_path, "w") as f:
            yaml.safe_dump({
                'rubrics': [{
                    'tier': 'luxury_destination',
                    'version': 'v1.1',
                    'weight_total': 100,
                    'dimensions': [
                        {'name': 'experience_quality', 'weight': 40},
                        {'name': 'wellness_depth', 'weight': 25},
                        {'name': 'transformative_potential', 'weight': 15},
                        {'name': 'setting_environment', 'weight': 10},
                        {'name': 'value_alignment', 'weight': 10},
                    ],
                }]
            }, f)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_builtin_plus_file(self):
        config = ScoringConfig(rubric_files=[self.rubric_path], active_versions={'TIER_3': 'v1.1'})
        registry = RubricRegistry.from_config(config)

        self.assertEqual(registry.active_version(PropertyTier.TIER_3), "v1.1")
        self.assertEqual(registry.active_version(PropertyTier.TIER_1), "v1.0")
        self.assertEqual(registry.get_rubric(PropertyTier.TIER_3).weight_total, 100)
        self.assertEqual(registry.versions(PropertyTier.TIER_3), ("v1.0", "v1.1"))

    def test_file_only(self):
        config = ScoringConfig(include_builtin_rubrics=False, rubric_files=[self.rubric_path])
        registry = RubricRegistry.from_config(config)

        # Configured default v1.0 is not present, so the only registered version is used
        self.assertEqual(registry.tiers, (PropertyTier.TIER_3,))
        self.assertEqual(registry.active_version(PropertyTier.TIER_3), "v1.1")

    def test_invalid_file_is_fatal(self):
        with open(self.rubric_path, "w") as f:
            yaml.safe_dump({
                'rubrics': [{
                    'tier': 'TIER_2',
                    'version': 'broken',
                    'dimensions': [{'name': 'program_effectiveness', 'weight': 0.9}],
                }]
            }, f)

        with self.assertRaises(RubricWeightsInvalidError):
            RubricRegistry.from_config(ScoringConfig(rubric_files=[self.rubric_path]))


if __name__ == '__main__':
    unittest.main()
