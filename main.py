import argparse
import json
import logging
import sys

from pydantic import ValidationError

from core.app_context import AppContext
from core.config_loader import load_config
from core.scorer.errors import ScoringError
from core.scorer.interpretation import interpret_dimension, interpret_score, rank_contributions
from core.scorer.models import EditorialOverride, IndexTier

logger = logging.getLogger(__name__)

EXIT_SCORING_ERROR = 1
EXIT_INVALID_RUBRICS = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Clarus Index scoring")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml')
    parser.add_argument('--property-id', type=str, required=True,
                        help='Identifier of the property being scored')
    parser.add_argument('--tier', type=str, required=True,
                        help='Property tier: TIER_1/TIER_2/TIER_3 or its scoring key')
    parser.add_argument('--scores', type=str, required=True,
                        help='JSON file with dimension -> raw score ("-" for stdin)')
    parser.add_argument('--rubric-version', type=str, default=None,
                        help='Rubric version to score with (default: active version)')
    parser.add_argument('--override-tier', type=str, default=None,
                        choices=[t.value for t in IndexTier],
                        help='Editorial override of the index tier (may only lower it)')
    parser.add_argument('--override-reason', type=str, default=None)
    parser.add_argument('--override-by', type=str, default=None)
    parser.add_argument('--save', action='store_true',
                        help='Append the record to the configured history file')
    parser.add_argument('--explain', action='store_true',
                        help='Include score interpretation in the output')

    args = parser.parse_args(argv)
    if args.override_tier and not args.override_reason:
        parser.error('--override-tier requires --override-reason')
    return args


def load_scores(path: str) -> dict:
    """Read raw dimension scores from a JSON file or stdin."""
    if path == '-':
        return json.load(sys.stdin)
    with open(path, "r") as f:
        return json.load(f)


def build_explanation(record, rubric) -> dict:
    summary = interpret_score(record.composite_value, rubric.thresholds)
    return {
        'label': summary.label,
        'description': summary.description,
        'dimensions': [
            {
                'dimension': c.dimension,
                'points': round(c.points, 1),
                'level': interpret_dimension(
                    c.raw_score,
                    *rubric.get_dimension(c.dimension).value_range
                ).level.value,
            }
            for c in rank_contributions(record)
        ],
    }


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(
        level=config.logging.level.upper(),
        format=config.logging.format
    )

    try:
        context = AppContext.build(config, save_scores=args.save)
    except (ScoringError, ValidationError, OSError) as e:
        logger.error(f"Invalid rubric configuration, refusing to score: {e}")
        return EXIT_INVALID_RUBRICS

    if args.save and context.score_sink is None:
        logger.warning("--save given but no output.history_file configured; record will not be saved")

    override = None
    if args.override_tier:
        override = EditorialOverride(
            index_tier=IndexTier(args.override_tier),
            reason=args.override_reason,
            applied_by=args.override_by
        )

    try:
        raw_scores = load_scores(args.scores)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read scores from {args.scores}: {e}")
        return EXIT_SCORING_ERROR
    if not isinstance(raw_scores, dict):
        logger.error(f"Scores in {args.scores} must be a JSON object of dimension -> score")
        return EXIT_SCORING_ERROR

    result = context.scoring_service.score_property(
        property_id=args.property_id,
        tier=args.tier,
        raw_scores=raw_scores,
        rubric_version=args.rubric_version,
        override=override
    )

    if not result.ok:
        print(json.dumps({
            'error': result.error.__class__.__name__,
            'message': str(result.error),
        }))
        return EXIT_SCORING_ERROR

    output = result.score.to_dict()
    if args.explain:
        rubric = context.registry.get_rubric(result.score.tier, result.score.rubric_version)
        output['interpretation'] = build_explanation(result.score, rubric)
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
