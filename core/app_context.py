from dataclasses import dataclass
from typing import Optional
import logging

from core.config_loader import AppConfig
from core.scorer.persistence import JsonLinesScoreSink
from core.scorer.registry import RubricRegistry
from core.scorer.service import ScoringService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    The rubric registry is the only process-wide scoring state. It is built
    here once at startup; an invalid rubric raises out of build() so the
    process never starts serving with a partial rubric table.
    """
    config: AppConfig
    registry: RubricRegistry
    scoring_service: ScoringService
    score_sink: Optional[JsonLinesScoreSink] = None

    @classmethod
    def build(cls, config: AppConfig, save_scores: bool = True) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            save_scores: Attach the configured history sink (if any)

        Returns:
            Fully wired AppContext instance

        Raises:
            ScoringError: a configured rubric is invalid (fatal at startup)
        """
        registry = RubricRegistry.from_config(config.scoring)

        score_sink = None
        if save_scores:
            score_sink = cls._build_score_sink(config)

        scoring_service = ScoringService(registry=registry, sink=score_sink)

        return cls(
            config=config,
            registry=registry,
            scoring_service=scoring_service,
            score_sink=score_sink
        )

    @staticmethod
    def _build_score_sink(config: AppConfig) -> Optional[JsonLinesScoreSink]:
        """Build the append-only history sink if a history file is configured."""
        history_file = config.output.history_file if config.output else None
        if not history_file:
            return None

        logger.info(f"Saving scores to {history_file}")
        return JsonLinesScoreSink(history_file)
