import yaml
import os
from typing import List, Optional, Dict
from pydantic import BaseModel, Field


class ScoringConfig(BaseModel):
    """
    Configuration for the scoring engine.

    Rubrics are loaded once at startup: the built-in rubrics (unless
    disabled) followed by every file in rubric_files, in order.
    """
    include_builtin_rubrics: bool = True
    rubric_files: List[str] = Field(default_factory=list)

    # Version used for every tier unless active_versions names another one
    active_rubric_version: Optional[str] = "v1.0"
    active_versions: Dict[str, str] = Field(default_factory=dict)  # e.g. {"TIER_3": "v1.1"}

    # Allowed difference between the sum of weights and the declared total
    weight_tolerance: float = 1e-6


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class OutputConfig(BaseModel):
    # Append-only JSON-lines score history; None disables saving
    history_file: Optional[str] = None


class AppConfig(BaseModel):
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another directory), try the repository root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for rubric files
    env_rubric_files = os.environ.get("CLARUS_RUBRIC_FILES")
    if env_rubric_files:
        data.setdefault('scoring', {})
        data['scoring']['rubric_files'] = [p for p in env_rubric_files.split(os.pathsep) if p]

    # Allow env var override for the active rubric version
    env_rubric_version = os.environ.get("CLARUS_ACTIVE_RUBRIC_VERSION")
    if env_rubric_version:
        data.setdefault('scoring', {})
        data['scoring']['active_rubric_version'] = env_rubric_version

    # Allow env var override for log level
    env_log_level = os.environ.get("CLARUS_LOG_LEVEL")
    if env_log_level:
        data.setdefault('logging', {})
        data['logging']['level'] = env_log_level

    # Allow env var override for the score history file
    env_history_file = os.environ.get("CLARUS_HISTORY_FILE")
    if env_history_file:
        data.setdefault('output', {})
        data['output']['history_file'] = env_history_file

    return AppConfig(**data)
