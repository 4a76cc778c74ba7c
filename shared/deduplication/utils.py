"""
Utility functions for deduplication.

Contains:
- Configuration loading
- Factory functions
"""

from pathlib import Path
from typing import Optional, Union

import yaml

from shared.logging import get_logger

from .consolidation import ConsolidationChecker, DEFAULT_CONSOLIDATION_THRESHOLD

log = get_logger("shared", "deduplication.utils")

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """
    Load the full YAML config.

    Args:
        config_path: Path to config file. If None, uses config.yaml at the project root

    Returns:
        Config dict ({} when the file is missing or unreadable)
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning(
            "deduplication.config_load_failed",
            config_path=str(config_path),
            error=str(e),
        )
        return {}


def load_dedup_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """Load the `deduplication` section of the config."""
    return load_config(config_path).get("deduplication", {}) or {}


def get_consolidation_checker(config: Optional[dict] = None) -> ConsolidationChecker:
    """
    Factory function to create a ConsolidationChecker.

    Args:
        config: Full config dict or its `deduplication` section. If None,
                loads from config.yaml

    Returns:
        Configured ConsolidationChecker
    """
    if config is None:
        dedup_config = load_dedup_config()
    else:
        dedup_config = config.get("deduplication", config)

    return ConsolidationChecker(
        threshold=dedup_config.get(
            "consolidation_threshold", DEFAULT_CONSOLIDATION_THRESHOLD
        ),
        stats_log_interval=dedup_config.get("stats_log_interval", 0),
    )
