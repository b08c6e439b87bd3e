# masonry_support/config.py
"""
Engine configuration and defaults.

Runtime knobs only (parallelism, reporting, data location). Engineering
constants live in materials.py and are passed explicitly.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = "MASONRY_SUPPORT_"


@dataclass
class EngineConfig:
    """Global engine configuration."""

    # Package metadata
    app_name: str = "masonry-support"
    version: str = "0.1.0"

    # Selection
    top_n_alternatives: int = 10

    # Evaluation (1 worker = in-process map)
    max_workers: int = 1
    chunksize: int = 16

    # Reporting
    progress_every: int = 0      # 0 = about every 1% of the candidates
    show_progress: bool = False  # tqdm bar on stderr

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Channel capacity table (None = packaged CSV)
    channel_data_path: Optional[str] = None


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(env: Mapping[str, str] = os.environ, base: Optional[EngineConfig] = None) -> EngineConfig:
    """A copy of `base` (default CONFIG) with MASONRY_SUPPORT_* overrides applied."""
    config = base or CONFIG
    overrides = {}
    if ENV_PREFIX + "TOP_N" in env:
        overrides["top_n_alternatives"] = int(env[ENV_PREFIX + "TOP_N"])
    if ENV_PREFIX + "MAX_WORKERS" in env:
        overrides["max_workers"] = int(env[ENV_PREFIX + "MAX_WORKERS"])
    if ENV_PREFIX + "LOG_LEVEL" in env:
        overrides["log_level"] = env[ENV_PREFIX + "LOG_LEVEL"]
    if ENV_PREFIX + "JSON_LOGS" in env:
        overrides["json_logs"] = _as_bool(env[ENV_PREFIX + "JSON_LOGS"])
    if ENV_PREFIX + "CHANNEL_DATA" in env:
        overrides["channel_data_path"] = env[ENV_PREFIX + "CHANNEL_DATA"]
    return replace(config, **overrides)


# Global config instance
CONFIG = EngineConfig()
