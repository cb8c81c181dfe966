"""
Settings loading for the lazy sequence library.

Defaults come from ``SeqSettings``; ``LAZYSEQ_*`` environment variables
override them, and ``configure()`` overrides both at runtime.
"""

import logging
import os
from typing import Mapping, Optional

from models import SeqSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "LAZYSEQ_"
LIBRARY_LOGGERS = ("seq", "config", "utils")

_settings: Optional[SeqSettings] = None


def load_settings(env: Optional[Mapping[str, str]] = None) -> SeqSettings:
    """Build settings from defaults plus environment overrides."""
    if env is None:
        env = os.environ
    values = {}
    for field_name in SeqSettings.model_fields:
        raw = env.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None:
            values[field_name] = raw
    return SeqSettings(**values)


def get_settings() -> SeqSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
        apply_log_level(_settings)
    return _settings


def configure(**overrides) -> SeqSettings:
    """Validate and install new settings on top of the current ones."""
    global _settings
    merged = {**get_settings().model_dump(), **overrides}
    _settings = SeqSettings(**merged)
    apply_log_level(_settings)
    logger.info(f"Settings updated: {_settings.model_dump()}")
    return _settings


def reset_settings() -> None:
    """Forget installed settings; the next get_settings() reloads from env."""
    global _settings
    _settings = None


def apply_log_level(settings: SeqSettings) -> None:
    level = logging.getLevelName(settings.log_level)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level)
