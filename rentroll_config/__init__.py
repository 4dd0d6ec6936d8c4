"""
rentroll_config -- runtime settings for the import pipeline.

``load_settings()`` is the single way to obtain an ``ImportSettings``:
defaults, then an optional YAML file, then environment overrides.
"""

from rentroll_config.loader import load_settings, parse_settings
from rentroll_config.schema import DEFAULT_DATE_FORMATS, ImportSettings

__all__ = [
    "DEFAULT_DATE_FORMATS",
    "ImportSettings",
    "load_settings",
    "parse_settings",
]
