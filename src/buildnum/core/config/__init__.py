"""
Configuration for buildnum.

Settings come from the GitHub Actions environment, optionally seeded from
layered .env files for local runs.
"""

from buildnum.core.config.env import load_layered_env
from buildnum.core.config.models import (
    DEFAULT_CACHE_FILE,
    DEFAULT_RESULT_FILE,
    AllocatorSettings,
)

__all__ = [
    "AllocatorSettings",
    "DEFAULT_CACHE_FILE",
    "DEFAULT_RESULT_FILE",
    "load_layered_env",
]
