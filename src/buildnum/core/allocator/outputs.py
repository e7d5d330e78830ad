"""
GitHub Actions outputs.

The build number reaches the rest of the pipeline two ways: as the
BUILD_NUMBER environment variable for later steps (GITHUB_ENV) and as the
``build_number`` step output (GITHUB_OUTPUT).
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_NAME = "BUILD_NUMBER"
OUTPUT_NAME = "build_number"


def append_key_value(path: Path | None, name: str, value: str) -> None:
    """
    Append ``name=value`` to a GitHub Actions command file.

    Outside of Actions (no file configured) the line is printed instead.
    """
    if path is None:
        print(f"{name}={value}")
        return
    with Path(path).open("a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")


class PipelineOutputs:
    """Publishes a build number to the GITHUB_ENV and GITHUB_OUTPUT files."""

    def __init__(self, env_file: Path | None = None, output_file: Path | None = None) -> None:
        self.env_file = env_file
        self.output_file = output_file

    def publish(self, build_number: str) -> None:
        """Write BUILD_NUMBER and build_number for later steps."""
        append_key_value(self.env_file, ENV_NAME, build_number)
        append_key_value(self.output_file, OUTPUT_NAME, build_number)
        logger.debug("Published %s=%s", ENV_NAME, build_number)
