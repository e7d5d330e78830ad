"""
Local build number files.

The first job of a run writes the allocated number to the result file and
uploads it as an artifact. Later jobs download it into the cache location;
when that file is present the number is reused instead of allocated again.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BuildNumberFiles:
    """
    Reads the cached build number and writes the allocated one.

    Paths are resolved against ``base_dir`` (defaults to cwd) unless
    absolute.
    """

    def __init__(self, cache_file: Path, result_file: Path, base_dir: Path | None = None) -> None:
        base = base_dir or Path.cwd()
        self.cache_file = base / cache_file
        self.result_file = base / result_file

    def read_cached(self) -> str | None:
        """
        Return the cached build number, or None if no earlier job left one.

        The first non-blank line is used; undecodable bytes are replaced.
        The value is forwarded as-is: one that is not a positive integer is
        logged but not rejected.
        """
        if not self.cache_file.is_file():
            return None

        text = self.cache_file.read_text(encoding="utf-8", errors="replace")
        value = next((line.strip() for line in text.splitlines() if line.strip()), "")
        if not (value.isdigit() and int(value) > 0):
            logger.warning(
                "Cached build number in %s is not a positive integer: %r",
                self.cache_file,
                value,
            )
        return value

    def write_result(self, build_number: int) -> None:
        """Write a newly allocated build number for later jobs."""
        self.result_file.parent.mkdir(parents=True, exist_ok=True)
        self.result_file.write_text(str(build_number), encoding="utf-8")
        logger.debug("Wrote build number %d to %s", build_number, self.result_file)
