"""
Configuration data models for buildnum.

AllocatorSettings is built once at process start from the pipeline
environment and handed to the allocator, with validation via Pydantic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from buildnum.core.exceptions import ConfigurationError
from buildnum.core.github.client import DEFAULT_API_URL, DEFAULT_TIMEOUT
from buildnum.core.github.models import RepoInfo

logger = logging.getLogger(__name__)

# Relative to the working directory. An earlier job uploads BUILD_NUMBER as
# an artifact; later jobs download it into a BUILD_NUMBER/ directory.
DEFAULT_CACHE_FILE = Path("BUILD_NUMBER") / "BUILD_NUMBER"
DEFAULT_RESULT_FILE = Path("BUILD_NUMBER")

# Environment variable backing each required setting, in report order.
REQUIRED_ENV = {
    "token": "INPUT_TOKEN",
    "repository": "GITHUB_REPOSITORY",
    "commit_sha": "GITHUB_SHA",
}


class AllocatorSettings(BaseModel):
    """
    Inputs for one build number allocation.

    Required values default to empty strings so a cached build number can
    be forwarded without credentials; ensure_complete() enforces them
    before GitHub is contacted.
    """

    token: str = Field(default="", repr=False, description="GitHub token (INPUT_TOKEN)")
    repository: str = Field(default="", description="owner/repo (GITHUB_REPOSITORY)")
    commit_sha: str = Field(default="", description="Commit to tag (GITHUB_SHA)")
    prefix: str = Field(default="", description="Optional counter namespace (INPUT_PREFIX)")
    api_url: str = Field(default=DEFAULT_API_URL, description="GitHub API base URL")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds")
    cache_file: Path = Field(
        default=DEFAULT_CACHE_FILE,
        description="Build number left by an earlier job of the same run",
    )
    result_file: Path = Field(
        default=DEFAULT_RESULT_FILE,
        description="Where a freshly allocated number is written",
    )
    env_file: Optional[Path] = Field(default=None, description="GITHUB_ENV file")
    output_file: Optional[Path] = Field(default=None, description="GITHUB_OUTPUT file")

    @field_validator("token", "repository", "commit_sha", "prefix", "api_url")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Trim stray whitespace from action inputs."""
        return v.strip()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AllocatorSettings:
        """
        Build settings from GitHub Actions environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            AllocatorSettings instance
        """
        env = os.environ if environ is None else environ

        timeout = DEFAULT_TIMEOUT
        if timeout_str := env.get("BUILDNUM_TIMEOUT"):
            try:
                timeout = float(timeout_str)
                if timeout <= 0:
                    raise ValueError(timeout_str)
            except ValueError:
                logger.warning("Invalid BUILDNUM_TIMEOUT value '%s', ignoring", timeout_str)
                timeout = DEFAULT_TIMEOUT

        return cls(
            token=env.get("INPUT_TOKEN", ""),
            repository=env.get("GITHUB_REPOSITORY", ""),
            commit_sha=env.get("GITHUB_SHA", ""),
            prefix=env.get("INPUT_PREFIX", ""),
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            timeout=timeout,
            env_file=Path(env["GITHUB_ENV"]) if env.get("GITHUB_ENV") else None,
            output_file=Path(env["GITHUB_OUTPUT"]) if env.get("GITHUB_OUTPUT") else None,
        )

    def missing_fields(self, *, require_commit: bool = True) -> list[str]:
        """Return the environment variable names of unset required settings."""
        return [
            name
            for field, name in REQUIRED_ENV.items()
            if not getattr(self, field) and (require_commit or field != "commit_sha")
        ]

    def ensure_complete(self, *, require_commit: bool = True) -> RepoInfo:
        """
        Check required inputs before talking to GitHub.

        Args:
            require_commit: False for read-only use, where no tag is created

        Returns:
            Parsed repository info

        Raises:
            ConfigurationError: If a required input is missing or the
                repository is not an owner/repo slug
        """
        missing = self.missing_fields(require_commit=require_commit)
        if missing:
            raise ConfigurationError(missing)

        repo = RepoInfo.from_slug(self.repository)
        if repo is None:
            raise ConfigurationError(
                ["GITHUB_REPOSITORY"],
                message=f"GITHUB_REPOSITORY must look like owner/repo, got '{self.repository}'.",
            )
        return repo
