"""Environment loading helpers.

Local runs of buildnum can keep INPUT_TOKEN and friends in .env files
instead of exporting them:
- OS environment (highest precedence)
- Project environment files (.env, .env.local)
- User environment file (~/.config/buildnum/.env)

Variables already present in the process environment are never overridden,
so inside a pipeline the runner's values always win.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def default_user_env_paths() -> list[Path]:
    """Return the per-user .env location under XDG_CONFIG_HOME."""
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [xdg_home / "buildnum" / ".env"]


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file, dropping keys without a value. Missing files read as empty."""
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Load environment variables from user + project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        The variables that were added to os.environ
    """
    base = project_dir or Path.cwd()
    if user_env_paths is None:
        user_env_paths = default_user_env_paths()
    if project_env_paths is None:
        project_env_paths = [base / ".env", base / ".env.local"]

    protected = set(os.environ)
    loaded: dict[str, str] = {}

    # Later files win over earlier ones; the OS environment wins over all.
    for path in [*user_env_paths, *project_env_paths]:
        for key, value in read_env_file(Path(path)).items():
            if key not in protected:
                loaded[key] = value

    os.environ.update(loaded)
    return loaded
