"""
GitHub integration for buildnum.

Provides the git refs client that stores build-number tags.
"""

from buildnum.core.github.client import DEFAULT_API_URL, GitHubRefStore
from buildnum.core.github.models import GitRef, RefResponse, RepoInfo

__all__ = [
    "DEFAULT_API_URL",
    "GitHubRefStore",
    "GitRef",
    "RefResponse",
    "RepoInfo",
]
