"""
GitHub data models for buildnum.

Defines Pydantic models for repository identity and git ref payloads.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, computed_field


class RepoInfo(BaseModel):
    """
    GitHub repository information.

    Parsed from the ``owner/repo`` slug GitHub Actions exposes as
    GITHUB_REPOSITORY.

    Example:
        >>> RepoInfo.from_slug("user/repo")
        RepoInfo(owner='user', repo='repo')
    """

    owner: str = Field(..., description="Repository owner (user or organization)")
    repo: str = Field(..., description="Repository name")

    @computed_field
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    @property
    def api_path(self) -> str:
        """REST path prefix for this repository."""
        return f"/repos/{self.owner}/{self.repo}"

    @classmethod
    def from_slug(cls, slug: str) -> RepoInfo | None:
        """
        Parse repository info from an ``owner/repo`` slug.

        Args:
            slug: Repository slug

        Returns:
            RepoInfo or None if the slug is malformed
        """
        match = re.fullmatch(r"([^/\s]+)/([^/\s]+)", slug.strip()) if slug else None
        if not match:
            return None
        return cls(owner=match.group(1), repo=match.group(2))


class GitRef(BaseModel):
    """A git reference as returned by the GitHub git refs API."""

    ref: str = Field(..., description="Fully qualified ref name (refs/tags/...)")
    sha: str = Field(default="", description="SHA of the object the ref points at")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitRef:
        """
        Create a GitRef from an API ref object.

        Args:
            data: ``{"ref": ..., "object": {"sha": ...}}``

        Returns:
            GitRef instance
        """
        obj = data.get("object")
        sha = obj.get("sha", "") if isinstance(obj, dict) else ""
        return cls(ref=str(data.get("ref", "")), sha=str(sha or ""))


class RefResponse(BaseModel):
    """Status code and decoded body of one ref API call."""

    status_code: int
    payload: Any = None

    def refs(self) -> list[GitRef]:
        """
        Decode the payload of a list call into refs.

        The refs endpoint returns a single object instead of an array when
        exactly one ref matches the requested name, so both shapes are
        accepted. Entries without a ``ref`` name are skipped.
        """
        items = self.payload
        if isinstance(items, dict):
            items = [items]
        if not isinstance(items, list):
            return []
        return [GitRef.from_api(item) for item in items if isinstance(item, dict) and item.get("ref")]
