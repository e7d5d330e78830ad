"""
GitHub git refs client for buildnum.

Talks to the GitHub REST API over httpx to list, create and delete the
tags that carry build numbers. Every call happens at most once: there is
no retry, because creating a ref is not idempotent.
"""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any

import httpx

from buildnum import __version__
from buildnum.core.exceptions import TransportError
from buildnum.core.github.models import RefResponse, RepoInfo

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class GitHubRefStore:
    """
    Async client for the GitHub git refs API.

    Each method returns the raw status code and decoded body so the caller
    decides which statuses are acceptable. Connection failures are raised
    as TransportError.

    Example:
        >>> async with GitHubRefStore(repo, token="ghp_...") as store:
        ...     response = await store.list_refs("tags/build-number-")
        ...     print(response.status_code)
    """

    def __init__(
        self,
        repo: RepoInfo,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize GitHubRefStore.

        Args:
            repo: Repository the refs live in
            token: GitHub token with contents write access
            api_url: API base URL (GitHub Enterprise servers differ)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.repo = repo
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {token}",
                "User-Agent": f"buildnum/{__version__}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubRefStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def list_refs(self, ref_prefix: str) -> RefResponse:
        """
        List refs whose name starts with ``refs/<ref_prefix>``.

        Args:
            ref_prefix: Prefix below ``refs/`` (e.g. ``tags/build-number-``)

        Returns:
            RefResponse; 200 with a list of refs, 404 when nothing matches
        """
        return await self._request("list", "GET", f"{self.repo.api_path}/git/refs/{ref_prefix}")

    async def create_ref(self, ref: str, sha: str) -> RefResponse:
        """
        Create a lightweight ref pointing at a commit.

        Args:
            ref: Fully qualified ref name (``refs/tags/...``)
            sha: Commit SHA to anchor the ref at

        Returns:
            RefResponse; 201 on success
        """
        return await self._request(
            "create",
            "POST",
            f"{self.repo.api_path}/git/refs",
            body={"ref": ref, "sha": sha},
        )

    async def delete_ref(self, ref: str) -> RefResponse:
        """
        Delete a ref.

        Args:
            ref: Fully qualified ref name (``refs/tags/...``)

        Returns:
            RefResponse; 204 on success
        """
        return await self._request("delete", "DELETE", f"{self.repo.api_path}/git/{ref}")

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> RefResponse:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.RequestError as e:
            raise TransportError(operation, path, str(e) or type(e).__name__) from e

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return RefResponse(status_code=response.status_code, payload=_decode(response))


def _decode(response: httpx.Response) -> Any:
    """Decode a response body: JSON when possible, raw text otherwise, None if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text
