"""
Build number allocation.

Allocation is a strictly ordered sequence, each step awaited before the
next one starts:

1. Reuse the number an earlier job of this run already allocated, if any
2. List the existing build-number tags of the namespace
3. Compute max + 1 and claim it by creating a new tag
4. Publish the number to the pipeline and write the result file
5. Delete the tags listed in step 2, concurrently, waiting for all of them

Steps 2 and 3 each make exactly one API call. A failed claim is never
retried: creating a ref is not idempotent, and a second racer's create
fails loudly on GitHub's duplicate-ref check.

Example:
    >>> settings = AllocatorSettings.from_env()
    >>> result = asyncio.run(BuildNumberAllocator(settings).allocate())
    >>> print(result.build_number)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Protocol

from buildnum.core.allocator.files import BuildNumberFiles
from buildnum.core.allocator.markers import (
    MAX_OLD_NUMBERS,
    Marker,
    check_marker_count,
    marker_list_prefix,
    marker_ref,
    marker_stem,
    next_build_number,
    select_markers,
)
from buildnum.core.allocator.outputs import PipelineOutputs
from buildnum.core.config.models import AllocatorSettings
from buildnum.core.exceptions import (
    GarbageCollectionWarning,
    TransportError,
    UnexpectedStatusError,
)
from buildnum.core.github.client import GitHubRefStore
from buildnum.core.github.models import RefResponse, RepoInfo

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
HTTP_NOT_FOUND = 404


class RefStore(Protocol):
    """Remote ref storage the allocator claims build numbers in."""

    async def list_refs(self, ref_prefix: str) -> RefResponse:
        """List refs under ``refs/<ref_prefix>``; 200 or 404."""
        ...

    async def create_ref(self, ref: str, sha: str) -> RefResponse:
        """Create ``ref`` at ``sha``; 201 on success."""
        ...

    async def delete_ref(self, ref: str) -> RefResponse:
        """Delete ``ref``; 204 on success."""
        ...


@dataclass
class AllocationResult:
    """Outcome of one allocate() call."""

    build_number: str
    cached: bool = False
    created_ref: str | None = None
    deleted_refs: list[str] = field(default_factory=list)
    gc_warnings: list[GarbageCollectionWarning] = field(default_factory=list)


@dataclass
class ScopeState:
    """Markers currently present in a namespace."""

    prefix: str
    markers: list[Marker]
    limit: int = MAX_OLD_NUMBERS

    @property
    def next_number(self) -> int:
        return next_build_number(self.markers)

    @property
    def over_limit(self) -> bool:
        return len(self.markers) > self.limit


class BuildNumberAllocator:
    """
    Allocates the next build number for a repository and namespace.

    Args:
        settings: Inputs for this run
        store: Ref store to use; a GitHubRefStore is opened on demand if omitted
        files: Local file access (defaults to the settings' paths)
        outputs: Pipeline output sink (defaults to the settings' files)
        max_old_numbers: Tolerated number of existing markers
    """

    def __init__(
        self,
        settings: AllocatorSettings,
        store: RefStore | None = None,
        files: BuildNumberFiles | None = None,
        outputs: PipelineOutputs | None = None,
        max_old_numbers: int = MAX_OLD_NUMBERS,
    ) -> None:
        self.settings = settings
        self.files = files or BuildNumberFiles(settings.cache_file, settings.result_file)
        self.outputs = outputs or PipelineOutputs(settings.env_file, settings.output_file)
        self.max_old_numbers = max_old_numbers
        self._store = store

    def _open_store(self, repo: RepoInfo) -> AbstractAsyncContextManager[RefStore]:
        if self._store is not None:
            return contextlib.nullcontext(self._store)
        return GitHubRefStore(
            repo,
            self.settings.token,
            api_url=self.settings.api_url,
            timeout=self.settings.timeout,
        )

    async def allocate(self) -> AllocationResult:
        """
        Determine, claim and publish the next build number.

        Returns:
            AllocationResult; ``cached`` is True when an earlier job's
            number was reused and GitHub was not contacted

        Raises:
            ConfigurationError: Token, repository or commit SHA missing
            TransportError: A list or create request failed to complete
            UnexpectedStatusError: GitHub rejected the list or create
            InvariantViolationError: Too many markers exist
        """
        cached = self.files.read_cached()
        if cached is not None:
            logger.info(
                "Build number already generated in earlier jobs, using build number %s.",
                cached,
            )
            self.outputs.publish(cached)
            return AllocationResult(build_number=cached, cached=True)

        repo = self.settings.ensure_complete()
        prefix = self.settings.prefix

        async with self._open_store(repo) as store:
            markers = await self._list_markers(store)
            check_marker_count(markers, prefix, self.max_old_numbers)

            number = next_build_number(markers)
            if markers:
                logger.info("Last build number was %d.", number - 1)
            else:
                logger.info("No %s ref available, starting at 1.", marker_stem(prefix))
            logger.info("Updating build counter to %d...", number)

            created_ref = await self._claim(store, number)
            logger.info("Successfully updated build number to %d", number)

            self.outputs.publish(str(number))
            self.files.write_result(number)

            result = AllocationResult(build_number=str(number), created_ref=created_ref)
            await self._collect_garbage(store, markers, result)

        return result

    async def inspect(self) -> ScopeState:
        """
        List the namespace's markers without changing anything.

        Unlike allocate(), an over-limit namespace is reported through
        ScopeState.over_limit rather than raised.

        Raises:
            ConfigurationError: Token or repository missing
            TransportError: The list request failed to complete
            UnexpectedStatusError: GitHub rejected the list
        """
        repo = self.settings.ensure_complete(require_commit=False)
        async with self._open_store(repo) as store:
            markers = await self._list_markers(store)
        return ScopeState(prefix=self.settings.prefix, markers=markers, limit=self.max_old_numbers)

    async def _list_markers(self, store: RefStore) -> list[Marker]:
        response = await store.list_refs(marker_list_prefix(self.settings.prefix))

        if response.status_code == HTTP_NOT_FOUND:
            return []
        if response.status_code != HTTP_OK:
            raise UnexpectedStatusError("list", response.status_code, response.payload)
        # A non-JSON 200 (proxy page, HTML error) is not an empty namespace
        if not isinstance(response.payload, (list, dict)):
            raise UnexpectedStatusError("list", response.status_code, response.payload)

        markers = select_markers(response.refs(), self.settings.prefix)
        logger.debug("Found %d marker(s): %s", len(markers), [m.ref for m in markers])
        return markers

    async def _claim(self, store: RefStore, number: int) -> str:
        ref = marker_ref(number, self.settings.prefix)
        response = await store.create_ref(ref, self.settings.commit_sha)
        if response.status_code != HTTP_CREATED:
            raise UnexpectedStatusError("create", response.status_code, response.payload)
        return ref

    async def _collect_garbage(
        self, store: RefStore, markers: list[Marker], result: AllocationResult
    ) -> None:
        if not markers:
            return

        logger.info("Deleting %d older build counters...", len(markers))
        outcomes = await asyncio.gather(
            *(self._delete(store, m) for m in markers), return_exceptions=True
        )

        for marker, outcome in zip(markers, outcomes):
            warning = self._as_warning(marker, outcome)
            if warning is None:
                result.deleted_refs.append(marker.ref)
            else:
                result.gc_warnings.append(warning)

    async def _delete(self, store: RefStore, marker: Marker) -> GarbageCollectionWarning | None:
        try:
            response = await store.delete_ref(marker.ref)
        except TransportError as e:
            warning = GarbageCollectionWarning(marker.ref, f"err: {e.reason}")
            logger.warning("%s", warning)
            return warning

        if response.status_code != HTTP_NO_CONTENT:
            warning = GarbageCollectionWarning(
                marker.ref, f"status: {response.status_code}, result: {response.payload!r}"
            )
            logger.warning("%s", warning)
            return warning

        logger.info("Deleted %s", marker.ref)
        return None

    @staticmethod
    def _as_warning(
        marker: Marker, outcome: GarbageCollectionWarning | BaseException | None
    ) -> GarbageCollectionWarning | None:
        if outcome is None or isinstance(outcome, GarbageCollectionWarning):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        warning = GarbageCollectionWarning(marker.ref, f"err: {outcome}")
        logger.warning("%s", warning)
        return warning
