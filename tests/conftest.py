"""
Pytest configuration and shared fixtures.

Provides an in-memory ref store standing in for the GitHub git refs API,
settings pointing at temporary files, and environment isolation for tests
that read GitHub Actions variables.
"""

from pathlib import Path

import pytest

from buildnum.core.config.models import AllocatorSettings
from buildnum.core.exceptions import TransportError
from buildnum.core.github.models import RefResponse

ACTIONS_ENV_VARS = [
    "INPUT_TOKEN",
    "INPUT_PREFIX",
    "GITHUB_REPOSITORY",
    "GITHUB_SHA",
    "GITHUB_API_URL",
    "GITHUB_ENV",
    "GITHUB_OUTPUT",
    "BUILDNUM_TIMEOUT",
]

HEAD_SHA = "0123456789abcdef0123456789abcdef01234567"


# ==============================================================================
# Fake Ref Store
# ==============================================================================


class FakeRefStore:
    """
    In-memory stand-in for GitHubRefStore.

    Behaves like the GitHub refs endpoints (404 on an empty listing, 422 on
    a duplicate create) unless a status is forced through the attributes.
    Every call is recorded in ``calls`` as ``(operation, argument)``.
    """

    def __init__(self, refs: dict[str, str] | None = None) -> None:
        self.refs: dict[str, str] = dict(refs or {})
        self.calls: list[tuple[str, str]] = []

        self.list_response: RefResponse | None = None
        self.list_error: Exception | None = None
        self.create_response: RefResponse | None = None
        self.create_error: Exception | None = None
        self.delete_statuses: dict[str, int] = {}
        self.delete_errors: dict[str, Exception] = {}

    def calls_to(self, operation: str) -> list[str]:
        return [arg for op, arg in self.calls if op == operation]

    async def list_refs(self, ref_prefix: str) -> RefResponse:
        self.calls.append(("list", ref_prefix))
        if self.list_error is not None:
            raise self.list_error
        if self.list_response is not None:
            return self.list_response

        matches = [
            {"ref": ref, "object": {"sha": sha, "type": "commit"}}
            for ref, sha in self.refs.items()
            if ref.startswith(f"refs/{ref_prefix}")
        ]
        if not matches:
            return RefResponse(status_code=404, payload={"message": "Not Found"})
        return RefResponse(status_code=200, payload=matches)

    async def create_ref(self, ref: str, sha: str) -> RefResponse:
        self.calls.append(("create", ref))
        if self.create_error is not None:
            raise self.create_error
        if self.create_response is not None:
            return self.create_response
        if ref in self.refs:
            return RefResponse(status_code=422, payload={"message": "Reference already exists"})
        self.refs[ref] = sha
        return RefResponse(
            status_code=201, payload={"ref": ref, "object": {"sha": sha, "type": "commit"}}
        )

    async def delete_ref(self, ref: str) -> RefResponse:
        self.calls.append(("delete", ref))
        if ref in self.delete_errors:
            raise self.delete_errors[ref]
        if ref in self.delete_statuses:
            return RefResponse(status_code=self.delete_statuses[ref], payload=None)
        if self.refs.pop(ref, None) is None:
            return RefResponse(status_code=422, payload={"message": "Reference does not exist"})
        return RefResponse(status_code=204)


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove GitHub Actions variables and point .env lookups at tmp_path."""
    # setenv first so monkeypatch restores (or removes) each variable afterwards,
    # including ones a test loads through load_layered_env.
    for name in ACTIONS_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def workdir(tmp_path) -> Path:
    """Working directory holding the build number and Actions command files."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def settings(workdir: Path) -> AllocatorSettings:
    """Complete settings with all files under the working directory."""
    return AllocatorSettings(
        token="ghs_test",
        repository="octo/widgets",
        commit_sha=HEAD_SHA,
        cache_file=workdir / "BUILD_NUMBER" / "BUILD_NUMBER",
        result_file=workdir / "BUILD_NUMBER",
        env_file=workdir / "github_env",
        output_file=workdir / "github_output",
    )


@pytest.fixture
def store() -> FakeRefStore:
    """Empty fake ref store."""
    return FakeRefStore()


@pytest.fixture
def make_store():
    """Factory for a fake ref store pre-populated with ``{ref: sha}``."""
    return FakeRefStore


@pytest.fixture
def transport_error():
    """Factory for the error a dropped connection produces."""

    def _make(operation: str, ref: str) -> TransportError:
        return TransportError(operation, ref, "Connection reset by peer")

    return _make
