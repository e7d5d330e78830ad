"""Tests for the buildnum exception hierarchy."""

import pytest

from buildnum.core.exceptions import (
    BuildNumberError,
    ConfigurationError,
    GarbageCollectionWarning,
    InvariantViolationError,
    RefStoreError,
    TransportError,
    UnexpectedStatusError,
)


class TestHierarchy:
    """All errors share one base so the CLI can report them uniformly."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError(["INPUT_TOKEN"]),
            TransportError("list", "tags/build-number-", "timed out"),
            UnexpectedStatusError("create", 500, None),
            InvariantViolationError("build-number-", 6, 5),
            GarbageCollectionWarning("refs/tags/build-number-1", "status: 500"),
        ],
    )
    def test_base_class(self, error) -> None:
        """Test that every error is a BuildNumberError."""
        assert isinstance(error, BuildNumberError)

    def test_ref_store_errors(self) -> None:
        """Test that API failures share RefStoreError."""
        assert issubclass(TransportError, RefStoreError)
        assert issubclass(UnexpectedStatusError, RefStoreError)


class TestMessages:
    """Error messages as they appear in the workflow log."""

    def test_configuration_error(self) -> None:
        error = ConfigurationError(["GITHUB_SHA"])

        assert str(error) == "Environment variable GITHUB_SHA is not defined."
        assert error.context == {"missing": ["GITHUB_SHA"]}

    def test_configuration_error_custom_message(self) -> None:
        error = ConfigurationError(["GITHUB_REPOSITORY"], message="bad repo")

        assert str(error) == "bad repo"
        assert error.missing == ["GITHUB_REPOSITORY"]

    def test_unexpected_status_includes_payload(self) -> None:
        error = UnexpectedStatusError("list", 403, {"message": "Resource not accessible"})

        assert str(error) == (
            "Failed to list build-number ref: http status 403, "
            'error: {"message": "Resource not accessible"}'
        )
        assert error.status_code == 403
        assert error.operation == "list"

    def test_unexpected_status_unserializable_payload(self) -> None:
        error = UnexpectedStatusError("create", 500, {"when": object})

        assert "http status 500" in str(error)

    def test_transport_error(self) -> None:
        error = TransportError("create", "/repos/o/r/git/refs", "Connection refused")

        assert str(error) == "Failed to create ref /repos/o/r/git/refs: Connection refused"
        assert error.reason == "Connection refused"

    def test_invariant_violation(self) -> None:
        error = InvariantViolationError("rel-build-number-", 7, 5)

        assert str(error) == (
            "Too many rel-build-number- refs in repository, found 7, "
            "expected at most 5. Check your tags!"
        )
        assert error.found == 7
        assert error.limit == 5

    def test_gc_warning(self) -> None:
        warning = GarbageCollectionWarning("refs/tags/build-number-3", "status: 422, result: None")

        assert str(warning) == "Failed to delete ref refs/tags/build-number-3, status: 422, result: None"
        assert warning.ref == "refs/tags/build-number-3"
