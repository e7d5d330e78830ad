"""
Build-number marker tags.

A marker is a lightweight tag ``refs/tags/<prefix->build-number-<n>``. The
tag name is the only place the number lives; the commit it points at is
informational.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from buildnum.core.exceptions import InvariantViolationError
from buildnum.core.github.models import GitRef

TAG_REF_PREFIX = "refs/tags/"
MARKER_STEM = "build-number-"

# More markers than this means the counter was tampered with.
MAX_OLD_NUMBERS = 5


@dataclass(frozen=True)
class Marker:
    """A build-number tag and the number it encodes."""

    ref: str
    number: int
    sha: str = ""


def marker_stem(prefix: str = "") -> str:
    """Return the tag name stem for a namespace, e.g. ``rel-build-number-``."""
    return f"{prefix}-{MARKER_STEM}" if prefix else MARKER_STEM


def marker_ref(number: int, prefix: str = "") -> str:
    """Return the fully qualified ref for a build number."""
    return f"{TAG_REF_PREFIX}{marker_stem(prefix)}{number}"


def marker_list_prefix(prefix: str = "") -> str:
    """Return the ``refs/``-relative prefix used to list a namespace's tags."""
    return f"tags/{marker_stem(prefix)}"


def marker_pattern(prefix: str = "") -> re.Pattern[str]:
    """Compile the exact pattern a ref must match to count as a marker."""
    return re.compile(rf"{re.escape(TAG_REF_PREFIX + marker_stem(prefix))}(\d+)")


def parse_marker(ref: GitRef, prefix: str = "") -> Marker | None:
    """
    Parse a ref into a Marker.

    Listing by prefix also returns refs like ``build-number-abc`` or
    ``build-number-3-hotfix``; anything that is not exactly the stem
    followed by digits is rejected.

    Args:
        ref: Ref returned by the list call
        prefix: Namespace being allocated

    Returns:
        Marker, or None if the ref is not a marker of this namespace
    """
    match = marker_pattern(prefix).fullmatch(ref.ref)
    if not match:
        return None
    return Marker(ref=ref.ref, number=int(match.group(1)), sha=ref.sha)


def select_markers(refs: Iterable[GitRef], prefix: str = "") -> list[Marker]:
    """Keep the refs that are markers of ``prefix``, in listing order."""
    markers = []
    for ref in refs:
        marker = parse_marker(ref, prefix)
        if marker is not None:
            markers.append(marker)
    return markers


def check_marker_count(
    markers: list[Marker], prefix: str = "", limit: int = MAX_OLD_NUMBERS
) -> None:
    """
    Enforce the maximum number of markers in a namespace.

    Raises:
        InvariantViolationError: If more than ``limit`` markers exist
    """
    if len(markers) > limit:
        raise InvariantViolationError(marker_stem(prefix), len(markers), limit)


def next_build_number(markers: Iterable[Marker]) -> int:
    """Return one past the highest marker number, or 1 when there are none."""
    return max((m.number for m in markers), default=0) + 1
