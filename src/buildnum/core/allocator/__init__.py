"""
Build number allocation.

Public API:
    - BuildNumberAllocator: list, claim, publish and clean up build-number tags
    - AllocationResult / ScopeState: results of allocate() and inspect()
    - Marker helpers: naming and parsing of build-number tags
"""

from buildnum.core.allocator.files import BuildNumberFiles
from buildnum.core.allocator.markers import (
    MAX_OLD_NUMBERS,
    Marker,
    marker_ref,
    marker_stem,
    next_build_number,
)
from buildnum.core.allocator.outputs import PipelineOutputs
from buildnum.core.allocator.service import (
    AllocationResult,
    BuildNumberAllocator,
    RefStore,
    ScopeState,
)

__all__ = [
    "AllocationResult",
    "BuildNumberAllocator",
    "BuildNumberFiles",
    "MAX_OLD_NUMBERS",
    "Marker",
    "PipelineOutputs",
    "RefStore",
    "ScopeState",
    "marker_ref",
    "marker_stem",
    "next_build_number",
]
