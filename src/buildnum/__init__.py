"""
buildnum - CI build numbers stored as git tags

Allocates a monotonically increasing build number per repository and keeps
it on GitHub as a lightweight ``build-number-<n>`` tag.
"""

__version__ = "2.1.0"

# Re-export core types for convenience
from buildnum.core.allocator.service import AllocationResult, BuildNumberAllocator
from buildnum.core.config.models import AllocatorSettings

__all__ = ["AllocationResult", "AllocatorSettings", "BuildNumberAllocator", "__version__"]
