"""Resolved closure sources for the deps file pipeline.

This package contains the lock file model and the source interface.
Concrete readers live in the platforms/ directory.
"""

from .base import (
    ClosureSource,
    LockFile,
    LockFileItem,
    LockFileLibrary,
    LockFileTarget,
    LockFileTargetLibrary,
    PackageDependency,
)

__all__ = [
    "ClosureSource",
    "LockFile",
    "LockFileItem",
    "LockFileLibrary",
    "LockFileTarget",
    "LockFileTargetLibrary",
    "PackageDependency",
]
