"""Core types and utilities for deps file generation.

This package contains the manifest model, case-insensitive containers,
NuGet naming helpers, errors and schema validation used across the
pipeline.
"""

from .casing import CaseInsensitiveDict, CaseInsensitiveSet
from .errors import DepsFileError
from .nuget import FrameworkName, parse_framework_name
from .types import (
    CompilationLibrary,
    CompilationOptions,
    Dependency,
    DependencyContext,
    FilteredPackageIndex,
    PackageIdentity,
    ResourceAssembly,
    RuntimeAssetGroup,
    RuntimeFallbacks,
    RuntimeLibrary,
    TargetInfo,
    TaskItem,
)
from .validator import validate_deps_document, validate_deps_document_with_error_details

__all__ = [
    "CaseInsensitiveDict",
    "CaseInsensitiveSet",
    "CompilationLibrary",
    "CompilationOptions",
    "Dependency",
    "DependencyContext",
    "DepsFileError",
    "FilteredPackageIndex",
    "FrameworkName",
    "PackageIdentity",
    "ResourceAssembly",
    "RuntimeAssetGroup",
    "RuntimeFallbacks",
    "RuntimeLibrary",
    "TargetInfo",
    "TaskItem",
    "parse_framework_name",
    "validate_deps_document",
    "validate_deps_document_with_error_details",
]
