"""Deps File Generator.

This package assembles the deps.json dependency manifest of a compiled
application from its resolved package closure and references, removes the
files conflict resolution excluded, and writes the result for the runtime
host.
"""

# Core library interface
from .pipeline import DepsFilePipeline
from .registry import ClosureSourceRegistry
from .sources.base import ClosureSource, LockFile
from .config import TaskInputs

# Manifest engine
from .store_manifests import get_filtered_packages, parse_store_artifacts
from .transformers import ConflictTrimmer, ManifestBuilder
from .writer import DepsJsonWriter

# Core utilities
from .core import DependencyContext, DepsFileError, PackageIdentity
from .core import validate_deps_document, validate_deps_document_with_error_details

# CLI interface
from .cli import generate_deps_file, main

__version__ = "0.1.0"

# Auto-discover and register all platforms
ClosureSourceRegistry.discover_platforms()

__all__ = [
    # Primary library interface
    "DepsFilePipeline",
    "ClosureSourceRegistry",
    "ClosureSource",
    "LockFile",
    "TaskInputs",
    # Manifest engine
    "ConflictTrimmer",
    "ManifestBuilder",
    "DepsJsonWriter",
    "get_filtered_packages",
    "parse_store_artifacts",
    # Core utilities
    "DependencyContext",
    "DepsFileError",
    "PackageIdentity",
    "validate_deps_document",
    "validate_deps_document_with_error_details",
    # CLI
    "generate_deps_file",
    "main",
]
