"""Manifest assembly and transformation.

This package contains the builder that assembles a manifest from a
resolved closure and the transformers that rewrite assembled manifests.
"""

from .base import ContextTransformer
from .builder import ManifestBuilder
from .trimmer import ConflictTrimmer

__all__ = ["ContextTransformer", "ConflictTrimmer", "ManifestBuilder"]
