"""Closure source that reads the project.assets.json written by restore."""

from pathlib import Path

from ...registry import ClosureSourceRegistry
from .source import AssetsFileSource, parse_assets_document


def _create_assets_file_source(path: Path, **kwargs) -> AssetsFileSource:
    return AssetsFileSource(path)


ClosureSourceRegistry.register_factory('assets_file', _create_assets_file_source)

__all__ = [
    "AssetsFileSource",
    "parse_assets_document",
]
