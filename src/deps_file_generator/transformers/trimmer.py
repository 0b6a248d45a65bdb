"""Remove conflicting files from an assembled manifest.

Conflict resolution decides which copy of a file wins; the losers are
handed over as skip sets and removed here. Trimming only ever removes asset
paths and resource entries. Library nodes and their order are preserved so
dependency edges pointing at a trimmed library stay valid.
"""

import logging
from collections.abc import Mapping, Set
from dataclasses import replace
from typing import Optional

from ..core.casing import CaseInsensitiveDict, CaseInsensitiveSet
from ..core.types import (
    CompilationLibrary,
    DependencyContext,
    ResourceAssembly,
    RuntimeAssetGroup,
    RuntimeLibrary,
)
from .base import ContextTransformer

logger = logging.getLogger(__name__)


def _as_skip_set(skip: Optional[Mapping[str, Set[str]]]) -> CaseInsensitiveDict[CaseInsensitiveSet]:
    normalized: CaseInsensitiveDict[CaseInsensitiveSet] = CaseInsensitiveDict()
    for name, paths in (skip or {}).items():
        existing = normalized.get(name)
        if existing is None:
            normalized[name] = existing = CaseInsensitiveSet()
        existing |= CaseInsensitiveSet(paths)
    return normalized


def trim_assemblies(assemblies: tuple[str, ...], files_to_trim: Set[str]) -> tuple[str, ...]:
    return tuple(assembly for assembly in assemblies if assembly not in files_to_trim)


def trim_asset_groups(
    asset_groups: tuple[RuntimeAssetGroup, ...], files_to_trim: Set[str]
) -> tuple[RuntimeAssetGroup, ...]:
    return tuple(
        RuntimeAssetGroup(group.runtime, trim_assemblies(group.asset_paths, files_to_trim))
        for group in asset_groups
    )


def trim_resource_assemblies(
    resource_assemblies: tuple[ResourceAssembly, ...], files_to_trim: Set[str]
) -> tuple[ResourceAssembly, ...]:
    return tuple(resource for resource in resource_assemblies if resource.path not in files_to_trim)


class ConflictTrimmer(ContextTransformer):
    """Drop skipped files from compile and runtime libraries.

    Library names and file paths are matched case-insensitively. Paths are
    compared as exact strings, so skip sets must use the same form as the
    library assets ('lib/net6.0/a.dll').

    Example:
        >>> trimmer = ConflictTrimmer(runtime_skip={'PackageA': {'lib/net6.0/a.dll'}})
        >>> trimmed = trimmer.transform(context)
    """

    def __init__(
        self,
        compile_skip: Optional[Mapping[str, Set[str]]] = None,
        runtime_skip: Optional[Mapping[str, Set[str]]] = None,
    ):
        self.compile_skip = _as_skip_set(compile_skip)
        self.runtime_skip = _as_skip_set(runtime_skip)

    def is_empty(self) -> bool:
        return not self.compile_skip and not self.runtime_skip

    def transform(self, context: DependencyContext) -> DependencyContext:
        """Return a manifest without the skipped files.

        Returns the same object when both skip sets are empty. Names in the
        skip sets that match no library are ignored.
        """
        if self.is_empty():
            return context

        return replace(
            context,
            compile_libraries=self.trim_compilation_libraries(context.compile_libraries),
            runtime_libraries=self.trim_runtime_libraries(context.runtime_libraries),
        )

    def trim_compilation_libraries(
        self, compile_libraries: tuple[CompilationLibrary, ...]
    ) -> tuple[CompilationLibrary, ...]:
        trimmed = []
        for library in compile_libraries:
            files_to_skip = self.compile_skip.get(library.name)
            if files_to_skip is None:
                trimmed.append(library)
                continue

            logger.debug("Trimming %d compile file(s) from %s", len(files_to_skip), library.name)
            trimmed.append(replace(library, assemblies=trim_assemblies(library.assemblies, files_to_skip)))
        return tuple(trimmed)

    def trim_runtime_libraries(self, runtime_libraries: tuple[RuntimeLibrary, ...]) -> tuple[RuntimeLibrary, ...]:
        trimmed = []
        for library in runtime_libraries:
            files_to_skip = self.runtime_skip.get(library.name)
            if files_to_skip is None:
                trimmed.append(library)
                continue

            logger.debug("Trimming %d runtime file(s) from %s", len(files_to_skip), library.name)
            trimmed.append(
                replace(
                    library,
                    runtime_assembly_groups=trim_asset_groups(library.runtime_assembly_groups, files_to_skip),
                    native_library_groups=trim_asset_groups(library.native_library_groups, files_to_skip),
                    resource_assemblies=trim_resource_assemblies(library.resource_assemblies, files_to_skip),
                )
            )
        return tuple(trimmed)
