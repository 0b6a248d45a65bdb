"""Project view of a resolved closure.

A ProjectContext pairs the lock file with the one target being built and
answers which libraries belong in the runtime and compile closures.
"""

from collections.abc import Iterable
from typing import Optional

from .core.casing import CaseInsensitiveDict, CaseInsensitiveSet
from .core.nuget import FrameworkName, normalize_version, parse_framework_name, version_range_min
from .core.errors import InvalidTargetFrameworkError
from .sources.base import LockFile, LockFileTarget, LockFileTargetLibrary, PackageDependency


class ProjectContext:
    """Resolved closure for a single framework and runtime identifier.

    Attributes:
        lock_file: The lock file the target came from
        target: The selected target
        platform_library: The shared framework package, when one is named and present
        is_framework_dependent: True when the platform library is provided by
            the host rather than deployed with the application
        is_portable: True for framework-dependent builds without a runtime identifier
    """

    def __init__(
        self,
        lock_file: LockFile,
        target: LockFileTarget,
        platform_library_name: Optional[str] = None,
        is_self_contained: bool = False,
    ):
        self.lock_file = lock_file
        self.target = target
        self.platform_library = (
            self._library_lookup().get(platform_library_name) if platform_library_name else None
        )
        self.is_framework_dependent = self.platform_library is not None and (
            not is_self_contained or not target.runtime_identifier
        )
        self.is_portable = self.is_framework_dependent and not target.runtime_identifier

    @property
    def framework(self) -> FrameworkName:
        return self.target.framework_name

    @property
    def runtime_identifier(self) -> Optional[str]:
        return self.target.runtime_identifier or None

    def _library_lookup(self) -> CaseInsensitiveDict[LockFileTargetLibrary]:
        lookup: CaseInsensitiveDict[LockFileTargetLibrary] = CaseInsensitiveDict()
        for library in self.target.libraries:
            lookup.setdefault(library.name, library)
        return lookup

    def get_top_level_dependencies(self) -> list[str]:
        """Names of the project's direct dependencies for this framework.

        Entries look like 'Newtonsoft.Json >= 10.0.1'; only the name is kept.
        The framework-agnostic group ('') applies to every framework.
        """
        names: list[str] = []
        seen = CaseInsensitiveSet()
        for group_name, entries in self.lock_file.project_file_dependency_groups.items():
            if group_name and not self._is_current_framework(group_name):
                continue
            for entry in entries:
                parts = entry.split()
                if not parts or parts[0] in seen:
                    continue
                seen.add(parts[0])
                names.append(parts[0])
        return names

    def _is_current_framework(self, group_name: str) -> bool:
        try:
            return parse_framework_name(group_name).matches(self.framework)
        except InvalidTargetFrameworkError:
            return False

    def get_runtime_libraries(self) -> list[LockFileTargetLibrary]:
        """Libraries deployed with the application.

        Framework-dependent builds drop the platform library and the part of
        its closure the host provides.
        """
        libraries = self.target.libraries
        if not self.is_framework_dependent or self.platform_library is None:
            return list(libraries)

        exclusions = self._get_platform_exclusion_list(self.platform_library)
        return [library for library in libraries if library.name not in exclusions]

    def get_compile_libraries(self, private_asset_package_ids: Iterable[str] = ()) -> list[LockFileTargetLibrary]:
        """Libraries to compile against, minus private-assets packages.

        Args:
            private_asset_package_ids: Package ids whose assets are runtime-only
        """
        private_ids = list(private_asset_package_ids)
        libraries = self.target.libraries
        if not private_ids:
            return list(libraries)

        exclusions = self._get_private_assets_exclusion_list(private_ids)
        return [library for library in libraries if library.name not in exclusions]

    def _get_platform_exclusion_list(self, platform_library: LockFileTargetLibrary) -> CaseInsensitiveSet:
        lookup = self._library_lookup()
        exclusions = CaseInsensitiveSet([platform_library.name])
        self._collect_platform_dependencies(lookup, platform_library.dependencies, exclusions)
        return exclusions

    def _collect_platform_dependencies(
        self,
        lookup: CaseInsensitiveDict[LockFileTargetLibrary],
        dependencies: list[PackageDependency],
        exclusions: CaseInsensitiveSet,
    ) -> None:
        for dependency in dependencies:
            library = lookup.get(dependency.id)
            if library is None:
                continue
            # Only the exact version the platform asked for is provided by it
            minimum = version_range_min(dependency.version_range)
            if minimum is None or normalize_version(minimum) != normalize_version(library.version):
                continue
            if library.name in exclusions:
                continue
            exclusions.add(library.name)
            self._collect_platform_dependencies(lookup, library.dependencies, exclusions)

    def _get_private_assets_exclusion_list(self, private_ids: list[str]) -> CaseInsensitiveSet:
        """Private packages plus dependencies reachable only through them."""
        lookup = self._library_lookup()
        private_lookup = CaseInsensitiveSet(private_ids)

        public = CaseInsensitiveSet()
        public_to_search: list[str] = []
        private_to_search: list[str] = []
        for name in self.get_top_level_dependencies():
            if name in private_lookup:
                private_to_search.append(name)
            else:
                public.add(name)
                public_to_search.append(name)

        while public_to_search:
            library = lookup.get(public_to_search.pop())
            if library is None:
                continue
            for dependency in library.dependencies:
                if dependency.id not in public:
                    public.add(dependency.id)
                    public_to_search.append(dependency.id)

        exclusions = CaseInsensitiveSet()
        while private_to_search:
            name = private_to_search.pop()
            library = lookup.get(name)
            if library is None or name in exclusions:
                continue
            exclusions.add(name)
            for dependency in library.dependencies:
                if dependency.id not in public:
                    private_to_search.append(dependency.id)

        return exclusions
