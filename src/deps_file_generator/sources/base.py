"""Base abstractions for resolved package closure sources.

This module defines the lock file model the manifest builder consumes and
the interface every closure source implements. How the closure is stored on
disk is up to the source; the builder only sees these structures.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..core.errors import AssetsFileError, InvalidTargetFrameworkError
from ..core.nuget import FrameworkName, parse_framework_name

if TYPE_CHECKING:
    from ..project_context import ProjectContext


@dataclass(frozen=True)
class LockFileItem:
    """Asset file of a resolved library.

    Attributes:
        path: Path relative to the package root, '/' separated
        properties: Extra asset properties ('locale', 'rid', 'assetType')
    """

    path: str
    properties: Mapping[str, str] = field(default_factory=dict)

    @property
    def locale(self) -> str:
        return self.properties.get("locale", "")

    @property
    def runtime(self) -> str:
        return self.properties.get("rid", "")

    @property
    def asset_type(self) -> str:
        return self.properties.get("assetType", "")


@dataclass(frozen=True)
class PackageDependency:
    """Dependency declared by a resolved library, with its version range."""

    id: str
    version_range: str = ""


@dataclass
class LockFileTargetLibrary:
    """A library as resolved for one target framework and runtime.

    Attributes:
        name: Library name
        version: Resolved version
        type: 'package' or 'project'
        dependencies: Declared dependencies in declaration order
        compile_time_assemblies: Assets to compile against
        runtime_assemblies: Managed assets needed at run time
        native_libraries: Native assets needed at run time
        resource_assemblies: Satellite assemblies
        runtime_targets: RID-specific assets
    """

    name: str
    version: str
    type: str = "package"
    dependencies: list[PackageDependency] = field(default_factory=list)
    compile_time_assemblies: list[LockFileItem] = field(default_factory=list)
    runtime_assemblies: list[LockFileItem] = field(default_factory=list)
    native_libraries: list[LockFileItem] = field(default_factory=list)
    resource_assemblies: list[LockFileItem] = field(default_factory=list)
    runtime_targets: list[LockFileItem] = field(default_factory=list)

    @property
    def is_project(self) -> bool:
        return self.type.lower() == "project"

    @property
    def is_package(self) -> bool:
        return self.type.lower() == "package"

    def get_runtime_targets_groups(self, asset_type: str) -> list[tuple[str, list[LockFileItem]]]:
        """Group RID-specific assets of one asset type by runtime identifier.

        Groups appear in the order their runtime identifier is first seen.
        """
        groups: dict[str, list[LockFileItem]] = {}
        for item in self.runtime_targets:
            if item.asset_type.lower() != asset_type.lower():
                continue
            groups.setdefault(item.runtime, []).append(item)
        return list(groups.items())


@dataclass
class LockFileLibrary:
    """Package-level information shared by all targets of a library."""

    name: str
    version: str
    type: str = "package"
    path: Optional[str] = None
    sha512: Optional[str] = None
    msbuild_project: Optional[str] = None


@dataclass
class LockFileTarget:
    """Resolved closure for one framework and optional runtime identifier."""

    framework: str
    runtime_identifier: Optional[str] = None
    libraries: list[LockFileTargetLibrary] = field(default_factory=list)

    @property
    def framework_name(self) -> FrameworkName:
        return parse_framework_name(self.framework)


@dataclass
class LockFile:
    """Resolved package closure for every target of a project.

    Attributes:
        targets: Resolved targets
        libraries: Package-level metadata for every library
        project_file_dependency_groups: Framework name (or '' for all
            frameworks) mapped to the project's direct dependency strings,
            e.g. 'Newtonsoft.Json >= 10.0.1'
    """

    targets: list[LockFileTarget] = field(default_factory=list)
    libraries: list[LockFileLibrary] = field(default_factory=list)
    project_file_dependency_groups: dict[str, list[str]] = field(default_factory=dict)

    def get_target(self, framework: FrameworkName, runtime_identifier: Optional[str]) -> Optional[LockFileTarget]:
        """Find the target for a framework and runtime identifier."""
        rid = (runtime_identifier or "").lower()
        for target in self.targets:
            if (target.runtime_identifier or "").lower() != rid:
                continue
            try:
                target_framework = target.framework_name
            except InvalidTargetFrameworkError:
                continue
            if target_framework.matches(framework):
                return target
        return None

    def get_library(self, name: str, version: str) -> Optional[LockFileLibrary]:
        """Find package-level metadata by name and exact version (case-insensitive)."""
        for library in self.libraries:
            if library.name.lower() == name.lower() and library.version.lower() == version.lower():
                return library
        return None


class ClosureSource(ABC):
    """Abstract base class for resolved closure sources.

    Implementations know how to load a LockFile from wherever the package
    restore step left it. The pipeline only depends on this interface.
    """

    @abstractmethod
    def load_lock_file(self) -> LockFile:
        """Load the resolved closure.

        Returns:
            The parsed lock file

        Raises:
            AssetsFileError: If the closure cannot be read or is malformed
        """
        pass

    def create_project_context(
        self,
        target_framework: FrameworkName,
        runtime_identifier: Optional[str] = None,
        platform_library_name: Optional[str] = None,
        is_self_contained: bool = False,
    ) -> "ProjectContext":
        """Select the target for a framework/runtime and wrap it in a ProjectContext.

        Raises:
            AssetsFileError: If the closure has no such target
        """
        from ..project_context import ProjectContext

        lock_file = self.load_lock_file()
        target = lock_file.get_target(target_framework, runtime_identifier)
        if target is None:
            target_name = target_framework.dotnet_framework_name
            if runtime_identifier:
                target_name += f"/{runtime_identifier}"
            raise AssetsFileError(
                f"Assets file doesn't have a target for '{target_name}'. "
                "Ensure that restore has run and that you have included "
                "the framework and runtime identifier in the project."
            )

        return ProjectContext(lock_file, target, platform_library_name, is_self_contained)
