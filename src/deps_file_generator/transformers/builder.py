"""Assemble a dependency manifest from a resolved closure.

The builder combines the project being built, its framework, direct and
project references, and the resolved package closure into one
DependencyContext. The result depends only on its inputs, so unchanged
inputs produce an identical manifest.
"""

import hashlib
import os
import re
from collections.abc import Iterable, Mapping
from typing import Optional

from ..core.casing import CaseInsensitiveDict
from ..core.errors import ProjectReferenceError
from ..core.nuget import hash_file_name, is_placeholder
from ..core.types import (
    CompilationLibrary,
    CompilationOptions,
    Dependency,
    DependencyContext,
    FilteredPackageIndex,
    PackageIdentity,
    ResourceAssembly,
    RuntimeAssetGroup,
    RuntimeLibrary,
    TargetInfo,
)
from ..project_context import ProjectContext
from ..project_info import ReferenceInfo, ResourceAssemblyInfo, SingleProjectInfo, normalize_project_path
from ..sources.base import LockFileItem, LockFileTargetLibrary
from ..store_manifests import format_store_label

PROJECT_TYPE = "project"
PACKAGE_TYPE = "package"
REFERENCE_ASSEMBLY_TYPE = "referenceassembly"
REFERENCE_TYPE = "reference"


def _asset_paths(items: Iterable[LockFileItem]) -> tuple[str, ...]:
    return tuple(item.path for item in items if not is_placeholder(item.path))


def _create_resource_assemblies(infos: Iterable[ResourceAssemblyInfo]) -> tuple[ResourceAssembly, ...]:
    return tuple(ResourceAssembly(info.relative_path, info.culture) for info in infos)


class ManifestBuilder:
    """Builds a DependencyContext for one project and target.

    Example:
        >>> builder = ManifestBuilder(
        ...     main_project,
        ...     project_context,
        ...     direct_references=direct_references,
        ...     compilation_options=compilation_options,
        ... )
        >>> context = builder.build()
    """

    def __init__(
        self,
        main_project: SingleProjectInfo,
        project_context: ProjectContext,
        *,
        framework_references: Optional[Iterable[ReferenceInfo]] = None,
        direct_references: Optional[Iterable[ReferenceInfo]] = None,
        reference_projects: Optional[Mapping[str, SingleProjectInfo]] = None,
        private_asset_package_ids: Optional[Iterable[str]] = None,
        compilation_options: Optional[CompilationOptions] = None,
        reference_assemblies_path: Optional[str] = None,
        filtered_packages: FilteredPackageIndex = None,
    ):
        """Initialize the builder.

        Args:
            main_project: The project being built
            project_context: Resolved closure for the target
            framework_references: Framework assemblies referenced by the project
            direct_references: Copy-local file references
            reference_projects: Referenced projects keyed by project file path
            private_asset_package_ids: Packages excluded from the compile closure
            compilation_options: Compiler settings; when None no compile
                libraries are emitted
            reference_assemblies_path: Root of installed reference assemblies,
                used to shorten framework reference paths
            filtered_packages: Packages present in a runtime store, or None
        """
        self.main_project = main_project
        self.project_context = project_context
        self.framework_references = list(framework_references or [])
        self.direct_references = list(direct_references or [])
        self.reference_projects: CaseInsensitiveDict[SingleProjectInfo] = CaseInsensitiveDict(
            (normalize_project_path(path), info) for path, info in (reference_projects or {}).items()
        )
        self.private_asset_package_ids = list(private_asset_package_ids or [])
        self.compilation_options = compilation_options
        self.reference_assemblies_path = reference_assemblies_path
        self.filtered_packages = filtered_packages

    def build(self) -> DependencyContext:
        """Assemble the manifest.

        Raises:
            ProjectReferenceError: If a project library in the closure has no
                matching project reference
        """
        include_compilation_libraries = self.compilation_options is not None

        runtime_exports = self.project_context.get_runtime_libraries()
        compilation_exports = (
            self.project_context.get_compile_libraries(self.private_asset_package_ids)
            if include_compilation_libraries
            else []
        )

        dependency_lookup = self._create_dependency_lookup(compilation_exports + runtime_exports)
        project_dependencies = self._get_project_dependencies(dependency_lookup)

        runtime_libraries: list[RuntimeLibrary] = [self._get_project_runtime_library(project_dependencies)]
        runtime_libraries.extend(
            self._get_runtime_library(export, dependency_lookup) for export in runtime_exports
        )
        runtime_libraries.extend(self._get_direct_reference_runtime_libraries())

        compilation_libraries: list[CompilationLibrary] = []
        if include_compilation_libraries:
            compilation_libraries.append(self._get_project_compilation_library(project_dependencies))
            compilation_libraries.extend(self._get_framework_libraries())
            compilation_libraries.extend(
                self._get_compilation_library(export, dependency_lookup) for export in compilation_exports
            )
            compilation_libraries.extend(self._get_direct_reference_compilation_libraries())

        target = TargetInfo(
            framework=self.project_context.framework.dotnet_framework_name,
            runtime=self.project_context.runtime_identifier,
            runtime_signature=self._generate_runtime_signature(runtime_exports),
            is_portable=self.project_context.is_portable,
        )

        return DependencyContext(
            target=target,
            compilation_options=self.compilation_options or CompilationOptions.default(),
            compile_libraries=tuple(compilation_libraries),
            runtime_libraries=tuple(runtime_libraries),
            runtime_graph=(),
        )

    @staticmethod
    def _create_dependency_lookup(exports: Iterable[LockFileTargetLibrary]) -> CaseInsensitiveDict[Dependency]:
        lookup: CaseInsensitiveDict[Dependency] = CaseInsensitiveDict()
        for export in exports:
            lookup.setdefault(export.name, Dependency(export.name, export.version))
        return lookup

    def _get_project_dependencies(self, dependency_lookup: CaseInsensitiveDict[Dependency]) -> tuple[Dependency, ...]:
        dependencies = [
            dependency_lookup[name]
            for name in self.project_context.get_top_level_dependencies()
            if name in dependency_lookup
        ]
        dependencies.extend(Dependency(r.name, r.version) for r in self.direct_references)
        return tuple(dependencies)

    def _get_project_runtime_library(self, dependencies: tuple[Dependency, ...]) -> RuntimeLibrary:
        return RuntimeLibrary(
            type=PROJECT_TYPE,
            name=self.main_project.name,
            version=self.main_project.version or "",
            hash="",
            dependencies=dependencies,
            serviceable=False,
            runtime_assembly_groups=(RuntimeAssetGroup("", (self.main_project.output_name,)),),
            native_library_groups=(),
            resource_assemblies=_create_resource_assemblies(self.main_project.resource_assemblies),
        )

    def _get_project_compilation_library(self, dependencies: tuple[Dependency, ...]) -> CompilationLibrary:
        return CompilationLibrary(
            type=PROJECT_TYPE,
            name=self.main_project.name,
            version=self.main_project.version or "",
            hash="",
            dependencies=dependencies,
            serviceable=False,
            assemblies=(self.main_project.output_name,),
        )

    def _get_framework_libraries(self) -> list[CompilationLibrary]:
        return [
            CompilationLibrary(
                type=REFERENCE_ASSEMBLY_TYPE,
                name=reference.name,
                version=reference.version,
                hash="",
                dependencies=(),
                serviceable=False,
                assemblies=(self._resolve_framework_reference_path(reference.full_path),),
            )
            for reference in self.framework_references
        ]

    def _resolve_framework_reference_path(self, full_path: str) -> str:
        """Path relative to the reference assemblies root, else the file name."""
        root = self.reference_assemblies_path
        if root and full_path.startswith(root):
            return full_path[len(root):].strip("\\/")
        return re.split(r"[\\/]", full_path)[-1]

    def _get_direct_reference_runtime_libraries(self) -> list[RuntimeLibrary]:
        return [
            RuntimeLibrary(
                type=REFERENCE_TYPE,
                name=reference.name,
                version=reference.version,
                hash="",
                dependencies=(),
                serviceable=False,
                runtime_assembly_groups=(RuntimeAssetGroup("", (reference.file_name,)),),
                native_library_groups=(),
                resource_assemblies=_create_resource_assemblies(reference.resource_assemblies),
            )
            for reference in self.direct_references
        ]

    def _get_direct_reference_compilation_libraries(self) -> list[CompilationLibrary]:
        return [
            CompilationLibrary(
                type=REFERENCE_TYPE,
                name=reference.name,
                version=reference.version,
                hash="",
                dependencies=(),
                serviceable=False,
                assemblies=(reference.file_name,),
            )
            for reference in self.direct_references
        ]

    def _library_fields(
        self, export: LockFileTargetLibrary, dependency_lookup: CaseInsensitiveDict[Dependency]
    ) -> dict:
        """Fields shared by the compile and runtime entries of a closure library."""
        dependencies: list[Dependency] = []
        for package_dependency in export.dependencies:
            dependency = dependency_lookup.get(package_dependency.id)
            if dependency is not None and dependency not in dependencies:
                dependencies.append(dependency)

        fields = {
            "type": export.type.lower(),
            "name": export.name,
            "version": export.version,
            "hash": "",
            "dependencies": tuple(dependencies),
            "serviceable": export.is_package,
        }

        if export.is_package:
            library = self.project_context.lock_file.get_library(export.name, export.version)
            if library is not None:
                if library.sha512:
                    fields["hash"] = f"sha512-{library.sha512}"
                    fields["hash_path"] = hash_file_name(export.name, export.version)
                fields["path"] = library.path

        return fields

    def _get_reference_project_info(self, export: LockFileTargetLibrary) -> SingleProjectInfo:
        library = self.project_context.lock_file.get_library(export.name, export.version)
        project_path = library.msbuild_project if library is not None else None
        if not project_path:
            raise ProjectReferenceError(f"Cannot find project info for '{export.name}'")

        main_directory = os.path.dirname(self.main_project.project_path)
        full_project_path = normalize_project_path(os.path.join(main_directory, project_path))

        info = self.reference_projects.get(full_project_path)
        if info is None:
            raise ProjectReferenceError(
                f"Cannot find project info for '{full_project_path}'. "
                "This can indicate a missing project reference."
            )
        return info

    def _get_runtime_library(
        self, export: LockFileTargetLibrary, dependency_lookup: CaseInsensitiveDict[Dependency]
    ) -> RuntimeLibrary:
        fields = self._library_fields(export, dependency_lookup)

        if export.is_project:
            project_info = self._get_reference_project_info(export)
            return RuntimeLibrary(
                **fields,
                runtime_assembly_groups=(RuntimeAssetGroup("", (project_info.output_name,)),),
                native_library_groups=(),
                resource_assemblies=_create_resource_assemblies(project_info.resource_assemblies),
            )

        runtime_groups = [RuntimeAssetGroup("", _asset_paths(export.runtime_assemblies))]
        runtime_groups.extend(
            RuntimeAssetGroup(rid, tuple(item.path for item in items))
            for rid, items in export.get_runtime_targets_groups("runtime")
        )

        native_groups = [RuntimeAssetGroup("", _asset_paths(export.native_libraries))]
        native_groups.extend(
            RuntimeAssetGroup(rid, tuple(item.path for item in items))
            for rid, items in export.get_runtime_targets_groups("native")
        )

        resources = tuple(
            ResourceAssembly(item.path, item.locale)
            for item in export.resource_assemblies
            if not is_placeholder(item.path)
        )

        return RuntimeLibrary(
            **fields,
            runtime_assembly_groups=tuple(runtime_groups),
            native_library_groups=tuple(native_groups),
            resource_assemblies=resources,
            runtime_store_manifest_name=self._get_runtime_store_manifest_name(export),
        )

    def _get_compilation_library(
        self, export: LockFileTargetLibrary, dependency_lookup: CaseInsensitiveDict[Dependency]
    ) -> CompilationLibrary:
        fields = self._library_fields(export, dependency_lookup)

        if export.is_project:
            assemblies: tuple[str, ...] = (self._get_reference_project_info(export).output_name,)
        else:
            assemblies = _asset_paths(export.compile_time_assemblies)

        return CompilationLibrary(**fields, assemblies=assemblies)

    def _get_runtime_store_manifest_name(self, export: LockFileTargetLibrary) -> Optional[str]:
        if self.filtered_packages is None:
            return None
        names = self.filtered_packages.get(PackageIdentity(export.name, export.version))
        return format_store_label(names) if names else None

    @staticmethod
    def _generate_runtime_signature(runtime_exports: Iterable[LockFileTargetLibrary]) -> str:
        """SHA-1 over 'name|version|' of every runtime package, as lowercase hex."""
        text = "".join(
            f"{export.name}|{export.version}|" for export in runtime_exports if export.is_package
        )
        return hashlib.sha1(text.encode("utf-8")).hexdigest()
