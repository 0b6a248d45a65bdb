"""Project and reference information gathered from build items.

These helpers turn the items handed over by the build (the project's own
satellite assemblies, resolved reference paths and their satellites, the
compiler options item) into the values the manifest builder works with.
"""

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .core.casing import CaseInsensitiveDict
from .core.errors import MissingMetadataError
from .core.types import CompilationOptions, TaskItem

PROJECT_REFERENCE = "ProjectReference"

_FUSION_VERSION = re.compile(r"(?:^|,)\s*Version\s*=\s*(?P<version>[^,\s]+)", re.IGNORECASE)


def _file_name(path: str) -> str:
    return re.split(r"[\\/]", path)[-1]


def _file_name_without_extension(path: str) -> str:
    return os.path.splitext(_file_name(path))[0]


@dataclass(frozen=True)
class ResourceAssemblyInfo:
    """Satellite assembly of a project or reference.

    Attributes:
        culture: Locale of the satellite, e.g. 'de'
        relative_path: Path relative to the application, '/' separated
    """

    culture: str
    relative_path: str

    @classmethod
    def create_from_satellite_item(cls, item: TaskItem) -> "ResourceAssemblyInfo":
        """Build from an item carrying 'Culture' and 'DestinationSubDirectory' metadata."""
        sub_directory = item.get_metadata("DestinationSubDirectory").replace("\\", "/")
        if sub_directory and not sub_directory.endswith("/"):
            sub_directory += "/"
        return cls(
            culture=item.get_metadata("Culture"),
            relative_path=sub_directory + _file_name(item.item_spec),
        )


@dataclass
class SingleProjectInfo:
    """Identity and outputs of one project (the main project or a referenced one)."""

    project_path: str
    name: str
    version: Optional[str]
    output_name: str
    resource_assemblies: list[ResourceAssemblyInfo] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        project_path: str,
        name: str,
        file_extension: str,
        version: str,
        satellite_assemblies: Iterable[TaskItem] = (),
    ) -> "SingleProjectInfo":
        """Describe the project being built."""
        return cls(
            project_path=project_path,
            name=name,
            version=version,
            output_name=f"{name}{file_extension}",
            resource_assemblies=[
                ResourceAssemblyInfo.create_from_satellite_item(item) for item in satellite_assemblies
            ],
        )


def is_project_reference(item: TaskItem) -> bool:
    return item.get_metadata("ReferenceSourceTarget").lower() == PROJECT_REFERENCE.lower()


def create_project_reference_infos(
    reference_paths: Iterable[TaskItem],
    reference_satellite_paths: Iterable[TaskItem] = (),
) -> CaseInsensitiveDict[SingleProjectInfo]:
    """Describe every referenced project, keyed by its normalized project file path.

    Raises:
        MissingMetadataError: If a project reference lacks 'MSBuildSourceProjectFile'
    """
    project_reference_paths = [item for item in reference_paths if is_project_reference(item)]
    infos: CaseInsensitiveDict[SingleProjectInfo] = CaseInsensitiveDict()

    for item in project_reference_paths:
        source_project_file = item.get_metadata("MSBuildSourceProjectFile")
        if not source_project_file:
            raise MissingMetadataError("MSBuildSourceProjectFile", "ReferencePath", item.item_spec)

        output_name = _file_name(item.item_spec)
        infos[normalize_project_path(source_project_file)] = SingleProjectInfo(
            project_path=source_project_file,
            name=_file_name_without_extension(output_name),
            version=None,
            output_name=output_name,
        )

    for satellite in reference_satellite_paths:
        if not is_project_reference(satellite):
            continue
        original_item_spec = satellite.get_metadata("OriginalItemSpec")
        if not original_item_spec:
            continue
        owner = next((r for r in project_reference_paths if r.item_spec == original_item_spec), None)
        if owner is None:
            continue
        info = infos.get(normalize_project_path(owner.get_metadata("MSBuildSourceProjectFile")))
        if info is not None:
            info.resource_assemblies.append(ResourceAssemblyInfo.create_from_satellite_item(satellite))

    return infos


def normalize_project_path(path: str) -> str:
    """Normalize a project file path so references and lock file entries compare equal."""
    return os.path.normpath(path.replace("\\", "/"))


@dataclass
class ReferenceInfo:
    """A framework or direct file reference resolved outside of package restore."""

    name: str
    version: str
    full_path: str
    resource_assemblies: list[ResourceAssemblyInfo] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return _file_name(self.full_path)

    @classmethod
    def create_reference_info(cls, item: TaskItem) -> "ReferenceInfo":
        return cls(
            name=_file_name_without_extension(item.item_spec),
            version=get_reference_version(item),
            full_path=item.item_spec,
        )

    @classmethod
    def create_framework_reference_infos(cls, reference_paths: Iterable[TaskItem]) -> list["ReferenceInfo"]:
        """References marked with 'FrameworkFile' metadata."""
        return [
            cls.create_reference_info(item)
            for item in reference_paths
            if item.get_boolean_metadata("FrameworkFile")
        ]

    @classmethod
    def create_direct_reference_infos(
        cls,
        reference_paths: Iterable[TaskItem],
        reference_satellite_paths: Iterable[TaskItem] = (),
    ) -> list["ReferenceInfo"]:
        """Copy-local file references that come neither from a package, a project nor the framework."""
        direct_items = [item for item in reference_paths if is_direct_reference(item)]
        infos = [cls.create_reference_info(item) for item in direct_items]
        by_item_spec = {item.item_spec: info for item, info in zip(direct_items, infos)}

        for satellite in reference_satellite_paths:
            info = by_item_spec.get(satellite.get_metadata("OriginalItemSpec"))
            if info is not None:
                info.resource_assemblies.append(ResourceAssemblyInfo.create_from_satellite_item(satellite))

        return infos


def is_direct_reference(item: TaskItem) -> bool:
    return (
        not is_project_reference(item)
        and not item.get_boolean_metadata("FrameworkFile")
        and not item.get_metadata("NuGetPackageId")
        and item.get_boolean_metadata("CopyLocal")
    )


def get_reference_version(item: TaskItem) -> str:
    """Version from 'Version' metadata, else from the 'FusionName' assembly name."""
    version = item.get_metadata("Version")
    if version:
        return version

    match = _FUSION_VERSION.search(item.get_metadata("FusionName"))
    return match.group("version") if match else ""


def get_package_ids(package_references: Optional[Iterable[TaskItem]]) -> list[str]:
    """Package ids of package reference items, in order."""
    if not package_references:
        return []
    return [item.item_spec for item in package_references if item.item_spec]


def _optional_bool(item: TaskItem, name: str) -> Optional[bool]:
    value = item.get_metadata(name).strip()
    if not value:
        return None
    return value.lower() == "true"


def _optional_str(item: TaskItem, name: str) -> Optional[str]:
    return item.get_metadata(name).strip() or None


def convert_compilation_options(item: Optional[TaskItem]) -> Optional[CompilationOptions]:
    """Read compilation options from the compiler options item.

    Returns None when no item is given; the manifest then carries no
    compile libraries.
    """
    if item is None:
        return None

    defines = tuple(
        define.strip()
        for define in item.get_metadata("DefineConstants").split(";")
        if define.strip()
    )
    output_type = item.get_metadata("OutputType").strip().lower()

    return CompilationOptions(
        defines=defines,
        language_version=_optional_str(item, "LangVersion"),
        platform=_optional_str(item, "PlatformTarget"),
        allow_unsafe=_optional_bool(item, "AllowUnsafeBlocks"),
        warnings_as_errors=_optional_bool(item, "TreatWarningsAsErrors"),
        optimize=_optional_bool(item, "Optimize"),
        key_file=_optional_str(item, "AssemblyOriginatorKeyFile"),
        delay_sign=_optional_bool(item, "DelaySign"),
        public_sign=_optional_bool(item, "PublicSign"),
        debug_type=_optional_str(item, "DebugType"),
        emit_entry_point=output_type in ("exe", "winexe") if output_type else None,
        generate_xml_documentation=_optional_bool(item, "GenerateDocumentationFile"),
    )
