"""Type definitions for the dependency manifest.

The manifest model mirrors the structure of a deps.json document. Every
entity is an immutable dataclass; sequences are stored as tuples so values
can be shared between an assembled manifest and its trimmed copy.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from .casing import CaseInsensitiveDict
from .nuget import normalize_version


@dataclass(frozen=True)
class Dependency:
    """Dependency edge from one library to another, by name."""

    name: str
    version: str


@dataclass(frozen=True)
class ResourceAssembly:
    """Locale-specific satellite assembly."""

    path: str
    locale: str


@dataclass(frozen=True)
class RuntimeAssetGroup:
    """Runtime assets for one runtime identifier.

    An empty runtime is the platform-agnostic default group.
    """

    runtime: str = ""
    asset_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class Library:
    """Fields shared by compile and runtime libraries."""

    type: str
    name: str
    version: str
    hash: str
    dependencies: tuple[Dependency, ...]
    serviceable: bool
    path: Optional[str] = None
    hash_path: Optional[str] = None


@dataclass(frozen=True)
class CompilationLibrary(Library):
    """Library entry needed to compile against."""

    assemblies: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuntimeLibrary(Library):
    """Library entry needed at run time."""

    runtime_assembly_groups: tuple[RuntimeAssetGroup, ...] = ()
    native_library_groups: tuple[RuntimeAssetGroup, ...] = ()
    resource_assemblies: tuple[ResourceAssembly, ...] = ()
    runtime_store_manifest_name: Optional[str] = None


@dataclass(frozen=True)
class TargetInfo:
    """Framework and runtime the manifest was generated for."""

    framework: str
    runtime: Optional[str]
    runtime_signature: str
    is_portable: bool


@dataclass(frozen=True)
class CompilationOptions:
    """Compiler settings recorded in the manifest. Passed through untouched."""

    defines: tuple[str, ...] = ()
    language_version: Optional[str] = None
    platform: Optional[str] = None
    allow_unsafe: Optional[bool] = None
    warnings_as_errors: Optional[bool] = None
    optimize: Optional[bool] = None
    key_file: Optional[str] = None
    delay_sign: Optional[bool] = None
    public_sign: Optional[bool] = None
    debug_type: Optional[str] = None
    emit_entry_point: Optional[bool] = None
    generate_xml_documentation: Optional[bool] = None

    @classmethod
    def default(cls) -> "CompilationOptions":
        return cls()


@dataclass(frozen=True)
class RuntimeFallbacks:
    """Runtime identifier and the identifiers it falls back to."""

    runtime: str
    fallbacks: tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyContext:
    """Complete dependency manifest.

    Library order is the insertion order from the resolved closure.
    """

    target: TargetInfo
    compilation_options: CompilationOptions
    compile_libraries: tuple[CompilationLibrary, ...]
    runtime_libraries: tuple[RuntimeLibrary, ...]
    runtime_graph: tuple[RuntimeFallbacks, ...] = ()


@dataclass(frozen=True, eq=False)
class PackageIdentity:
    """Package id and version.

    Ids compare case-insensitively and versions compare in normalized form,
    so 'Foo@1.0' and 'foo@1.0.0' are the same package.
    """

    id: str
    version: str

    @property
    def _key(self) -> tuple[str, str]:
        return (self.id.casefold(), normalize_version(self.version))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return f"{self.id} {self.version}"


# Packages declared present in a runtime store, mapped to the descriptor
# file names that declared them. None means no store filtering was requested.
FilteredPackageIndex = Optional[dict[PackageIdentity, list[str]]]


@dataclass
class TaskItem:
    """Input item: an item spec plus metadata with case-insensitive names.

    Example:
        >>> item = TaskItem('lib/a.dll', {'ConflictItemType': 'Reference'})
        >>> item.get_metadata('conflictitemtype')
        'Reference'
    """

    item_spec: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.metadata = CaseInsensitiveDict(
            {name: "" if value is None else str(value) for name, value in self.metadata.items()}
        )

    def get_metadata(self, name: str) -> str:
        """Metadata value, or an empty string when absent."""
        return self.metadata.get(name, "")

    def get_boolean_metadata(self, name: str) -> bool:
        return self.get_metadata(name).strip().lower() == "true"
