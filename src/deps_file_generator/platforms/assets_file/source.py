"""Closure source backed by a project.assets.json file.

Only the parts the manifest builder needs are read: the resolved targets,
package-level library metadata and the project's direct dependencies.
"""

import json
from pathlib import Path
from typing import Any

from ...core.errors import AssetsFileError
from ...sources.base import (
    ClosureSource,
    LockFile,
    LockFileItem,
    LockFileLibrary,
    LockFileTarget,
    LockFileTargetLibrary,
    PackageDependency,
)


def _split_library_key(key: str) -> tuple[str, str]:
    name, separator, version = key.partition("/")
    if not separator or not name or not version:
        raise AssetsFileError(f"Invalid library key in assets file: '{key}'")
    return name, version


def _split_target_key(key: str) -> tuple[str, str | None]:
    framework, _, runtime_identifier = key.partition("/")
    return framework, runtime_identifier or None


def _read_mapping(value: Any, description: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise AssetsFileError(f"{description} must be an object")
    return value


def _read_type(value: dict[str, Any], key: str) -> str:
    library_type = value.get("type", "package")
    if not isinstance(library_type, str):
        raise AssetsFileError(f"'type' of '{key}' must be a string")
    return library_type


def _read_items(value: Any, section: str, library_key: str) -> list[LockFileItem]:
    if value is None:
        return []
    if not isinstance(value, dict):
        raise AssetsFileError(f"'{section}' of '{library_key}' must be an object")
    items = []
    for path, properties in value.items():
        props = properties if isinstance(properties, dict) else {}
        items.append(LockFileItem(path=path, properties={k: str(v) for k, v in props.items()}))
    return items


def _read_target_library(key: str, value: Any) -> LockFileTargetLibrary:
    if not isinstance(value, dict):
        raise AssetsFileError(f"Target library '{key}' must be an object")

    name, version = _split_library_key(key)
    dependencies = [
        PackageDependency(id=dep_id, version_range=str(dep_range or ""))
        for dep_id, dep_range in _read_mapping(
            value.get("dependencies"), f"'dependencies' of '{key}'"
        ).items()
    ]

    return LockFileTargetLibrary(
        name=name,
        version=version,
        type=_read_type(value, key),
        dependencies=dependencies,
        compile_time_assemblies=_read_items(value.get("compile"), "compile", key),
        runtime_assemblies=_read_items(value.get("runtime"), "runtime", key),
        native_libraries=_read_items(value.get("native"), "native", key),
        resource_assemblies=_read_items(value.get("resource"), "resource", key),
        runtime_targets=_read_items(value.get("runtimeTargets"), "runtimeTargets", key),
    )


def _read_library(key: str, value: Any) -> LockFileLibrary:
    if not isinstance(value, dict):
        raise AssetsFileError(f"Library '{key}' must be an object")

    name, version = _split_library_key(key)
    return LockFileLibrary(
        name=name,
        version=version,
        type=_read_type(value, key),
        path=value.get("path"),
        sha512=value.get("sha512"),
        msbuild_project=value.get("msbuildProject"),
    )


def parse_assets_document(document: Any) -> LockFile:
    """Convert a decoded project.assets.json document into a LockFile.

    Raises:
        AssetsFileError: If the document structure is invalid
    """
    if not isinstance(document, dict):
        raise AssetsFileError("Assets file must contain a JSON object")

    targets_section = document.get("targets")
    if not isinstance(targets_section, dict):
        raise AssetsFileError("Assets file has no 'targets' section")

    targets = []
    for target_key, libraries in targets_section.items():
        if not isinstance(libraries, dict):
            raise AssetsFileError(f"Target '{target_key}' must be an object")
        framework, runtime_identifier = _split_target_key(target_key)
        targets.append(
            LockFileTarget(
                framework=framework,
                runtime_identifier=runtime_identifier,
                libraries=[_read_target_library(key, value) for key, value in libraries.items()],
            )
        )

    libraries = [
        _read_library(key, value)
        for key, value in _read_mapping(document.get("libraries"), "'libraries'").items()
    ]

    groups = _read_mapping(document.get("projectFileDependencyGroups"), "'projectFileDependencyGroups'")
    dependency_groups = {}
    for name, entries in groups.items():
        entries = entries or []
        if not isinstance(entries, list) or not all(isinstance(entry, str) for entry in entries):
            raise AssetsFileError(f"Dependency group '{name}' must be a list of strings")
        dependency_groups[name] = list(entries)

    return LockFile(
        targets=targets,
        libraries=libraries,
        project_file_dependency_groups=dependency_groups,
    )


class AssetsFileSource(ClosureSource):
    """Source adapter for project.assets.json files.

    Example:
        >>> source = AssetsFileSource(Path('obj/project.assets.json'))
        >>> context = source.create_project_context(parse_framework_name('netcoreapp2.0'))
    """

    def __init__(self, path: Path):
        """Initialize assets file source.

        Args:
            path: Path to project.assets.json
        """
        self.path = Path(path)
        self._lock_file: LockFile | None = None

    def load_lock_file(self) -> LockFile:
        """Read and parse the assets file. The result is kept for later calls.

        Raises:
            AssetsFileError: If the file is missing, not JSON or malformed
        """
        if self._lock_file is None:
            try:
                with self.path.open("r", encoding="utf-8-sig") as f:
                    document = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise AssetsFileError(f"Failed to read assets file {self.path}: {e}") from e

            self._lock_file = parse_assets_document(document)

        return self._lock_file
