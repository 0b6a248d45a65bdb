"""Build inputs for deps file generation.

The build hands its inputs over as one or more request files (JSON or
YAML). Later files override earlier ones key by key, so a shared base
request can be combined with a per-project one.

Example request (YAML):

    project_path: /src/App/App.csproj
    assets_file_path: /src/App/obj/project.assets.json
    deps_file_path: /src/App/bin/App.deps.json
    target_framework: netcoreapp2.0
    assembly_name: App
    assembly_extension: .dll
    assembly_version: 1.0.0
    files_to_skip:
      - item_spec: /packages/foo/1.0.0/lib/netstandard2.0/Foo.dll
        metadata: {ConflictItemType: Reference}
"""

import json
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .core.errors import ConfigError
from .core.types import TaskItem

REFERENCE_ASSEMBLIES_ENV = "DOTNET_REFERENCE_ASSEMBLIES_PATH"

_MONO_REFERENCE_ASSEMBLIES_PATHS = (
    "/Library/Frameworks/Mono.framework/Versions/Current/lib/mono/xbuild-frameworks",
    "/usr/local/lib/mono/xbuild-frameworks",
    "/usr/lib/mono/xbuild-frameworks",
)

REQUIRED_KEYS = (
    "project_path",
    "assets_file_path",
    "deps_file_path",
    "target_framework",
    "assembly_name",
    "assembly_extension",
    "assembly_version",
)

_ITEM_LIST_KEYS = (
    "assembly_satellite_assemblies",
    "reference_paths",
    "reference_satellite_paths",
    "files_to_skip",
    "private_assets_package_references",
)


def load_request_file(path: str | Path) -> Dict[str, Any]:
    """Load one request file into a dict. YAML for .yaml/.yml, JSON otherwise.

    Raises:
        ConfigError: If the file can't be read or doesn't hold a mapping
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read request file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Request file {path} must contain a mapping, got {type(data).__name__}")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _to_item(value: Any, key: str) -> TaskItem:
    if isinstance(value, TaskItem):
        return value
    if isinstance(value, str):
        return TaskItem(value)
    if isinstance(value, dict) and isinstance(value.get("item_spec"), str):
        metadata = value.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ConfigError(f"'{key}' item metadata must be a mapping")
        return TaskItem(value["item_spec"], metadata)
    raise ConfigError(f"'{key}' entries must be strings or mappings with an 'item_spec'")


def _to_items(value: Any, key: str) -> list[TaskItem]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return [_to_item(entry, key) for entry in value]


def _to_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigError(f"'{key}' must be true or false, got {value!r}")


def get_default_reference_assemblies_path() -> Optional[str]:
    """Root of installed framework reference assemblies, if one is known."""
    configured = os.environ.get(REFERENCE_ASSEMBLIES_ENV)
    if configured:
        return configured

    if sys.platform == "win32":
        program_files = os.environ.get("ProgramFiles(x86)") or os.environ.get("ProgramFiles")
        if program_files:
            return os.path.join(program_files, "Reference Assemblies", "Microsoft", "Framework")
        return None

    for candidate in _MONO_REFERENCE_ASSEMBLIES_PATHS:
        if os.path.isdir(candidate):
            return candidate
    return None


@dataclass
class TaskInputs:
    """Everything the pipeline needs for one deps file."""

    project_path: str
    assets_file_path: str
    deps_file_path: str
    target_framework: str
    assembly_name: str
    assembly_extension: str
    assembly_version: str
    runtime_identifier: Optional[str] = None
    platform_library_name: Optional[str] = None
    is_self_contained: bool = False
    assembly_satellite_assemblies: list[TaskItem] = field(default_factory=list)
    reference_paths: list[TaskItem] = field(default_factory=list)
    reference_satellite_paths: list[TaskItem] = field(default_factory=list)
    files_to_skip: list[TaskItem] = field(default_factory=list)
    compiler_options: Optional[TaskItem] = None
    private_assets_package_references: list[TaskItem] = field(default_factory=list)
    target_manifest_file_list: Optional[list[str]] = None
    reference_assemblies_path: Optional[str] = None
    closure_source: str = "assets_file"

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "TaskInputs":
        """Validate a request mapping and convert it.

        Raises:
            ConfigError: On missing required keys, unknown keys or bad values
        """
        missing = [key for key in REQUIRED_KEYS if not raw.get(key)]
        if missing:
            raise ConfigError(f"Missing required request values: {', '.join(missing)}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"Unknown request values: {', '.join(unknown)}")

        values = dict(raw)
        for key in _ITEM_LIST_KEYS:
            values[key] = _to_items(raw.get(key), key)

        if raw.get("compiler_options") is not None:
            values["compiler_options"] = _to_item(raw["compiler_options"], "compiler_options")

        manifests = raw.get("target_manifest_file_list")
        if manifests is not None:
            if not isinstance(manifests, list) or not all(isinstance(m, str) for m in manifests):
                raise ConfigError("'target_manifest_file_list' must be a list of paths")
            values["target_manifest_file_list"] = list(manifests)

        values["is_self_contained"] = _to_bool(raw.get("is_self_contained"), "is_self_contained")

        for key in REQUIRED_KEYS:
            values[key] = str(raw[key])

        return cls(**values)

    @classmethod
    def from_files(cls, *paths: str | Path, overrides: Optional[Dict[str, Any]] = None) -> "TaskInputs":
        """Load and merge request files in order, then apply overrides."""
        merged: Dict[str, Any] = {}
        for path in paths:
            merged = deep_merge(merged, load_request_file(path))
        if overrides:
            merged = deep_merge(merged, overrides)
        return cls.from_mapping(merged)

    def resolved_reference_assemblies_path(self) -> Optional[str]:
        return self.reference_assemblies_path or get_default_reference_assemblies_path()
