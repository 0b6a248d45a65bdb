"""Encode a DependencyContext as a deps.json document and write it to disk."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Optional

from .core.nuget import PLACEHOLDER_FILE
from .core.types import (
    CompilationLibrary,
    CompilationOptions,
    Dependency,
    DependencyContext,
    Library,
    RuntimeAssetGroup,
    RuntimeLibrary,
)

logger = logging.getLogger(__name__)


def _library_key(library: Library) -> str:
    return f"{library.name}/{library.version}"


def _default_group(groups: tuple[RuntimeAssetGroup, ...]) -> Optional[RuntimeAssetGroup]:
    return next((group for group in groups if not group.runtime), None)


def _asset_list(paths: tuple[str, ...]) -> dict[str, dict]:
    return {path: {} for path in paths}


class DepsJsonWriter:
    """Serializes manifests in the deps.json layout.

    Portable manifests list every library once under the framework target,
    merging its compile and runtime assets. Runtime-specific manifests list
    compile libraries under the framework target and runtime libraries under
    'framework/rid'.
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def to_dict(self, context: DependencyContext) -> dict[str, Any]:
        """Build the deps.json document."""
        document: dict[str, Any] = {
            "runtimeTarget": self._write_runtime_target_info(context),
            "compilationOptions": self._write_compilation_options(context.compilation_options),
            "targets": self._write_targets(context),
            "libraries": self._write_libraries(context),
        }
        if context.runtime_graph:
            document["runtimes"] = {
                fallbacks.runtime: list(fallbacks.fallbacks) for fallbacks in context.runtime_graph
            }
        return document

    def dumps(self, context: DependencyContext) -> str:
        return json.dumps(self.to_dict(context), indent=self.indent) + "\n"

    def write(self, context: DependencyContext, path: str | Path) -> Path:
        """Write the manifest atomically.

        The document is written to a temporary file next to the destination
        and moved into place, so a failed write never leaves a partial file.

        Returns:
            The path written
        """
        return write_text_atomic(Path(path), self.dumps(context))

    @staticmethod
    def _target_name(context: DependencyContext) -> str:
        target = context.target
        if target.is_portable or not target.runtime:
            return target.framework
        return f"{target.framework}/{target.runtime}"

    def _write_runtime_target_info(self, context: DependencyContext) -> dict[str, str]:
        return {
            "name": self._target_name(context),
            "signature": context.target.runtime_signature,
        }

    @staticmethod
    def _write_compilation_options(options: CompilationOptions) -> dict[str, Any]:
        values = {
            "defines": list(options.defines) if options.defines else None,
            "languageVersion": options.language_version,
            "platform": options.platform,
            "allowUnsafe": options.allow_unsafe,
            "warningsAsErrors": options.warnings_as_errors,
            "optimize": options.optimize,
            "keyFile": options.key_file,
            "delaySign": options.delay_sign,
            "publicSign": options.public_sign,
            "debugType": options.debug_type,
            "emitEntryPoint": options.emit_entry_point,
            "xmlDoc": options.generate_xml_documentation,
        }
        return {name: value for name, value in values.items() if value is not None}

    def _write_targets(self, context: DependencyContext) -> dict[str, Any]:
        if context.target.is_portable or not context.target.runtime:
            return {
                context.target.framework: self._write_portable_target(
                    context.runtime_libraries, context.compile_libraries
                )
            }

        return {
            context.target.framework: {
                _library_key(library): self._write_target_library(None, library, compile_only_flag=False)
                for library in context.compile_libraries
            },
            self._target_name(context): {
                _library_key(library): self._write_target_library(library, None, compile_only_flag=False)
                for library in context.runtime_libraries
            },
        }

    def _write_portable_target(
        self,
        runtime_libraries: tuple[RuntimeLibrary, ...],
        compile_libraries: tuple[CompilationLibrary, ...],
    ) -> dict[str, Any]:
        runtime_lookup: dict[str, RuntimeLibrary] = {}
        for library in runtime_libraries:
            runtime_lookup.setdefault(library.name.casefold(), library)
        compile_lookup: dict[str, CompilationLibrary] = {}
        for library in compile_libraries:
            compile_lookup.setdefault(library.name.casefold(), library)

        target: dict[str, Any] = {}
        for name in list(runtime_lookup) + [n for n in compile_lookup if n not in runtime_lookup]:
            runtime_library = runtime_lookup.get(name)
            compile_library = compile_lookup.get(name)
            library: Library = compile_library or runtime_library  # type: ignore[assignment]
            target[_library_key(library)] = self._write_target_library(runtime_library, compile_library)
        return target

    def _write_target_library(
        self,
        runtime_library: Optional[RuntimeLibrary],
        compile_library: Optional[CompilationLibrary],
        compile_only_flag: bool = True,
    ) -> dict[str, Any]:
        entry: dict[str, Any] = {}
        dependencies: list[Dependency] = []

        if runtime_library is not None:
            runtime_group = _default_group(runtime_library.runtime_assembly_groups)
            if runtime_group is not None and runtime_group.asset_paths:
                entry["runtime"] = _asset_list(runtime_group.asset_paths)

            native_group = _default_group(runtime_library.native_library_groups)
            if native_group is not None and native_group.asset_paths:
                entry["native"] = _asset_list(native_group.asset_paths)

            runtime_targets: dict[str, dict[str, str]] = {}
            self._add_runtime_specific_asset_groups(runtime_targets, runtime_library.runtime_assembly_groups, "runtime")
            self._add_runtime_specific_asset_groups(runtime_targets, runtime_library.native_library_groups, "native")
            if runtime_targets:
                entry["runtimeTargets"] = runtime_targets

            if runtime_library.resource_assemblies:
                entry["resources"] = {
                    resource.path: {"locale": resource.locale}
                    for resource in runtime_library.resource_assemblies
                }

            dependencies.extend(runtime_library.dependencies)

        if compile_library is not None:
            if compile_library.assemblies:
                entry["compile"] = _asset_list(compile_library.assemblies)
            dependencies.extend(d for d in compile_library.dependencies if d not in dependencies)

        if dependencies:
            entry = {"dependencies": {d.name: d.version for d in dependencies}, **entry}

        if compile_only_flag and compile_library is not None and runtime_library is None:
            entry["compileOnly"] = True

        return entry

    @staticmethod
    def _add_runtime_specific_asset_groups(
        runtime_targets: dict[str, dict[str, str]],
        asset_groups: tuple[RuntimeAssetGroup, ...],
        asset_type: str,
    ) -> None:
        for group in asset_groups:
            if not group.runtime:
                continue
            info = {"rid": group.runtime, "assetType": asset_type}
            if group.asset_paths:
                for path in group.asset_paths:
                    runtime_targets[path] = dict(info)
            else:
                # Keeps the RID visible to the host even when every asset was removed
                runtime_targets[f"runtime/{group.runtime}/lib/{PLACEHOLDER_FILE}"] = info

    @staticmethod
    def _write_libraries(context: DependencyContext) -> dict[str, Any]:
        libraries: dict[str, Any] = {}
        all_libraries: list[Library] = [*context.runtime_libraries, *context.compile_libraries]
        for library in all_libraries:
            key = _library_key(library)
            if key in libraries:
                continue
            entry: dict[str, Any] = {
                "type": library.type,
                "serviceable": library.serviceable,
                "sha512": library.hash,
            }
            if library.path:
                entry["path"] = library.path
            if library.hash_path:
                entry["hashPath"] = library.hash_path
            if isinstance(library, RuntimeLibrary) and library.runtime_store_manifest_name:
                entry["runtimeStoreManifestName"] = library.runtime_store_manifest_name
            libraries[key] = entry
        return libraries


def _file_mode(path: Path) -> int:
    # New files get the umask default, replaced files keep their mode
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_text_atomic(path: Path, text: str) -> Path:
    """Write text to path through a temporary file and an atomic rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info("Wrote deps file %s", path)
    return path
