"""Tests for request file loading and build inputs."""

import json
from pathlib import Path

import pytest

from deps_file_generator.config import (
    REFERENCE_ASSEMBLIES_ENV,
    TaskInputs,
    deep_merge,
    get_default_reference_assemblies_path,
    load_request_file,
)
from deps_file_generator.core.errors import ConfigError
from deps_file_generator.core.nuget import parse_framework_name
from deps_file_generator.core.types import TaskItem
from deps_file_generator.project_context import ProjectContext

REQUIRED = {
    "project_path": "/src/App/App.csproj",
    "assets_file_path": "/src/App/obj/project.assets.json",
    "deps_file_path": "/src/App/bin/App.deps.json",
    "target_framework": "netcoreapp2.0",
    "assembly_name": "App",
    "assembly_extension": ".dll",
    "assembly_version": "1.0.0",
}


class TestLoadRequestFile:
    """Test reading individual request files."""

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "request.json"
        path.write_text(json.dumps(REQUIRED), encoding="utf-8")

        assert load_request_file(path) == REQUIRED

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "request.yml"
        path.write_text("assembly_name: App\nis_self_contained: true\n", encoding="utf-8")

        assert load_request_file(path) == {"assembly_name": "App", "is_self_contained": True}

    def test_empty_yaml_is_empty_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_request_file(path) == {}

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        """Test that a top-level list is rejected."""
        path = tmp_path / "request.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_request_file(path)

    def test_unreadable_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Failed to read request file"):
            load_request_file(tmp_path / "missing.json")


class TestDeepMerge:
    """Test layering of request values."""

    def test_nested_values_merge(self) -> None:
        base = {"compiler_options": {"item_spec": "opts", "metadata": {"Optimize": "false"}}}
        override = {"compiler_options": {"metadata": {"LangVersion": "7.3"}}}

        merged = deep_merge(base, override)

        assert merged["compiler_options"]["metadata"] == {"Optimize": "false", "LangVersion": "7.3"}
        assert base["compiler_options"]["metadata"] == {"Optimize": "false"}

    def test_lists_are_replaced(self) -> None:
        assert deep_merge({"files_to_skip": ["a"]}, {"files_to_skip": ["b"]}) == {"files_to_skip": ["b"]}


class TestTaskInputs:
    """Test conversion of request mappings into build inputs."""

    def test_required_values(self) -> None:
        inputs = TaskInputs.from_mapping(REQUIRED)

        assert inputs.target_framework == "netcoreapp2.0"
        assert inputs.runtime_identifier is None
        assert inputs.is_self_contained is False
        assert inputs.files_to_skip == []
        assert inputs.compiler_options is None
        assert inputs.target_manifest_file_list is None
        assert inputs.closure_source == "assets_file"

    def test_missing_required_values(self) -> None:
        raw = dict(REQUIRED)
        del raw["assets_file_path"]
        del raw["assembly_name"]

        with pytest.raises(ConfigError, match="assets_file_path, assembly_name"):
            TaskInputs.from_mapping(raw)

    def test_unknown_values(self) -> None:
        with pytest.raises(ConfigError, match="Unknown request values: bogus"):
            TaskInputs.from_mapping({**REQUIRED, "bogus": 1})

    def test_items_from_strings_and_mappings(self) -> None:
        """Test both item forms and case-insensitive metadata."""
        inputs = TaskInputs.from_mapping(
            {
                **REQUIRED,
                "files_to_skip": [
                    "/packages/a/lib/a.dll",
                    {"item_spec": "/packages/b/ref/b.dll", "metadata": {"ConflictItemType": "Reference"}},
                ],
                "compiler_options": {"item_spec": "CompilerOptions", "metadata": {"Optimize": True}},
                "private_assets_package_references": ["Analyzers"],
            }
        )

        assert inputs.files_to_skip[0] == TaskItem("/packages/a/lib/a.dll")
        assert inputs.files_to_skip[1].get_metadata("conflictitemtype") == "Reference"
        assert inputs.compiler_options.get_metadata("Optimize") == "True"
        assert inputs.private_assets_package_references[0].item_spec == "Analyzers"

    def test_bad_item_list(self) -> None:
        with pytest.raises(ConfigError, match="'reference_paths' must be a list"):
            TaskInputs.from_mapping({**REQUIRED, "reference_paths": "a.dll"})

    def test_bad_manifest_list(self) -> None:
        with pytest.raises(ConfigError, match="target_manifest_file_list"):
            TaskInputs.from_mapping({**REQUIRED, "target_manifest_file_list": [1]})

    @pytest.mark.parametrize(
        "value, expected",
        [(True, True), (False, False), ("true", True), ("false", False), (" TRUE ", True), ("False", False)],
    )
    def test_self_contained_flag(self, value, expected: bool) -> None:
        """Test that booleans and 'true'/'false' strings are both accepted."""
        inputs = TaskInputs.from_mapping({**REQUIRED, "is_self_contained": value})

        assert inputs.is_self_contained is expected

    @pytest.mark.parametrize("value", ["yes", "", 1, 0, ["true"]])
    def test_self_contained_flag_rejects_other_values(self, value) -> None:
        with pytest.raises(ConfigError, match="'is_self_contained' must be true or false"):
            TaskInputs.from_mapping({**REQUIRED, "is_self_contained": value})

    def test_self_contained_string_keeps_framework_dependent(self, lock_file) -> None:
        """Test that the string 'false' leaves the build framework-dependent."""
        inputs = TaskInputs.from_mapping({**REQUIRED, "is_self_contained": "false"})
        target = lock_file.get_target(parse_framework_name("netcoreapp2.0"), None)

        context = ProjectContext(
            lock_file, target, "Microsoft.NETCore.App", is_self_contained=inputs.is_self_contained
        )

        assert context.is_framework_dependent
        assert context.is_portable

    def test_from_files_with_overrides(self, tmp_path: Path) -> None:
        """Test that later files and overrides win."""
        base = tmp_path / "base.json"
        base.write_text(json.dumps(REQUIRED), encoding="utf-8")
        layer = tmp_path / "layer.yaml"
        layer.write_text("runtime_identifier: win-x64\nassembly_version: 2.0.0\n", encoding="utf-8")

        inputs = TaskInputs.from_files(base, layer, overrides={"runtime_identifier": "linux-x64"})

        assert inputs.assembly_version == "2.0.0"
        assert inputs.runtime_identifier == "linux-x64"


class TestReferenceAssembliesPath:
    """Test locating installed reference assemblies."""

    def test_environment_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(REFERENCE_ASSEMBLIES_ENV, "/opt/refs")

        assert get_default_reference_assemblies_path() == "/opt/refs"

    def test_explicit_value_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(REFERENCE_ASSEMBLIES_ENV, "/opt/refs")
        inputs = TaskInputs.from_mapping({**REQUIRED, "reference_assemblies_path": "/custom"})

        assert inputs.resolved_reference_assemblies_path() == "/custom"

    def test_falls_back_to_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(REFERENCE_ASSEMBLIES_ENV, "/opt/refs")
        inputs = TaskInputs.from_mapping(REQUIRED)

        assert inputs.resolved_reference_assemblies_path() == "/opt/refs"
