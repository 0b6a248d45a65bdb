"""Tests for the conflict trimmer.

This module tests removal of skipped files from an assembled manifest:
- No-op behavior for empty skip sets
- Case-insensitive library and path matching
- Preservation of library nodes, order and fields
- Independence of the compile and runtime skip sets
"""

import pytest

from deps_file_generator.core.types import (
    CompilationLibrary,
    CompilationOptions,
    Dependency,
    DependencyContext,
    ResourceAssembly,
    RuntimeAssetGroup,
    RuntimeLibrary,
    TargetInfo,
)
from deps_file_generator.transformers import ConflictTrimmer


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def package_a_runtime() -> RuntimeLibrary:
    return RuntimeLibrary(
        type="package",
        name="PackageA",
        version="1.0.0",
        hash="sha512-AAAA",
        dependencies=(Dependency("PackageB", "2.0.0"),),
        serviceable=True,
        path="packagea/1.0.0",
        hash_path="packagea.1.0.0.nupkg.sha512",
        runtime_assembly_groups=(
            RuntimeAssetGroup("", ("lib/net6.0/a.dll", "lib/net6.0/b.dll")),
            RuntimeAssetGroup("win", ("runtimes/win/lib/net6.0/a.dll", "lib/net6.0/a.dll")),
        ),
        native_library_groups=(
            RuntimeAssetGroup("linux-x64", ("runtimes/linux-x64/native/liba.so",)),
        ),
        resource_assemblies=(
            ResourceAssembly("lib/net6.0/de/a.resources.dll", "de"),
            ResourceAssembly("lib/net6.0/fr/a.resources.dll", "fr"),
        ),
        runtime_store_manifest_name="store.xml",
    )


@pytest.fixture
def context(package_a_runtime: RuntimeLibrary) -> DependencyContext:
    """Manifest with a project, PackageA and PackageB."""
    project_runtime = RuntimeLibrary(
        type="project",
        name="App",
        version="1.0.0",
        hash="",
        dependencies=(Dependency("PackageA", "1.0.0"),),
        serviceable=False,
        runtime_assembly_groups=(RuntimeAssetGroup("", ("App.dll",)),),
    )
    package_b_runtime = RuntimeLibrary(
        type="package",
        name="PackageB",
        version="2.0.0",
        hash="sha512-BBBB",
        dependencies=(),
        serviceable=True,
        runtime_assembly_groups=(RuntimeAssetGroup("", ("lib/net6.0/PackageB.dll",)),),
    )
    compile_libraries = (
        CompilationLibrary(
            type="project", name="App", version="1.0.0", hash="",
            dependencies=(Dependency("PackageA", "1.0.0"),), serviceable=False,
            assemblies=("App.dll",),
        ),
        CompilationLibrary(
            type="package", name="PackageA", version="1.0.0", hash="sha512-AAAA",
            dependencies=(Dependency("PackageB", "2.0.0"),), serviceable=True,
            assemblies=("ref/net6.0/a.dll", "ref/net6.0/b.dll"),
        ),
        CompilationLibrary(
            type="package", name="PackageB", version="2.0.0", hash="sha512-BBBB",
            dependencies=(), serviceable=True,
            assemblies=("ref/net6.0/PackageB.dll",),
        ),
    )
    return DependencyContext(
        target=TargetInfo(".NETCoreApp,Version=v6.0", None, "abc", True),
        compilation_options=CompilationOptions.default(),
        compile_libraries=compile_libraries,
        runtime_libraries=(project_runtime, package_a_runtime, package_b_runtime),
    )


def _runtime(context: DependencyContext, name: str) -> RuntimeLibrary:
    return next(library for library in context.runtime_libraries if library.name == name)


def _compile(context: DependencyContext, name: str) -> CompilationLibrary:
    return next(library for library in context.compile_libraries if library.name == name)


# ============================================================================
# TestNoOp
# ============================================================================

class TestNoOp:
    """Tests for empty skip sets."""

    def test_no_skip_sets_returns_same_object(self, context: DependencyContext) -> None:
        """Test that trimming with nothing to skip returns the input itself."""
        assert ConflictTrimmer().transform(context) is context

    def test_empty_mappings_return_same_object(self, context: DependencyContext) -> None:
        """Test that empty mappings behave like absent skip sets."""
        trimmer = ConflictTrimmer(compile_skip={}, runtime_skip={})

        assert trimmer.is_empty()
        assert trimmer.transform(context) is context

    def test_unknown_library_leaves_manifest_unchanged(self, context: DependencyContext) -> None:
        """Test that a skip entry for a library not in the manifest is ignored."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageZ": {"lib/x.dll"}})

        trimmed = trimmer.transform(context)

        assert trimmed == context
        for before, after in zip(context.runtime_libraries, trimmed.runtime_libraries):
            assert after is before


# ============================================================================
# TestRuntimeTrimming
# ============================================================================

class TestRuntimeTrimming:
    """Tests for removing run-time files."""

    def test_removes_path_from_every_runtime_group(self, context: DependencyContext) -> None:
        """Test that a skipped path disappears from the default and RID groups."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"lib/net6.0/a.dll"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert library.runtime_assembly_groups == (
            RuntimeAssetGroup("", ("lib/net6.0/b.dll",)),
            RuntimeAssetGroup("win", ("runtimes/win/lib/net6.0/a.dll",)),
        )

    def test_removes_native_assets(self, context: DependencyContext) -> None:
        """Test that native library groups are trimmed too, keeping the empty group."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"runtimes/linux-x64/native/liba.so"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert library.native_library_groups == (RuntimeAssetGroup("linux-x64", ()),)

    def test_removes_resource_assemblies(self, context: DependencyContext) -> None:
        """Test that resource entries whose path is skipped are dropped."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"lib/net6.0/de/a.resources.dll"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert library.resource_assemblies == (ResourceAssembly("lib/net6.0/fr/a.resources.dll", "fr"),)

    def test_matching_is_case_insensitive(self, context: DependencyContext) -> None:
        """Test that library names and file paths match regardless of case."""
        trimmer = ConflictTrimmer(runtime_skip={"packagea": {"LIB/NET6.0/B.DLL"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert library.runtime_assembly_groups[0].asset_paths == ("lib/net6.0/a.dll",)

    def test_paths_are_compared_as_exact_strings(self, context: DependencyContext) -> None:
        """Test that separator differences are not normalized away."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"lib\\net6.0\\a.dll"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert "lib/net6.0/a.dll" in library.runtime_assembly_groups[0].asset_paths

    def test_library_with_all_assets_removed_is_kept(self, context: DependencyContext) -> None:
        """Test that trimming every asset keeps the library and its dependencies."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageB": {"lib/net6.0/PackageB.dll"}})

        trimmed = trimmer.transform(context)
        library = _runtime(trimmed, "PackageB")

        assert [lib.name for lib in trimmed.runtime_libraries] == ["App", "PackageA", "PackageB"]
        assert library.runtime_assembly_groups == (RuntimeAssetGroup("", ()),)
        assert _runtime(trimmed, "App").dependencies == (Dependency("PackageA", "1.0.0"),)

    def test_preserves_library_fields(self, context: DependencyContext, package_a_runtime: RuntimeLibrary) -> None:
        """Test that identity, hash, path and store label survive trimming."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"lib/net6.0/a.dll"}})

        library = _runtime(trimmer.transform(context), "PackageA")

        assert library.type == package_a_runtime.type
        assert library.version == package_a_runtime.version
        assert library.hash == package_a_runtime.hash
        assert library.dependencies == package_a_runtime.dependencies
        assert library.serviceable is True
        assert library.path == package_a_runtime.path
        assert library.hash_path == package_a_runtime.hash_path
        assert library.runtime_store_manifest_name == "store.xml"

    def test_runtime_skip_does_not_touch_compile_libraries(self, context: DependencyContext) -> None:
        """Test that the runtime skip set leaves compile assemblies alone."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"ref/net6.0/a.dll"}})

        trimmed = trimmer.transform(context)

        assert trimmed.compile_libraries == context.compile_libraries

    def test_input_is_not_mutated(self, context: DependencyContext, package_a_runtime: RuntimeLibrary) -> None:
        """Test that the original manifest keeps its assets."""
        trimmer = ConflictTrimmer(runtime_skip={"PackageA": {"lib/net6.0/a.dll"}})

        trimmer.transform(context)

        assert _runtime(context, "PackageA") is package_a_runtime
        assert "lib/net6.0/a.dll" in package_a_runtime.runtime_assembly_groups[0].asset_paths


# ============================================================================
# TestCompileTrimming
# ============================================================================

class TestCompileTrimming:
    """Tests for removing compile-time files."""

    def test_removes_compile_assembly(self, context: DependencyContext) -> None:
        """Test that a skipped reference assembly is removed."""
        trimmer = ConflictTrimmer(compile_skip={"PackageA": {"ref/net6.0/a.dll"}})

        library = _compile(trimmer.transform(context), "PackageA")

        assert library.assemblies == ("ref/net6.0/b.dll",)

    def test_compile_skip_does_not_touch_runtime_libraries(self, context: DependencyContext) -> None:
        """Test that the compile skip set leaves runtime assets alone."""
        trimmer = ConflictTrimmer(compile_skip={"PackageA": {"lib/net6.0/a.dll"}})

        trimmed = trimmer.transform(context)

        assert trimmed.runtime_libraries == context.runtime_libraries

    def test_order_and_other_libraries_preserved(self, context: DependencyContext) -> None:
        """Test that library order is unchanged and untouched entries are shared."""
        trimmer = ConflictTrimmer(compile_skip={"PackageB": {"ref/net6.0/PackageB.dll"}})

        trimmed = trimmer.transform(context)

        assert [lib.name for lib in trimmed.compile_libraries] == ["App", "PackageA", "PackageB"]
        assert trimmed.compile_libraries[1] is context.compile_libraries[1]
        assert _compile(trimmed, "PackageB").assemblies == ()

    def test_target_and_options_preserved(self, context: DependencyContext) -> None:
        """Test that target info and compilation options carry over."""
        trimmer = ConflictTrimmer(compile_skip={"PackageA": {"ref/net6.0/a.dll"}})

        trimmed = trimmer.transform(context)

        assert trimmed.target == context.target
        assert trimmed.compilation_options == context.compilation_options
        assert trimmed.runtime_graph == context.runtime_graph
