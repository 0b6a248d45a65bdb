"""Shared fixtures: a small restored project and its build items."""

import json
from pathlib import Path

import pytest

from deps_file_generator.core.nuget import parse_framework_name
from deps_file_generator.core.types import TaskItem
from deps_file_generator.platforms.assets_file import parse_assets_document
from deps_file_generator.project_context import ProjectContext
from deps_file_generator.project_info import SingleProjectInfo, create_project_reference_infos

FRAMEWORK = ".NETCoreApp,Version=v2.0"

NEWTONSOFT_SHA = "U82mHQSKaIk+lpSVCbWYKNavmNH1i5xrExDEquU1i6I5pV6UMOqRnJRSlKO3cMPfcpp0RgDY+8jUXHdQ4IfXvw=="


@pytest.fixture
def assets_document() -> dict:
    """A project.assets.json for App (netcoreapp2.0) referencing ClassLib and three packages."""
    return {
        "version": 3,
        "targets": {
            FRAMEWORK: {
                "ClassLib/1.0.0": {
                    "type": "project",
                    "framework": FRAMEWORK,
                    "compile": {"bin/placeholder/ClassLib.dll": {}},
                    "runtime": {"bin/placeholder/ClassLib.dll": {}},
                },
                "Microsoft.CSharp/4.3.0": {
                    "type": "package",
                    "compile": {"ref/netstandard1.0/Microsoft.CSharp.dll": {}},
                    "runtime": {"lib/netstandard1.3/Microsoft.CSharp.dll": {}},
                },
                "Microsoft.NETCore.App/2.0.0": {
                    "type": "package",
                    "dependencies": {"Microsoft.NETCore.Platforms": "2.0.0"},
                    "compile": {"ref/netcoreapp2.0/System.Runtime.dll": {}},
                },
                "Microsoft.NETCore.Platforms/2.0.0": {
                    "type": "package",
                    "compile": {"lib/netstandard1.0/_._": {}},
                    "runtime": {"lib/netstandard1.0/_._": {}},
                },
                "Native.Lib/1.0.0": {
                    "type": "package",
                    "compile": {"lib/netstandard2.0/Native.Lib.dll": {}},
                    "runtime": {"lib/netstandard2.0/Native.Lib.dll": {}},
                    "runtimeTargets": {
                        "runtimes/linux-x64/native/libnative.so": {"assetType": "native", "rid": "linux-x64"},
                        "runtimes/win/lib/netstandard2.0/Native.Lib.dll": {"assetType": "runtime", "rid": "win"},
                        "runtimes/win-x64/native/native.dll": {"assetType": "native", "rid": "win-x64"},
                    },
                },
                "Newtonsoft.Json/10.0.1": {
                    "type": "package",
                    "dependencies": {"Microsoft.CSharp": "4.3.0"},
                    "compile": {"lib/netstandard1.3/Newtonsoft.Json.dll": {}},
                    "runtime": {"lib/netstandard1.3/Newtonsoft.Json.dll": {}},
                    "resource": {
                        "lib/netstandard1.3/de/Newtonsoft.Json.resources.dll": {"locale": "de"},
                    },
                },
            },
        },
        "libraries": {
            "ClassLib/1.0.0": {
                "type": "project",
                "path": "../ClassLib/ClassLib.csproj",
                "msbuildProject": "../ClassLib/ClassLib.csproj",
            },
            "Microsoft.CSharp/4.3.0": {
                "sha512": "P+MBhIM0YX+JqROuf7i306ZLJEjQYA9uUyRDE+OqwUI5sh41e2ZbPQV3LfAPh+29cmceE1pUffXsGfR4eMY3KA==",
                "type": "package",
                "path": "microsoft.csharp/4.3.0",
            },
            "Microsoft.NETCore.App/2.0.0": {
                "sha512": "/mzXF+UtZef+VpzzN88EpvFq5U6z4rj54ZMq/J968H6pcvyLOmcupmTRpJ3CJm8ILoCGh9WI7qpDdiKtuzswrQ==",
                "type": "package",
                "path": "microsoft.netcore.app/2.0.0",
            },
            "Microsoft.NETCore.Platforms/2.0.0": {
                "sha512": "VdLJOCXhZaEMY7Hm2GKiULmn7IEPFE4XC5LPSfBVCUIA8YLZVh846gtfBJalsPQF2PlzdD7ecX7DZEulJ402ZQ==",
                "type": "package",
                "path": "microsoft.netcore.platforms/2.0.0",
            },
            "Native.Lib/1.0.0": {
                "sha512": "bmF0aXZl",
                "type": "package",
                "path": "native.lib/1.0.0",
            },
            "Newtonsoft.Json/10.0.1": {
                "sha512": NEWTONSOFT_SHA,
                "type": "package",
                "path": "newtonsoft.json/10.0.1",
            },
        },
        "projectFileDependencyGroups": {
            FRAMEWORK: [
                "ClassLib >= 1.0.0",
                "Microsoft.NETCore.App >= 2.0.0",
                "Native.Lib >= 1.0.0",
                "Newtonsoft.Json >= 10.0.1",
            ],
        },
    }


@pytest.fixture
def assets_file(tmp_path: Path, assets_document: dict) -> Path:
    """The assets document written to obj/project.assets.json."""
    path = tmp_path / "obj" / "project.assets.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(assets_document), encoding="utf-8")
    return path


@pytest.fixture
def lock_file(assets_document: dict):
    return parse_assets_document(assets_document)


@pytest.fixture
def project_context(lock_file) -> ProjectContext:
    """Portable, framework-dependent context for netcoreapp2.0."""
    target = lock_file.get_target(parse_framework_name("netcoreapp2.0"), None)
    return ProjectContext(lock_file, target, "Microsoft.NETCore.App", is_self_contained=False)


@pytest.fixture
def main_project() -> SingleProjectInfo:
    return SingleProjectInfo.create(
        "/src/App/App.csproj",
        "App",
        ".dll",
        "1.0.0",
        [TaskItem("obj/fr/App.resources.dll", {"Culture": "fr", "DestinationSubDirectory": "fr\\"})],
    )


@pytest.fixture
def reference_paths() -> list[TaskItem]:
    """Resolved references: one project, one framework assembly, one direct file reference."""
    return [
        TaskItem(
            "/src/ClassLib/bin/Debug/netcoreapp2.0/ClassLib.dll",
            {
                "ReferenceSourceTarget": "ProjectReference",
                "MSBuildSourceProjectFile": "/src/ClassLib/ClassLib.csproj",
                "CopyLocal": "true",
            },
        ),
        TaskItem(
            "/refs/.NETFramework/v4.6.1/System.Xml.dll",
            {"FrameworkFile": "true", "FusionName": "System.Xml, Version=4.0.0.0, Culture=neutral"},
        ),
        TaskItem(
            "/libs/Vendor.Tools.dll",
            {"ReferenceSourceTarget": "ResolveAssemblyReference", "CopyLocal": "true", "Version": "2.3.0.0"},
        ),
    ]


@pytest.fixture
def reference_satellite_paths() -> list[TaskItem]:
    return [
        TaskItem(
            "/src/ClassLib/bin/Debug/netcoreapp2.0/de/ClassLib.resources.dll",
            {
                "ReferenceSourceTarget": "ProjectReference",
                "OriginalItemSpec": "/src/ClassLib/bin/Debug/netcoreapp2.0/ClassLib.dll",
                "Culture": "de",
                "DestinationSubDirectory": "de/",
            },
        ),
        TaskItem(
            "/libs/ja/Vendor.Tools.resources.dll",
            {"OriginalItemSpec": "/libs/Vendor.Tools.dll", "Culture": "ja", "DestinationSubDirectory": "ja\\"},
        ),
    ]


@pytest.fixture
def reference_projects(reference_paths, reference_satellite_paths):
    return create_project_reference_infos(reference_paths, reference_satellite_paths)
