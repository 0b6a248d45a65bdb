"""Deps file generation pipeline.

This module ties the pieces together: it reads the resolved closure through
a registered source, assembles the manifest, removes conflicting files,
validates the encoded document and writes it.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import TaskInputs
from .core.errors import DepsDocumentError
from .core.nuget import parse_framework_name
from .core.types import DependencyContext
from .core.validator import validate_deps_document_with_error_details
from .project_info import (
    ReferenceInfo,
    SingleProjectInfo,
    convert_compilation_options,
    create_project_reference_infos,
    get_package_ids,
)
from .registry import ClosureSourceRegistry
from .skip_list import SkipSets, load_files_to_skip
from .sources.base import ClosureSource
from .store_manifests import get_filtered_packages
from .transformers.builder import ManifestBuilder
from .transformers.trimmer import ConflictTrimmer
from .writer import DepsJsonWriter

logger = logging.getLogger(__name__)


class DepsFilePipeline:
    """Generates one deps file from a set of build inputs.

    Example:
        >>> inputs = TaskInputs.from_files('request.yaml')
        >>> pipeline = DepsFilePipeline(inputs)
        >>> pipeline.run()
        [PosixPath('bin/App.deps.json')]
    """

    def __init__(
        self,
        inputs: TaskInputs,
        source: Optional[ClosureSource] = None,
        writer: Optional[DepsJsonWriter] = None,
    ):
        """Initialize the pipeline.

        Args:
            inputs: Build inputs
            source: Closure source; by default created from the registry
                using inputs.closure_source and inputs.assets_file_path
            writer: Deps document writer
        """
        self.inputs = inputs
        self.source = source or ClosureSourceRegistry.create_source(
            inputs.closure_source, path=Path(inputs.assets_file_path)
        )
        self.writer = writer or DepsJsonWriter()
        self.files_written: list[Path] = []

    def load_skip_sets(self) -> SkipSets:
        return load_files_to_skip(self.inputs.files_to_skip)

    def build_context(self) -> DependencyContext:
        """Assemble the untrimmed manifest."""
        inputs = self.inputs

        project_context = self.source.create_project_context(
            parse_framework_name(inputs.target_framework),
            inputs.runtime_identifier,
            inputs.platform_library_name,
            inputs.is_self_contained,
        )

        main_project = SingleProjectInfo.create(
            inputs.project_path,
            inputs.assembly_name,
            inputs.assembly_extension,
            inputs.assembly_version,
            inputs.assembly_satellite_assemblies,
        )

        builder = ManifestBuilder(
            main_project,
            project_context,
            framework_references=ReferenceInfo.create_framework_reference_infos(inputs.reference_paths),
            direct_references=ReferenceInfo.create_direct_reference_infos(
                inputs.reference_paths, inputs.reference_satellite_paths
            ),
            reference_projects=create_project_reference_infos(
                inputs.reference_paths, inputs.reference_satellite_paths
            ),
            private_asset_package_ids=get_package_ids(inputs.private_assets_package_references),
            compilation_options=convert_compilation_options(inputs.compiler_options),
            reference_assemblies_path=inputs.resolved_reference_assemblies_path(),
            filtered_packages=get_filtered_packages(inputs.target_manifest_file_list),
        )
        return builder.build()

    def generate(self) -> DependencyContext:
        """Assemble the manifest and remove files excluded by conflict resolution."""
        skip_sets = self.load_skip_sets()
        context = self.build_context()
        logger.debug(
            "Built manifest for %s with %d runtime and %d compile libraries",
            context.target.framework,
            len(context.runtime_libraries),
            len(context.compile_libraries),
        )

        if not skip_sets.is_empty():
            context = ConflictTrimmer(skip_sets.compile, skip_sets.runtime).transform(context)

        return context

    def run(self) -> list[Path]:
        """Generate, validate and write the deps file.

        Returns:
            Paths of the files written (exactly one)

        Raises:
            DepsFileError: On any invalid input; nothing is written
        """
        context = self.generate()

        document = self.writer.to_dict(context)
        is_valid, error_msg = validate_deps_document_with_error_details(document)
        if not is_valid:
            logger.error("Generated deps document failed validation: %s", error_msg)
            raise DepsDocumentError(f"Generated deps document is invalid: {error_msg}")

        written = self.writer.write(context, self.inputs.deps_file_path)
        self.files_written.append(written)
        return list(self.files_written)
