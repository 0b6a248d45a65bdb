"""Command-line interface for deps file generation.

This module provides the CLI entry point for writing a deps.json file from
build request files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from .config import TaskInputs
from .core.errors import DepsFileError
from .pipeline import DepsFilePipeline


def generate_deps_file(inputs: TaskInputs) -> list[Path]:
    """Generate the deps file described by the inputs.

    Args:
        inputs: Build inputs

    Returns:
        Paths of the files written

    Raises:
        DepsFileError: If any input is invalid; nothing is written
    """
    print(f"Reading assets file: {inputs.assets_file_path}", file=sys.stderr)
    pipeline = DepsFilePipeline(inputs)
    files_written = pipeline.run()
    print(f"Wrote {len(files_written)} file(s)", file=sys.stderr)
    return files_written


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="generate-deps-file",
        description="Generate the deps.json dependency manifest for a compiled application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  generate-deps-file request.json

  # Layer a project request over shared defaults
  generate-deps-file defaults.yaml app.yaml

  # Override the output path and runtime identifier
  generate-deps-file request.json --deps-file bin/App.deps.json --runtime-identifier linux-x64
        """,
    )

    parser.add_argument(
        "requests",
        nargs="+",
        help="Request files (JSON or YAML) describing the build inputs; later files override earlier ones",
    )

    parser.add_argument("--deps-file", help="Path of the deps.json file to write")

    parser.add_argument("--runtime-identifier", help="Runtime identifier to generate the manifest for")

    parser.add_argument(
        "--self-contained",
        action="store_true",
        default=None,
        help="Treat the application as self-contained",
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the deps file generator."""
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            stream=sys.stderr,
        )

    overrides: dict[str, Any] = {}
    if args.deps_file:
        overrides["deps_file_path"] = args.deps_file
    if args.runtime_identifier:
        overrides["runtime_identifier"] = args.runtime_identifier
    if args.self_contained:
        overrides["is_self_contained"] = True

    # Validate request files exist
    for request in args.requests:
        path = Path(request)
        if not path.is_file():
            print(f"Error: Request file does not exist: {path}", file=sys.stderr)
            sys.exit(1)

    try:
        inputs = TaskInputs.from_files(*args.requests, overrides=overrides)
        files_written = generate_deps_file(inputs)
    except (DepsFileError, OSError) as e:
        print(f"Error: Failed to generate deps file: {e}", file=sys.stderr)
        sys.exit(1)

    for path in files_written:
        print(path)


if __name__ == "__main__":
    main()
