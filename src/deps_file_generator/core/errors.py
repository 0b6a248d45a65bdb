"""Exceptions raised while generating a deps file.

Every failure that should stop the build derives from DepsFileError so the
command line can report it as a single terminal error.
"""


class DepsFileError(Exception):
    """Base class for deps file generation failures."""


class InvalidTargetFrameworkError(DepsFileError, ValueError):
    """The target framework moniker could not be parsed."""


class AssetsFileError(DepsFileError):
    """The assets file is unreadable, malformed or lacks the requested target."""


class StoreArtifactParseError(DepsFileError):
    """A runtime store descriptor could not be parsed."""


class MissingMetadataError(DepsFileError, ValueError):
    """An input item lacks metadata that is required to interpret it."""

    def __init__(self, metadata_name: str, item_type: str, item_spec: str):
        self.metadata_name = metadata_name
        self.item_type = item_type
        self.item_spec = item_spec
        super().__init__(
            f"Missing '{metadata_name}' metadata on '{item_type}' item '{item_spec}'"
        )


class ProjectReferenceError(DepsFileError):
    """A project library in the closure has no matching project reference."""


class ConfigError(DepsFileError, ValueError):
    """The request describing the build inputs is invalid or incomplete."""


class DepsDocumentError(DepsFileError):
    """The encoded deps document does not conform to the schema."""
