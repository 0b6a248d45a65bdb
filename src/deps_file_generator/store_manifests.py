"""Runtime store descriptors: packages already present in a shared store.

A descriptor is an XML file listing packages by id and version:

    <StoreArtifacts>
      <Package Id="Newtonsoft.Json" Version="10.0.3" />
    </StoreArtifacts>

Merging several descriptors yields an index from package identity to the
descriptor file names that declared it.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from lxml import etree

from .core.errors import StoreArtifactParseError
from .core.types import FilteredPackageIndex, PackageIdentity

logger = logging.getLogger(__name__)

STORE_LABEL_SEPARATOR = ";"


def parse_store_artifacts(path: str | Path) -> list[PackageIdentity]:
    """Parse one store descriptor into the packages it declares.

    Every 'Package' element in the document is read, at any depth.

    Raises:
        StoreArtifactParseError: If the file can't be read, isn't well-formed
            XML, or a Package element lacks 'Id' or 'Version'
    """
    try:
        tree = etree.parse(str(path))
    except (OSError, etree.XMLSyntaxError) as e:
        raise StoreArtifactParseError(f"Failed to parse store descriptor '{path}': {e}") from e

    packages: list[PackageIdentity] = []
    for element in tree.getroot().iter("Package"):
        package_id = element.get("Id")
        version = element.get("Version")
        if not package_id or not version:
            raise StoreArtifactParseError(
                f"Package element on line {element.sourceline} of '{path}' "
                "must have 'Id' and 'Version' attributes"
            )
        packages.append(PackageIdentity(package_id, version))

    return packages


def get_filtered_packages(descriptor_paths: Sequence[str | Path] | None) -> FilteredPackageIndex:
    """Merge store descriptors into a filtered package index.

    Args:
        descriptor_paths: Descriptor files in the order they should be labelled

    Returns:
        Package identity mapped to the base names of the descriptors that
        declared it, in first-seen order. None when no descriptors are given.

    Raises:
        StoreArtifactParseError: If any descriptor fails to parse
    """
    if not descriptor_paths:
        return None

    filtered: dict[PackageIdentity, list[str]] = {}

    for descriptor_path in descriptor_paths:
        logger.debug("Parsing file %s", descriptor_path)
        packages = parse_store_artifacts(descriptor_path)
        descriptor_name = os.path.basename(str(descriptor_path))

        for package in packages:
            logger.debug("Package %s, version %s", package.id, package.version)
            names = filtered.setdefault(package, [])
            if descriptor_name not in names:
                names.append(descriptor_name)

    return filtered


def format_store_label(names: Sequence[str]) -> str:
    """Join descriptor names into the label recorded in the manifest."""
    return STORE_LABEL_SEPARATOR.join(names)
