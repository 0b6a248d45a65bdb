"""Files excluded by conflict resolution, grouped by package.

Conflict resolution hands over the losing files as items. Each item is
decomposed into the package it came from and its path inside that package,
then filed under the compile or runtime skip set depending on the kind of
conflict.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .core.casing import CaseInsensitiveDict, CaseInsensitiveSet
from .core.types import TaskItem

# ConflictItemType value for compile-time references; anything else is a runtime file
REFERENCE_CONFLICT_ITEM_TYPE = "Reference"

SkipSet = CaseInsensitiveDict[CaseInsensitiveSet]


@dataclass
class SkipSets:
    """Compile-time and run-time files to drop, keyed by library name."""

    compile: SkipSet = field(default_factory=CaseInsensitiveDict)
    runtime: SkipSet = field(default_factory=CaseInsensitiveDict)

    def is_empty(self) -> bool:
        return not self.compile and not self.runtime

    @staticmethod
    def add_to(skip_set: SkipSet, package_id: str, sub_path: str) -> None:
        if package_id not in skip_set:
            skip_set[package_id] = CaseInsensitiveSet()
        skip_set[package_id].add(sub_path)


def get_package_parts(item: TaskItem) -> tuple[Optional[str], Optional[str]]:
    """Split a skipped file into (package id, path inside the package).

    'NuGetPackageId' and 'PathInPackage' metadata are used when present.
    Otherwise the item path is walked upwards to the first directory holding
    a .nuspec file, which names the package and marks its root.

    Returns:
        (package_id, sub_path), either of which is None when the file does
        not come from a package
    """
    package_id = item.get_metadata("NuGetPackageId")
    sub_path = item.get_metadata("PathInPackage")
    if package_id and sub_path:
        return package_id, sub_path.replace("\\", "/")

    full_path = Path(item.item_spec)
    try:
        for directory in full_path.parents:
            nuspecs = sorted(directory.glob("*.nuspec"))
            if nuspecs:
                relative = full_path.relative_to(directory)
                return nuspecs[0].stem, relative.as_posix()
    except (OSError, ValueError):
        # Unreadable directories mean the file can't be attributed to a package
        return None, None

    return None, None


def load_files_to_skip(files_to_skip: Iterable[TaskItem]) -> SkipSets:
    """Build compile and runtime skip sets from conflict resolution output.

    Items that cannot be attributed to a package are ignored.
    """
    skip_sets = SkipSets()

    for item in files_to_skip:
        package_id, sub_path = get_package_parts(item)
        if not package_id or not sub_path:
            continue

        item_type = item.get_metadata("ConflictItemType")
        target = skip_sets.compile if item_type == REFERENCE_CONFLICT_ITEM_TYPE else skip_sets.runtime
        SkipSets.add_to(target, package_id, sub_path)

    return skip_sets
