"""NuGet naming helpers: target frameworks, versions and package file names."""

import re
from dataclasses import dataclass

from .errors import InvalidTargetFrameworkError

NETCOREAPP = ".NETCoreApp"
NETSTANDARD = ".NETStandard"
NETFRAMEWORK = ".NETFramework"

# Short folder name prefixes, longest first so 'netcoreapp' wins over 'net'
_SHORT_IDENTIFIERS = (
    ("netcoreapp", NETCOREAPP),
    ("netstandard", NETSTANDARD),
)

_FULL_NAME_PATTERN = re.compile(
    r"^(?P<identifier>[^,]+),\s*Version=v?(?P<version>\d+(?:\.\d+)*)(?:,\s*Profile=(?P<profile>.+))?$",
    re.IGNORECASE,
)
_SHORT_NAME_PATTERN = re.compile(r"^(?P<prefix>[a-z]+)(?P<version>\d+(?:\.\d+)*)(?:-(?P<platform>.+))?$")

PLACEHOLDER_FILE = "_._"


@dataclass(frozen=True)
class FrameworkName:
    """A parsed target framework.

    Attributes:
        identifier: Framework identifier, e.g. '.NETCoreApp'
        version: Version tuple padded to at least two parts
        profile: Optional profile name
    """

    identifier: str
    version: tuple[int, ...]
    profile: str = ""

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)

    @property
    def dotnet_framework_name(self) -> str:
        """Full name used as the target key in assets files."""
        name = f"{self.identifier},Version=v{self.version_string}"
        if self.profile:
            name += f",Profile={self.profile}"
        return name

    def matches(self, other: "FrameworkName") -> bool:
        return (
            self.identifier.casefold() == other.identifier.casefold()
            and _trim_version(self.version) == _trim_version(other.version)
            and self.profile.casefold() == other.profile.casefold()
        )


def _trim_version(version: tuple[int, ...]) -> tuple[int, ...]:
    parts = list(version)
    while len(parts) > 2 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def _pad_version(parts: list[int]) -> tuple[int, ...]:
    while len(parts) < 2:
        parts.append(0)
    return tuple(parts)


def parse_framework_name(value: str) -> FrameworkName:
    """Parse a target framework moniker.

    Accepts short folder names ('netcoreapp2.0', 'net6.0-windows', 'net461')
    and full names ('.NETCoreApp,Version=v2.0').

    Raises:
        InvalidTargetFrameworkError: If the moniker is not recognized
    """
    if not value or not value.strip():
        raise InvalidTargetFrameworkError("Target framework is empty")

    text = value.strip()

    full = _FULL_NAME_PATTERN.match(text)
    if full:
        parts = [int(p) for p in full.group("version").split(".")]
        return FrameworkName(
            identifier=full.group("identifier").strip(),
            version=_pad_version(parts),
            profile=full.group("profile") or "",
        )

    short = _SHORT_NAME_PATTERN.match(text.lower())
    if not short:
        raise InvalidTargetFrameworkError(f"Unrecognized target framework: '{value}'")

    prefix = short.group("prefix")
    version = short.group("version")

    for short_prefix, identifier in _SHORT_IDENTIFIERS:
        if prefix == short_prefix:
            return FrameworkName(identifier, _pad_version([int(p) for p in version.split(".")]))

    if prefix == "net":
        if "." in version:
            parts = [int(p) for p in version.split(".")]
            if parts[0] >= 5:
                return FrameworkName(NETCOREAPP, _pad_version(parts))
            return FrameworkName(NETFRAMEWORK, _pad_version(parts))
        # net461 -> 4.6.1, net40 -> 4.0
        return FrameworkName(NETFRAMEWORK, _pad_version([int(digit) for digit in version]))

    raise InvalidTargetFrameworkError(f"Unrecognized target framework: '{value}'")


def normalize_version(version: str) -> str:
    """Normalize a NuGet version string.

    Pads to three numeric parts, drops a zero fourth part, lowercases the
    release label and strips build metadata.

    Example:
        >>> normalize_version('1.0')
        '1.0.0'
        >>> normalize_version('2.1.0.0-Beta+sha.1')
        '2.1.0-beta'
    """
    text = version.strip().split("+", 1)[0]
    release, _, label = text.partition("-")
    parts = [part for part in release.split(".") if part != ""]
    numbers = []
    for part in parts:
        numbers.append(str(int(part)) if part.isdigit() else part.lower())
    while len(numbers) < 3:
        numbers.append("0")
    if len(numbers) == 4 and numbers[3] == "0":
        numbers.pop()
    normalized = ".".join(numbers)
    if label:
        normalized += "-" + label.lower()
    return normalized


def version_range_min(version_range: str) -> str | None:
    """Return the minimum version of a NuGet version range, or None.

    Example:
        >>> version_range_min('[4.3.0, )')
        '4.3.0'
        >>> version_range_min('4.3.0')
        '4.3.0'
    """
    text = version_range.strip()
    if not text:
        return None
    if text[0] in "[(":
        lower = text[1:].split(",", 1)[0].rstrip("])").strip()
        return lower or None
    return text


def hash_file_name(package_id: str, version: str) -> str:
    """File name of the sha512 file next to a package in the packages folder."""
    return f"{package_id}.{normalize_version(version)}.nupkg.sha512".lower()


def is_placeholder(path: str) -> bool:
    """True for the '_._' marker NuGet uses to denote an intentionally empty folder."""
    return path.replace("\\", "/").rsplit("/", 1)[-1] == PLACEHOLDER_FILE
