"""Lookup of closure sources by name.

A request names where its resolved package closure comes from
(``closure_source``, ``assets_file`` by default). Each package under
``platforms/`` registers a factory for one such name when it is imported.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .core.errors import ConfigError

if TYPE_CHECKING:
    from .sources.base import ClosureSource

logger = logging.getLogger(__name__)


class ClosureSourceRegistry:
    """Factories for closure sources, keyed by source name."""

    _factories: dict[str, Callable[..., "ClosureSource"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "ClosureSource"]) -> None:
        """Register ``factory`` under ``name``, replacing any earlier one.

        Example:
            >>> ClosureSourceRegistry.register_factory('assets_file', AssetsFileSource)
        """
        cls._factories[name] = factory

    @classmethod
    def create_source(cls, source_name: str, **kwargs) -> "ClosureSource":
        """Build the closure source registered as ``source_name``.

        Keyword arguments go to the factory unchanged; the assets file
        factory takes ``path``.

        Raises:
            ConfigError: If no factory is registered under that name
        """
        factory = cls._factories.get(source_name)
        if factory is None:
            known = ', '.join(sorted(cls._factories)) or 'none'
            raise ConfigError(f"Unknown closure source '{source_name}' (known: {known})")

        return factory(**kwargs)

    @classmethod
    def list_sources(cls) -> list[str]:
        return list(cls._factories)

    @classmethod
    def discover_platforms(cls) -> None:
        """Import every package under platforms/ so its factories register."""
        platforms_dir = Path(__file__).parent / 'platforms'

        for platform_path in sorted(platforms_dir.iterdir()):
            if not (platform_path / '__init__.py').is_file():
                continue

            importlib.import_module(
                f'.platforms.{platform_path.name}',
                package=__package__,
            )
            logger.debug("Loaded closure source platform %s", platform_path.name)
