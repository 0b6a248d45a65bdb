"""Base transformer class for rewriting assembled manifests.

Transformers take a complete dependency manifest and return a new one.
They never mutate their input.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.types import DependencyContext


class ContextTransformer(ABC):
    """Abstract base class for manifest transformers."""

    @abstractmethod
    def transform(self, context: "DependencyContext") -> "DependencyContext":
        """Transform a manifest.

        Args:
            context: The manifest to transform

        Returns:
            The transformed manifest. Implementations may return the input
            itself when there is nothing to change.
        """
        pass
