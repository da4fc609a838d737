"""Per-request batched loaders."""

from .loaders import Loaders

__all__ = ["Loaders"]
