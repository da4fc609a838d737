"""Starship platform backend: planets, components and real-time fan-out."""

from .__version__ import __version__

__all__ = ["__version__"]
