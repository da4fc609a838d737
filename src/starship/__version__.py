"""Version information for starship-server."""

__version__ = "0.9.0"
__schema_version__ = "0.9"
