from ....config.constants import ComponentType
from .component import Component

__all__ = ["Component", "ComponentType"]
