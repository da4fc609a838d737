from dataclasses import dataclass

from ....config.constants import PAGE_PLACEHOLDER
from ...components.entities.component import Component


@dataclass
class Page(Component):
    content: str = PAGE_PLACEHOLDER
