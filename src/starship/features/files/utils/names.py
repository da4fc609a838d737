"""Naming rules for file objects and their storage keys."""

import re

from ....config.constants import FILE_NAME_FORBIDDEN

_FORBIDDEN = re.compile(FILE_NAME_FORBIDDEN)


def sanitize_name(name: str) -> str:
    """Replace characters that are unsafe in paths and headers with ``-``."""
    return _FORBIDDEN.sub("-", name)


def storage_key(component_id: str, folder_id: str, object_id: str, name: str) -> str:
    return f"{component_id}/{folder_id}/{object_id}/{name}"
