"""Planned filesystem actions."""
from dataclasses import dataclass
from enum import Enum

from stencil.models.paths import ChildPath


class FileOperation(Enum):
    """Operation applied to a destination path."""
    NOTHING = "nothing"  # reserved filter placeholder
    IGNORE = "ignore"  # reserved for ignore patterns
    KEEP = "keep"  # destination already exists, left untouched
    MKDIR = "mkdir"
    COPY_RAW = "copy_raw"
    COPY_RENDER = "copy_render"  # reserved for templated content


@dataclass(frozen=True)
class Action:
    """One planned operation pairing a template entry with its destination."""
    src: ChildPath  # entry in the template folder
    dst: ChildPath  # entry in the destination folder
    operation: FileOperation
