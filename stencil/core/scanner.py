"""Template tree scanner."""
import os
from pathlib import Path
from typing import Iterator, List, Union

from stencil.core.logger import get_logger
from stencil.models.paths import ChildPath

logger = get_logger(__name__)


class TreeScanner:
    """List every entry under a root folder as ``ChildPath`` values.

    Iterating rescans the filesystem each time. Symbolic links are reported
    but never followed. Entries that cannot be read (permission errors,
    dangling links) are skipped instead of aborting the scan.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def __iter__(self) -> Iterator[ChildPath]:
        root = self.root
        if not root.is_dir():
            logger.debug(f"Scan root {root} is not a readable folder")
            return

        yield ChildPath(relative=Path("."), base=root, is_symlink=root.is_symlink())

        for current, dirnames, filenames in os.walk(root, onerror=self._on_error, followlinks=False):
            current_path = Path(current)
            for name in dirnames + filenames:
                entry = current_path / name
                is_symlink = entry.is_symlink()
                if is_symlink and not entry.exists():
                    logger.debug(f"Skipping dangling link {entry}")
                    continue
                yield ChildPath(
                    relative=entry.relative_to(root),
                    base=root,
                    is_symlink=is_symlink,
                )

    @staticmethod
    def _on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable entry {error.filename}: {error.strerror}")


def find_childpaths(root: Union[str, Path]) -> List[ChildPath]:
    """Scan ``root`` once and return the entries as a list."""
    return list(TreeScanner(root))
